"""Regex- and ``ast``-based domain-hint extraction for every supported language.

Imports come from the detection layer's per-language extractors, so hints
and detection agree on what a file imports. Calls are found differently per
language family:

- **Python** -- ``ast.Call`` nodes, in source order. A file that does not
  parse yields no hints.
- **Everything else** -- callee chains (``a.b(``, ``a->b(``, ``A::b(``,
  ``name!(``) matched on the masked source, so calls inside strings and
  comments never count. A name preceded on its line by a plain identifier
  (``void setUp(``, ``String name(``) is a declaration, not a call.

Each call is normalised (whitespace removed, ``->``/``::`` folded to ``.``,
at most two segments kept) and then dropped when it is noise or when its
first segment belongs to the language's test-framework vocabulary.
"""

from __future__ import annotations

import ast
import logging
import re

from testatlas.detection import extract_imports
from testatlas.domain import DomainHints, Language
from testatlas.hints.base import DomainHintsExtractor
from testatlas.parsers.shared.lexer import (
    CPP,
    CSHARP,
    GO,
    JAVA,
    JAVASCRIPT,
    KOTLIN,
    PHP,
    RUBY,
    RUST,
    SWIFT,
    Syntax,
    mask_source,
)
from testatlas.parsers.shared.pyast import dotted_name

logger = logging.getLogger(__name__)

_CALL = re.compile(
    r"(?<![\w$.>:])([A-Za-z_$][\w$]*(?:\s*(?:\.|->|::)\s*[A-Za-z_$][\w$]*)*)\s*!?\s*\("
)
_PREVIOUS_WORD = re.compile(r"([\w$]+)[ \t]*$")
_SEPARATORS = re.compile(r"->|::")
_IDENT_CHAR = re.compile(r"[A-Za-z0-9_]")

# Statement keywords that look like calls (``if (``, ``while (``).
_KEYWORDS = frozenset({
    "if", "for", "while", "switch", "catch", "return", "sizeof", "typeof",
    "function", "func", "fn", "def", "fun", "elif", "when", "match",
    "foreach", "using", "lock", "fixed", "unless", "until", "super", "this",
    "synchronized", "assert", "not", "and", "or", "decltype", "alignof",
    "static_assert", "do", "else", "new", "in", "of", "where", "guard",
    "init", "deinit", "constructor", "class", "struct", "enum", "interface",
    "isset", "empty", "array", "list", "echo", "print", "defined", "async",
})

# Words after which a name is still a call, not a declaration.
_CALL_PREFIXES = frozenset({
    "return", "await", "new", "throw", "yield", "else", "in", "of", "do",
    "then", "not", "and", "or", "case", "go", "defer", "try", "echo",
    "print", "puts", "assert", "is", "as", "when", "if", "unless",
})

_JS_CALLS = frozenset({
    "describe", "it", "test", "expect", "beforeEach", "afterEach",
    "beforeAll", "afterAll", "vi", "jest", "cy", "fn", "suite", "context",
    "before", "after", "setup", "teardown", "require",
})

_PYTHON_CALLS = frozenset({
    "pytest", "test", "fixture", "mark", "parametrize", "skip", "skipif",
    "xfail", "setup", "teardown", "setup_method", "teardown_method",
    "setup_class", "teardown_class", "setup_module", "teardown_module",
    "raises", "monkeypatch", "caplog", "capsys", "tmpdir", "request",
    "pytestconfig", "tmp_path", "unittest", "setUp", "tearDown",
    "setUpClass", "tearDownClass", "setUpModule", "tearDownModule", "mock",
    "patch", "Mock", "MagicMock", "self",
})

_GO_CALLS = frozenset({
    "t", "b", "f", "m", "testing", "assert", "require", "suite", "mock",
    "Describe", "Context", "It", "Expect", "BeforeEach", "AfterEach",
})

_JAVA_CALLS = frozenset({
    "assertEquals", "assertNotEquals", "assertTrue", "assertFalse",
    "assertNull", "assertNotNull", "assertSame", "assertNotSame",
    "assertArrayEquals", "assertThrows", "assertDoesNotThrow", "assertAll",
    "assertTimeout", "assertTimeoutPreemptively", "fail", "assumeTrue",
    "assumeFalse", "Assertions", "assertThat", "is", "equalTo", "hasSize",
    "contains", "containsString", "startsWith", "endsWith", "MatcherAssert",
    "mock", "spy", "when", "verify", "doReturn", "doThrow", "doNothing",
    "times", "never", "any", "eq", "anyString", "anyInt", "anyLong",
    "Mockito", "isEqualTo", "isNotNull", "getClass", "toString",
    "hashCode", "equals", "clone",
})

_KOTLIN_CALLS = _JAVA_CALLS | frozenset({
    "describe", "it", "test", "context", "should", "shouldBe",
    "shouldNotBe", "shouldThrow", "every", "coEvery", "coVerify", "mockk",
    "runTest", "runBlocking", "given", "then", "expect", "feature",
    "scenario", "beforeTest", "afterTest", "beforeSpec", "afterSpec",
})

_CSHARP_CALLS = frozenset({
    "Assert", "Assume", "CollectionAssert", "StringAssert", "Mock", "It",
    "Times", "Should", "Verify", "Setup", "Returns", "Substitute", "Arg",
    "Received", "nameof",
})

_RUBY_CALLS = frozenset({
    "describe", "context", "it", "specify", "expect", "let", "let_it_be",
    "before", "after", "around", "subject", "allow", "double",
    "instance_double", "receive", "eq", "be", "raise_error", "include",
    "require", "require_relative", "assert", "assert_equal", "refute",
    "refute_equal", "assert_nil", "assert_raises", "skip", "test",
})

_RUST_CALLS = frozenset({
    "assert", "assert_eq", "assert_ne", "debug_assert", "debug_assert_eq",
    "panic", "println", "eprintln", "print", "format", "vec", "Some", "Ok",
    "Err", "matches", "unreachable", "todo", "unimplemented", "dbg",
})

_SWIFT_CALLS = frozenset({
    "XCTAssert", "XCTAssertEqual", "XCTAssertNotEqual", "XCTAssertTrue",
    "XCTAssertFalse", "XCTAssertNil", "XCTAssertNotNil", "XCTAssertThrowsError",
    "XCTAssertNoThrow", "XCTFail", "XCTUnwrap", "XCTSkip", "XCTSkipIf",
    "XCTSkipUnless", "expect", "require", "Issue", "expectation", "wait",
    "fulfill", "Test", "Suite",
})

_PHP_CALLS = frozenset({
    "$this", "self", "static", "parent", "Mockery", "expect", "test", "it",
    "describe", "beforeEach", "afterEach",
})

_CPP_CALLS = frozenset({
    "TEST", "TEST_F", "TEST_P", "TYPED_TEST", "TYPED_TEST_P",
    "INSTANTIATE_TEST_SUITE_P", "GTEST_SKIP", "SUCCEED", "FAIL",
    "ADD_FAILURE", "MOCK_METHOD", "ON_CALL", "EXPECT_CALL", "testing",
})
_CPP_PREFIXES = ("EXPECT_", "ASSERT_")

_LANGUAGES: dict[Language, tuple[Syntax | None, frozenset[str], tuple[str, ...]]] = {
    Language.TYPESCRIPT: (JAVASCRIPT, _JS_CALLS, ()),
    Language.JAVASCRIPT: (JAVASCRIPT, _JS_CALLS, ()),
    Language.PYTHON: (None, _PYTHON_CALLS, ()),
    Language.GO: (GO, _GO_CALLS, ()),
    Language.JAVA: (JAVA, _JAVA_CALLS, ()),
    Language.KOTLIN: (KOTLIN, _KOTLIN_CALLS, ()),
    Language.CSHARP: (CSHARP, _CSHARP_CALLS, ()),
    Language.RUBY: (RUBY, _RUBY_CALLS, ()),
    Language.RUST: (RUST, _RUST_CALLS, ()),
    Language.SWIFT: (SWIFT, _SWIFT_CALLS, ("XCTAssert",)),
    Language.PHP: (PHP, _PHP_CALLS, ()),
    Language.CPP: (CPP, _CPP_CALLS, _CPP_PREFIXES),
}


def normalize_call(call: str) -> str:
    """Strip whitespace, fold ``->``/``::`` to ``.`` and keep two segments.

    >>> normalize_call("client . orders.list.all")
    'client.orders'
    """
    call = "".join(call.split())
    call = _SEPARATORS.sub(".", call)
    return ".".join(call.split(".", 2)[:2])


def is_noise(call: str) -> bool:
    """Report whether ``call`` carries no domain signal at all."""
    if not call or call in ("$", "fn"):
        return True
    if call[0] in "[(":
        return True
    if len(call) == 1:
        return _IDENT_CHAR.match(call) is None
    return False


class GenericHintsExtractor(DomainHintsExtractor):
    """Domain-hint extractor driven by a per-language vocabulary table.

    Args:
        language: One of the languages in the vocabulary table.

    Raises:
        ValueError: If ``language`` has no vocabulary.
    """

    def __init__(self, language: Language) -> None:
        if language not in _LANGUAGES:
            raise ValueError(f"no domain hints vocabulary for {language.value}")
        self.language = language
        self._syntax, self._framework_calls, self._framework_prefixes = _LANGUAGES[language]

    def extract(self, content: str) -> DomainHints | None:
        if self._syntax is None:
            raw_calls = self._python_calls(content)
            if raw_calls is None:
                return None
        else:
            raw_calls = self._source_calls(content)

        calls: dict[str, None] = {}
        for raw in raw_calls:
            call = normalize_call(raw)
            if is_noise(call) or self._is_framework_call(call):
                continue
            calls.setdefault(call, None)

        imports = extract_imports(self.language, content)
        if not imports and not calls:
            return None
        return DomainHints(imports=tuple(imports), calls=tuple(calls))

    def _is_framework_call(self, call: str) -> bool:
        base = call.split(".", 1)[0]
        return base in self._framework_calls or base.startswith(self._framework_prefixes)

    @staticmethod
    def _python_calls(content: str) -> list[str] | None:
        try:
            tree = ast.parse(content)
        except (SyntaxError, ValueError) as exc:
            logger.debug("Skipping domain hints for unparsable Python: %s", exc)
            return None
        nodes = sorted(
            (node for node in ast.walk(tree) if isinstance(node, ast.Call)),
            key=lambda node: (node.lineno, node.col_offset),
        )
        return [name for name in (dotted_name(node.func) for node in nodes) if name]

    def _source_calls(self, content: str) -> list[str]:
        masked = mask_source(content, self._syntax).masked
        calls: list[str] = []
        for match in _CALL.finditer(masked):
            name = match.group(1)
            if name in _KEYWORDS:
                continue
            line_start = masked.rfind("\n", 0, match.start()) + 1
            previous = _PREVIOUS_WORD.search(masked, line_start, match.start())
            if previous is not None and previous.group(1) not in _CALL_PREFIXES:
                continue
            calls.append(name)
        return calls


_EXTRACTORS: dict[Language, DomainHintsExtractor] = {
    language: GenericHintsExtractor(language) for language in _LANGUAGES
}


def get_extractor(language: Language) -> DomainHintsExtractor | None:
    """Return the shared extractor for ``language``, or None if unsupported."""
    return _EXTRACTORS.get(language)
