"""Tests for domain-hint extraction.

Verifies:
    - Calls are normalised to at most two segments with ``.`` separators.
    - Test-framework vocabulary and noise never appear in hints.
    - Python calls come from the AST; other languages from masked source,
      so strings, comments and declarations are ignored.
"""

from __future__ import annotations

import textwrap

import pytest
from hypothesis import given
from hypothesis import strategies as st

from testatlas.domain import DomainHints, Language
from testatlas.hints import GenericHintsExtractor, get_extractor, is_noise, normalize_call

# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

_identifier = st.from_regex(r"[A-Za-z_][A-Za-z0-9_]{0,8}", fullmatch=True)
_separator = st.sampled_from([".", "->", "::", " . "])


@st.composite
def _call_chains(draw: st.DrawFn) -> str:
    parts = draw(st.lists(_identifier, min_size=1, max_size=5))
    text = parts[0]
    for part in parts[1:]:
        text += draw(_separator) + part
    return text


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestNormalizeCall:

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("client . orders.list.all", "client.orders"),
            ("Foo::bar->baz", "Foo.bar"),
            ("$this->repo->save", "$this.repo"),
            ("plain", "plain"),
        ],
    )
    def test_examples(self, raw: str, expected: str) -> None:
        assert normalize_call(raw) == expected

    @given(_call_chains())
    def test_at_most_two_segments(self, raw: str) -> None:
        normalized = normalize_call(raw)
        assert len(normalized.split(".")) <= 2
        assert " " not in normalized
        assert "->" not in normalized and "::" not in normalized


class TestIsNoise:

    @pytest.mark.parametrize("call", ["", "$", "fn", "(x", "[0]", "+"])
    def test_noise(self, call: str) -> None:
        assert is_noise(call)

    @pytest.mark.parametrize("call", ["x", "_", "cart.add", "Cart"])
    def test_signal(self, call: str) -> None:
        assert not is_noise(call)


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------


class TestPythonHints:

    def test_calls_and_imports(self) -> None:
        content = textwrap.dedent("""\
            import pytest
            from shop.cart import Cart

            def test_add():
                cart = Cart()
                cart.add(item)
                assert cart.total() == 1
                with pytest.raises(ValueError):
                    client.orders.create(x)
        """)
        hints = get_extractor(Language.PYTHON).extract(content)
        assert hints == DomainHints(
            imports=("pytest", "shop.cart"),
            calls=("Cart", "cart.add", "cart.total", "client.orders"),
        )

    def test_unparsable_source_yields_nothing(self) -> None:
        assert get_extractor(Language.PYTHON).extract("def broken(:\n") is None


class TestSourceHints:

    def test_javascript(self) -> None:
        content = textwrap.dedent("""\
            import { describe, it, expect } from 'vitest'
            import { createOrder } from '../src/orders'

            describe('orders', () => {
              it('creates', async () => {
                const order = await createOrder({ id: 1 })
                expect(order.total()).toBe(3)
                api.client.post('/x')
                // ignored(call)
                const label = "notACall(1)"
              })
            })
        """)
        hints = GenericHintsExtractor(Language.TYPESCRIPT).extract(content)
        assert hints is not None
        assert hints.imports == ("vitest", "../src/orders")
        assert hints.calls == ("createOrder", "order.total", "api.client")

    def test_java_declarations_are_not_calls(self) -> None:
        content = textwrap.dedent("""\
            class CartTest {
              void setUp() { repo.reset(); }
              @Test void adds() { assertEquals(1, cart.add(item)); }
            }
        """)
        hints = get_extractor(Language.JAVA).extract(content)
        assert hints is not None
        assert hints.calls == ("repo.reset", "cart.add")
        assert hints.imports == ()

    def test_nothing_found(self) -> None:
        assert get_extractor(Language.TYPESCRIPT).extract("const x = 1\n") is None

    def test_every_language_has_an_extractor(self) -> None:
        for language in Language:
            extractor = get_extractor(language)
            assert extractor is not None
            assert extractor.language is language
