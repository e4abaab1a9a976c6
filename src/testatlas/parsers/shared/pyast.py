"""``ast`` helpers for the Python test parsers."""

from __future__ import annotations

import ast

from testatlas.domain import Location, TestStatus
from testatlas.exceptions import ParseError

_DECORATOR_STATUS: dict[str, TestStatus] = {
    "skip": TestStatus.SKIPPED,
    "skipif": TestStatus.SKIPPED,
    "skipIf": TestStatus.SKIPPED,
    "skipUnless": TestStatus.SKIPPED,
    "xfail": TestStatus.XFAIL,
    "expectedFailure": TestStatus.XFAIL,
}


def parse_module(text: str, filename: str, framework: str) -> ast.Module:
    """Parse Python source, wrapping syntax errors in ``ParseError``."""
    try:
        return ast.parse(text, filename=filename)
    except SyntaxError as exc:
        raise ParseError(framework, filename, f"line {exc.lineno}: {exc.msg}") from exc
    except ValueError as exc:
        raise ParseError(framework, filename, str(exc)) from exc


def dotted_name(node: ast.expr) -> str:
    """Return ``a.b.c`` for attribute chains (calls are unwrapped)."""
    if isinstance(node, ast.Call):
        node = node.func
    parts: list[str] = []
    while isinstance(node, ast.Attribute):
        parts.append(node.attr)
        node = node.value
    if isinstance(node, ast.Name):
        parts.append(node.id)
    return ".".join(reversed(parts))


def marker_status(decorators: list[ast.expr]) -> tuple[TestStatus, str]:
    """Status and modifier text implied by skip/xfail decorators."""
    for decorator in decorators:
        name = dotted_name(decorator)
        status = _DECORATOR_STATUS.get(name.rsplit(".", 1)[-1])
        if status is not None:
            return status, "@" + name
    return TestStatus.ACTIVE, ""


def module_marks(body: list[ast.stmt]) -> list[ast.expr]:
    """Marks assigned to ``pytestmark`` in a module or class body."""
    marks: list[ast.expr] = []
    for stmt in body:
        if not isinstance(stmt, ast.Assign):
            continue
        if not any(isinstance(t, ast.Name) and t.id == "pytestmark" for t in stmt.targets):
            continue
        value = stmt.value
        marks.extend(value.elts if isinstance(value, (ast.List, ast.Tuple)) else [value])
    return marks


def node_location(node: ast.stmt, filename: str) -> Location:
    return Location(
        file=filename,
        start_line=node.lineno,
        end_line=node.end_lineno or node.lineno,
        start_col=node.col_offset + 1,
        end_col=(node.end_col_offset or 0) + 1,
    )
