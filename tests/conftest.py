"""Shared fixtures for testatlas tests."""

import pathlib

import pytest

SAMPLE_PROJECT = {
    "vitest.config.ts": "export default defineConfig({ test: { globals: true } })\n",
    "src/cart.test.ts": "describe('cart', () => {\n  it('adds', () => {})\n})\n",
    "src/cart.ts": "export const add = (a, b) => a + b\n",
    "tests/test_math.py": "import pytest\n\n\ndef test_add():\n    assert 1 + 1 == 2\n",
    "pkg/math_test.go": 'package math\n\nimport "testing"\n\nfunc TestAdd(t *testing.T) {}\n',
    "README.md": "# demo\n",
}


def write_tree(root: pathlib.Path, files: dict[str, str]) -> pathlib.Path:
    """Write ``files`` (relative path -> text) below ``root``."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


@pytest.fixture
def sample_project(tmp_path: pathlib.Path) -> pathlib.Path:
    """A small polyglot project: vitest (by config), pytest and Go tests."""
    return write_tree(tmp_path / "project", SAMPLE_PROJECT)


@pytest.fixture
def empty_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """An empty directory."""
    empty = tmp_path / "empty"
    empty.mkdir()
    return empty
