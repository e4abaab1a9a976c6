"""testatlas: Test framework detection and test inventory extraction.

Walks a source tree, decides which of the supported test frameworks each
test file uses, and parses every file into a normalized tree of suites and
tests.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
