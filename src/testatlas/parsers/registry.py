"""Registration of every built-in framework definition.

Each framework module exposes a ``definition()`` factory. ``register_all_frameworks``
calls all of them, in a fixed order, against a caller-supplied
``FrameworkRegistry``; detection order is decided by the registry's own
priority sort, so the listing order below only matters for readability.

``default_registry()`` is the process-wide registry used at the application
boundary (CLI, ``ScanOptions`` without an explicit registry). Library code
that needs isolation builds its own registry and passes it in.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from testatlas.framework import Definition, FrameworkRegistry
from testatlas.parsers import (
    cargotest,
    cypress,
    gotesting,
    gtest,
    jest,
    junit4,
    junit5,
    kotest,
    minitest,
    mocha,
    mstest,
    nunit,
    phpunit,
    playwright,
    pytest,
    rspec,
    swifttesting,
    testng,
    unittest,
    vitest,
    xctest,
    xunit,
)

logger = logging.getLogger(__name__)

# JavaScript / TypeScript, Python, Go, JVM, .NET, Ruby, Rust, Swift, PHP, C++.
BUILTIN_DEFINITIONS: tuple[Callable[[], Definition], ...] = (
    jest.definition,
    vitest.definition,
    playwright.definition,
    cypress.definition,
    mocha.definition,
    pytest.definition,
    unittest.definition,
    gotesting.definition,
    junit4.definition,
    junit5.definition,
    testng.definition,
    kotest.definition,
    xunit.definition,
    nunit.definition,
    mstest.definition,
    rspec.definition,
    minitest.definition,
    cargotest.definition,
    xctest.definition,
    swifttesting.definition,
    phpunit.definition,
    gtest.definition,
)

_default: FrameworkRegistry | None = None
_default_lock = threading.Lock()


def register_all_frameworks(registry: FrameworkRegistry) -> FrameworkRegistry:
    """Register every built-in framework definition.

    Args:
        registry: The registry to populate. Existing definitions with the
            same names are replaced.

    Returns:
        The same registry, for chaining.
    """
    for factory in BUILTIN_DEFINITIONS:
        registry.register(factory())
    logger.debug("Registered %d framework definitions", len(BUILTIN_DEFINITIONS))
    return registry


def default_registry() -> FrameworkRegistry:
    """Return the process-wide registry pre-loaded with all built-in frameworks.

    Created on first use and shared afterwards.
    """
    global _default
    with _default_lock:
        if _default is None:
            _default = register_all_frameworks(FrameworkRegistry())
        return _default
