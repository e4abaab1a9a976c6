"""Test-file parsers, one module per framework, and their registration."""

from testatlas.parsers.registry import default_registry, register_all_frameworks

__all__ = ["default_registry", "register_all_frameworks"]
