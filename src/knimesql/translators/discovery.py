# src/knimesql/translators/discovery.py
"""Translator discovery by package scanning.

Scans the translators package for classes that:
1. Inherit from BaseTranslator
2. Have non-empty ``name`` and ``factory`` class attributes
3. Are not abstract
"""

import importlib
import inspect
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

PACKAGE = "knimesql.translators"

# Modules in the package that never hold translators
EXCLUDED_FILES: frozenset[str] = frozenset(
    {
        "__init__.py",
        "base.py",
        "sql.py",
        "hookspecs.py",
        "manager.py",
        "discovery.py",
        "dispatcher.py",
    }
)


def _discover_in_module(module_name: str, base_class: type) -> list[type]:
    # Translator modules are part of this package; import errors are bugs
    # and propagate.
    module = importlib.import_module(module_name)

    discovered: list[type] = []
    for name, obj in inspect.getmembers(module, inspect.isclass):
        # Must be defined in this module (not imported)
        if obj.__module__ != module.__name__:
            continue
        if not issubclass(obj, base_class) or obj is base_class:
            continue
        if inspect.isabstract(obj):
            continue
        if not getattr(obj, "name", None) or not getattr(obj, "factory", None):
            logger.warning(
                "Class %s in %s inherits from %s but has no name or factory - skipping",
                name,
                module_name,
                base_class.__name__,
            )
            continue
        discovered.append(obj)

    return discovered


def discover_translators(directory: Path | None = None) -> list[type]:
    """Discover the built-in translator classes.

    Args:
        directory: Package directory to scan; defaults to this package.

    Returns:
        Translator classes in file-name order.
    """
    from knimesql.translators.base import BaseTranslator

    directory = directory or Path(__file__).parent
    discovered: list[type] = []
    for py_file in sorted(directory.glob("*.py")):
        if py_file.name in EXCLUDED_FILES:
            continue
        discovered.extend(_discover_in_module(f"{PACKAGE}.{py_file.stem}", BaseTranslator))
    return discovered


def get_translator_description(translator_cls: type) -> str:
    """First non-empty docstring line, or ``"<name> translator"``."""
    if translator_cls.__doc__:
        for line in translator_cls.__doc__.strip().split("\n"):
            cleaned = line.strip()
            if cleaned:
                return cleaned

    name = getattr(translator_cls, "name", translator_cls.__name__)
    return f"{name} translator"


def create_dynamic_hookimpl(translator_classes: list[type], hook_method_name: str) -> object:
    """Create an object whose ``hook_method_name`` hookimpl returns the classes."""
    from knimesql.translators.hookspecs import hookimpl

    class DynamicHookImpl:
        """Dynamically generated hook implementer."""

    def hook_method(self: Any) -> list[type]:
        return translator_classes

    setattr(DynamicHookImpl, hook_method_name, hookimpl(hook_method))
    return DynamicHookImpl()
