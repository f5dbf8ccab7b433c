# src/knimesql/translators/manager.py
"""Translator registry.

Uses pluggy for hook-based registration; the registry itself is an exact
map from factory identifier to translator class.
"""

from typing import Any

import pluggy

from knimesql.translators.base import BaseTranslator
from knimesql.translators.hookspecs import PROJECT_NAME, KnimeSqlTranslatorSpec

HOOK_NAME = "knimesql_get_translators"


class TranslatorRegistrationError(ValueError):
    """Raised when two translators claim the same factory identifier."""


class TranslatorManager:
    """Manages translator registration and lookup.

    Usage:
        manager = TranslatorManager()
        manager.register_builtin_translators()

        translator_cls = manager.get_by_factory("org.knime...RowFilterNodeFactory")
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(KnimeSqlTranslatorSpec)
        self._translators: dict[str, type[BaseTranslator]] = {}

    def register_builtin_translators(self) -> None:
        """Discover and register the translators shipped in this package."""
        from knimesql.translators.discovery import create_dynamic_hookimpl, discover_translators

        self.register(create_dynamic_hookimpl(discover_translators(), HOOK_NAME))

    def register(self, plugin: Any) -> None:
        """Register a plugin implementing ``knimesql_get_translators``.

        Raises:
            TranslatorRegistrationError: If a factory identifier is claimed twice.
                The plugin is unregistered again, leaving the registry unchanged.
        """
        self._pm.register(plugin)
        try:
            self._refresh_cache()
        except TranslatorRegistrationError:
            self._pm.unregister(plugin)
            raise

    def _refresh_cache(self) -> None:
        translators: dict[str, type[BaseTranslator]] = {}
        for classes in self._pm.hook.knimesql_get_translators():
            for cls in classes:
                factory = cls.factory
                if factory in translators:
                    raise TranslatorRegistrationError(
                        f"Duplicate translator for factory '{factory}': {translators[factory].__name__} and {cls.__name__}"
                    )
                translators[factory] = cls
        self._translators = translators

    def get_translators(self) -> list[type[BaseTranslator]]:
        """All registered translator classes, sorted by name."""
        return sorted(self._translators.values(), key=lambda cls: cls.name)

    def get_by_factory(self, factory: str) -> type[BaseTranslator] | None:
        """Exact-match lookup; no prefix or wildcard matching."""
        return self._translators.get(factory)
