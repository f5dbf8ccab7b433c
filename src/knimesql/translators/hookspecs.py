# src/knimesql/translators/hookspecs.py
"""pluggy hook specifications for translator plugins.

Plugins implement these hooks to register translators with the dispatcher.

Usage (implementing a plugin):
    from knimesql.translators.hookspecs import hookimpl

    class MyPlugin:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def knimesql_get_translators(self):
            return [MyTranslator]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from knimesql.translators.base import BaseTranslator

# Project name for pluggy
PROJECT_NAME = "knimesql"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class KnimeSqlTranslatorSpec:
    """Hook specifications for translator plugins."""

    @hookspec
    def knimesql_get_translators(self) -> list[type["BaseTranslator"]]:  # type: ignore[empty-body]
        """Return translator classes.

        Returns:
            List of BaseTranslator subclasses (not instances)
        """
