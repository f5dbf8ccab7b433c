# src/knimesql/translators/dispatcher.py
"""Factory-identifier dispatch to translators.

The dispatcher is the only entry point callers need: it looks up the
translator for a node's factory, builds the upstream context from the
workflow graph, and turns every failure into a diagnostic result.
"""

from __future__ import annotations

from functools import lru_cache

from knimesql.contracts import Arity, ConfigTree, TranslationResult, WorkflowNode
from knimesql.core.config import DEFAULT_INPUT_ALIAS
from knimesql.core.graph import WorkflowGraph, find_all_predecessors, resolve_unary_context
from knimesql.core.graph.predecessors import ColumnHints
from knimesql.core.logging import get_logger, node_context
from knimesql.core.tree import get_text
from knimesql.translators.base import BaseTranslator, ContextInput
from knimesql.translators.manager import TranslatorManager

UNSUPPORTED_MESSAGE = "Conversion for this node type is not supported."
MISSING_FACTORY_MESSAGE = "Invalid node configuration: missing factory value."

logger = get_logger(__name__)


class TranslatorDispatcher:
    """Exact-match dispatch from factory identifier to translator.

    Translator instances are stateless and created once per dispatcher.

    Usage:
        dispatcher = TranslatorDispatcher()
        result = dispatcher.translate(settings, "input_table")
    """

    def __init__(self, manager: TranslatorManager | None = None) -> None:
        if manager is None:
            manager = TranslatorManager()
            manager.register_builtin_translators()
        self._manager = manager
        self._instances: dict[str, BaseTranslator] = {}

    @property
    def manager(self) -> TranslatorManager:
        return self._manager

    def supports(self, factory: str) -> bool:
        return self._manager.get_by_factory(factory) is not None

    def _translator_for(self, factory: str) -> BaseTranslator | None:
        translator = self._instances.get(factory)
        if translator is None:
            translator_cls = self._manager.get_by_factory(factory)
            if translator_cls is None:
                return None
            translator = translator_cls()
            self._instances[factory] = translator
        return translator

    def dispatch(
        self,
        factory: str,
        settings: ConfigTree,
        context: ContextInput = None,
        *,
        default_alias: str = DEFAULT_INPUT_ALIAS,
    ) -> TranslationResult:
        """Translate ``settings`` with the translator registered for ``factory``.

        Never raises: an unknown factory or a translator failure comes back
        as a diagnostic.
        """
        translator = self._translator_for(factory)
        if translator is None:
            logger.info("No translator registered", node_factory=factory)
            return TranslationResult.error(UNSUPPORTED_MESSAGE)
        try:
            return translator.translate(settings, context, default_alias=default_alias)
        except Exception as e:
            logger.exception("Translator failed", translator=translator.name, node_factory=factory)
            return TranslationResult.error(f"Internal translator failure in {translator.name}: {type(e).__name__}: {e}")

    def translate(
        self,
        settings: ConfigTree,
        context: ContextInput = None,
        *,
        default_alias: str = DEFAULT_INPUT_ALIAS,
    ) -> TranslationResult:
        """Dispatch on the ``factory`` entry of the settings tree itself."""
        factory = get_text(settings, "factory")
        if not factory:
            return TranslationResult.error(MISSING_FACTORY_MESSAGE)
        return self.dispatch(factory, settings, context, default_alias=default_alias)

    def translate_node(
        self,
        graph: WorkflowGraph,
        node: WorkflowNode,
        exposed_columns: ColumnHints | None = None,
        *,
        default_alias: str = DEFAULT_INPUT_ALIAS,
    ) -> TranslationResult:
        """Translate a node of ``graph``, resolving its upstream context."""
        if not node.factory:
            return TranslationResult.error(MISSING_FACTORY_MESSAGE)
        translator_cls = self._manager.get_by_factory(node.factory)
        if translator_cls is None:
            return TranslationResult.error(UNSUPPORTED_MESSAGE)

        context: ContextInput
        if translator_cls.arity is Arity.NARY:
            context = find_all_predecessors(graph, node.node_id, exposed_columns) if node.node_id is not None else []
        elif translator_cls.arity is Arity.UNARY:
            context = resolve_unary_context(graph, node.node_id, exposed_columns, default_alias=default_alias)
        else:
            context = None
        with node_context(node.node_id, node.factory):
            return self.dispatch(node.factory, node.settings, context, default_alias=default_alias)


@lru_cache(maxsize=1)
def get_default_dispatcher() -> TranslatorDispatcher:
    """Process-wide dispatcher over the built-in translators."""
    return TranslatorDispatcher()


def convert_selected_node_to_sql(settings: ConfigTree, previous_node_name: str | None = None) -> str:
    """Translate one node's settings given the name of the node feeding it.

    This is the entry point for presentation layers that only know the
    selected node and its predecessor's display name. Returns SQL or
    diagnostic text, never raises.
    """
    result = get_default_dispatcher().translate(settings, previous_node_name or None)
    return result.text
