"""Built-in node translators for knimesql.

A translator turns one node's settings tree plus its upstream context into
a TranslationResult: SQL terminated by ``;`` or ``Error: `` diagnostic text.

Translators are reached through the dispatcher, not direct imports:
    dispatcher = TranslatorDispatcher()
    result = dispatcher.translate(settings, "input_table")
"""

from knimesql.translators.base import BaseTranslator, UnaryTranslator, WarningCollector
from knimesql.translators.dispatcher import (
    MISSING_FACTORY_MESSAGE,
    UNSUPPORTED_MESSAGE,
    TranslatorDispatcher,
    convert_selected_node_to_sql,
    get_default_dispatcher,
)
from knimesql.translators.hookspecs import hookimpl, hookspec
from knimesql.translators.manager import TranslatorManager, TranslatorRegistrationError

__all__ = [
    "MISSING_FACTORY_MESSAGE",
    "UNSUPPORTED_MESSAGE",
    "BaseTranslator",
    "TranslatorDispatcher",
    "TranslatorManager",
    "TranslatorRegistrationError",
    "UnaryTranslator",
    "WarningCollector",
    "convert_selected_node_to_sql",
    "get_default_dispatcher",
    "hookimpl",
    "hookspec",
]
