# src/knimesql/translators/base.py
"""Base class for node translators.

Translators MUST subclass BaseTranslator: discovery uses issubclass() checks
against it, and the dispatcher relies on the class attributes below.

Contract:
    translate(settings, context) -> TranslationResult

- ``settings`` is the node's full settings tree (children of the root config).
- ``context`` is normalised by ``coerce_context`` according to ``arity``:
  a PredecessorContext for UNARY, a tuple of them for NARY, None for SOURCE.
- translate() is a pure function of its inputs. It never raises for any
  settings tree; structural problems come back as an error result, and
  recoverable ones are logged, recorded in ``warnings`` and skipped.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import structlog

from knimesql.contracts import Arity, ConfigTree, PredecessorContext, TranslationResult
from knimesql.core.config import DEFAULT_INPUT_ALIAS
from knimesql.core.logging import get_logger
from knimesql.core.tree import get_text

# What callers may hand in: a context, a bare alias (the previous node's
# name), a list of contexts, or nothing.
type ContextInput = PredecessorContext | str | Sequence[PredecessorContext] | None
type TranslatorContext = PredecessorContext | tuple[PredecessorContext, ...] | None


def coerce_context(arity: Arity, context: ContextInput, default_alias: str = DEFAULT_INPUT_ALIAS) -> TranslatorContext:
    """Normalise caller input to the shape a translator of ``arity`` expects.

    A unary translator with no usable upstream gets ``default_alias``;
    given several contexts it takes the first.
    """
    if arity is Arity.SOURCE:
        return None
    if context is None:
        contexts: tuple[PredecessorContext, ...] = ()
    elif isinstance(context, str):
        contexts = (PredecessorContext(alias=context),) if context else ()
    elif isinstance(context, PredecessorContext):
        contexts = (context,)
    else:
        contexts = tuple(context)
    if arity is Arity.NARY:
        return contexts
    return contexts[0] if contexts and contexts[0].alias else PredecessorContext(alias=default_alias)


class WarningCollector:
    """Collects recoverable problems for one translation.

    Each warning is logged immediately and kept, in order, for the result.
    A collector lives for exactly one translate() call.
    """

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._messages: list[str] = []

    def add(self, message: str, **context: Any) -> None:
        self._logger.warning(message, **context)
        self._messages.append(message)

    @property
    def messages(self) -> tuple[str, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)


class BaseTranslator(ABC):
    """Base class for all node translators.

    Subclasses set ``name`` (human-readable node type), ``factory`` (the
    fully-qualified KNIME factory identifier they handle) and ``arity``,
    and implement ``_translate``.
    """

    name: str
    factory: str
    arity: Arity = Arity.UNARY

    def translate(
        self,
        settings: ConfigTree,
        context: ContextInput = None,
        *,
        default_alias: str = DEFAULT_INPUT_ALIAS,
    ) -> TranslationResult:
        """Check the factory entry, then translate.

        A mismatch is a diagnostic naming both the expected and the actual
        factory identifier.
        """
        actual = get_text(settings, "factory")
        if actual != self.factory:
            got = f'"{actual}"' if actual else "N/A"
            return TranslationResult.error(f"Expected {self.name} node factory ({self.factory}), but got {got}.")
        logger = get_logger(type(self).__module__).bind(translator=self.name, node_factory=self.factory)
        warnings = WarningCollector(logger)
        return self._translate(settings, coerce_context(self.arity, context, default_alias), warnings)

    @abstractmethod
    def _translate(
        self,
        settings: ConfigTree,
        context: TranslatorContext,
        warnings: WarningCollector,
    ) -> TranslationResult:
        """Translate a settings tree whose factory has already been checked."""
        ...


class UnaryTranslator(BaseTranslator):
    """Translator reading from exactly one upstream table."""

    arity = Arity.UNARY

    def _translate(
        self,
        settings: ConfigTree,
        context: TranslatorContext,
        warnings: WarningCollector,
    ) -> TranslationResult:
        if not isinstance(context, PredecessorContext):
            raise TypeError(f"{self.name} expects one PredecessorContext, got {type(context).__name__}")
        return self._translate_unary(settings, context, warnings)

    @abstractmethod
    def _translate_unary(
        self,
        settings: ConfigTree,
        source: PredecessorContext,
        warnings: WarningCollector,
    ) -> TranslationResult: ...
