# src/knimesql/contracts/translation.py
"""Translator input and output contracts."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Literal

ERROR_PREFIX = "Error: "


class Arity(StrEnum):
    """How many upstream contexts a translator consumes."""

    UNARY = "unary"
    NARY = "nary"
    SOURCE = "source"


@dataclass(frozen=True, slots=True)
class PredecessorContext:
    """Minimal summary of an upstream node.

    ``alias`` is the table/view name the translator selects from.
    ``exposed_columns`` is supplied by the caller; an empty set means the
    columns are unknown.
    """

    alias: str
    exposed_columns: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, alias: str, columns: Iterable[str] = ()) -> PredecessorContext:
        """Build a context from any iterable of column names."""
        return cls(alias=alias, exposed_columns=frozenset(columns))


@dataclass(frozen=True, slots=True)
class TranslationResult:
    """Result of translating one node.

    Use the factory methods to create instances. Diagnostics are ordinary
    data: callers render ``text`` the same way for both statuses.

    ``warnings`` lists the recoverable problems (dropped predicates, sort
    criteria, aggregations) in the order they were met.
    """

    status: Literal["success", "error"]
    text: str
    warnings: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.status == "error" and not self.text.startswith(ERROR_PREFIX):
            raise ValueError(f"Diagnostic text must start with {ERROR_PREFIX!r}, got {self.text!r}")
        if self.status == "success" and not self.text.rstrip().endswith(";"):
            raise ValueError(f"SQL text must be terminated by ';', got {self.text!r}")

    @classmethod
    def success(cls, sql: str, *, warnings: Iterable[str] = ()) -> TranslationResult:
        """Create a successful result carrying SQL text."""
        return cls(status="success", text=sql, warnings=tuple(warnings))

    @classmethod
    def error(cls, message: str, *, warnings: Iterable[str] = ()) -> TranslationResult:
        """Create a diagnostic result. The ``Error: `` prefix is added if absent."""
        text = message if message.startswith(ERROR_PREFIX) else f"{ERROR_PREFIX}{message}"
        return cls(status="error", text=text, warnings=tuple(warnings))

    @property
    def is_error(self) -> bool:
        return self.status == "error"

    def __str__(self) -> str:
        return self.text
