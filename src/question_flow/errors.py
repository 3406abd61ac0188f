# question_flow/errors.py
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from question_flow.invariants import InvariantOutcome


class RuleError(Exception):
    """Base class for rule-definition failures (definition and usage)."""

    def __init__(self, message: str, *, outcome: Optional[InvariantOutcome] = None) -> None:
        super().__init__(message)
        self.outcome = outcome


class DefinitionError(RuleError):
    """Raised when a question or rule set violates a definition invariant."""


class UsageError(RuleError):
    """Raised when an operation is invoked outside the scope it belongs to."""


class FlowError(Exception):
    """Raised when a resolved next question does not strictly follow the current one."""

    def __init__(self, current: str, next_question: str) -> None:
        super().__init__(f"invalid question flow: current={current}, next={next_question}")
        self.current = current
        self.next_question = next_question


class QuestionArgumentError(ValueError):
    """Raised for empty question codes, empty chosen targets and missing runtime arguments."""

    def __init__(self, message: str, *, missing: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.missing = missing


__all__ = [
    "DefinitionError",
    "FlowError",
    "QuestionArgumentError",
    "RuleError",
    "UsageError",
]
