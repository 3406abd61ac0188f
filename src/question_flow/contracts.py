# question_flow/contracts.py
from __future__ import annotations

from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from question_flow.ordered_set import OrderedSet

# ------------------------------------------------------------------------------
# Shared BaseModel config helpers
# ------------------------------------------------------------------------------

_IMMUTABLE_CONTRACT_CONFIG = ConfigDict(
    extra="forbid",
    use_enum_values=True,
    frozen=True,
)

DecisionFn = Callable[..., Any]


# ------------------------------------------------------------------------------
# Code normalization
# ------------------------------------------------------------------------------


def normalize_code(value: object) -> str:
    """
    Question codes, flags and argument names are plain strings.
    Enum members contribute their value; None becomes the empty string.
    """
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    return str(value)


def normalize_codes(values: Iterable[object]) -> tuple[str, ...]:
    if isinstance(values, (str, Enum)):
        values = (values,)
    out: OrderedSet[str] = OrderedSet()
    for value in values:
        code = normalize_code(value)
        if code:
            out.add(code)
    return out.as_tuple()


# ------------------------------------------------------------------------------
# Rule definitions
# ------------------------------------------------------------------------------


class QuestionConfig(BaseModel):
    """Closed configuration of one question, produced by `QuestionBuilder.build()`."""

    model_config = _IMMUTABLE_CONTRACT_CONFIG
    code: str
    effects: tuple[str, ...] = ()
    deps: tuple[str, ...] = ()
    args: tuple[str, ...] = ()
    targets: tuple[str, ...] = ()
    decision: Optional[DecisionFn] = Field(default=None, repr=False)

    @property
    def has_decision(self) -> bool:
        return self.decision is not None

    def declaration(self) -> dict[str, Any]:
        """Declarative (hashable) part of the config, the decision reduced to its name."""
        payload = self.model_dump(mode="json", exclude={"decision"})
        decision = self.decision
        payload["decision"] = getattr(decision, "__qualname__", repr(decision)) if decision is not None else None
        return payload


# ------------------------------------------------------------------------------
# Engine output
# ------------------------------------------------------------------------------


class Action(BaseModel):
    """
    Result of one `apply` call.

    `skip` lists the questions strictly between the current question and the
    chosen next one. `recover` lists questions whose answers may be stale.
    The two never share a code.
    """

    model_config = _IMMUTABLE_CONTRACT_CONFIG
    skip: tuple[str, ...] = ()
    recover: tuple[str, ...] = ()

    @field_validator("skip", "recover", mode="before")
    @classmethod
    def _normalize_codes(cls, value: Any) -> tuple[str, ...]:
        return normalize_codes(value or ())

    @property
    def is_empty(self) -> bool:
        return not self.skip and not self.recover


__all__ = [
    "Action",
    "DecisionFn",
    "QuestionConfig",
    "normalize_code",
    "normalize_codes",
]
