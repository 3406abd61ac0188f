# question_flow/transition.py
from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from enum import Enum
from types import MappingProxyType
from typing import Any, NoReturn, Optional

from question_flow.contracts import DecisionFn, normalize_code
from question_flow.errors import QuestionArgumentError, UsageError


def _bound(bindings: ArgumentBindings) -> Mapping[str, Any]:
    return object.__getattribute__(bindings, "_values")


class ArgumentBindings:
    """
    Read-only view over the declared arguments of one question.

    Only declared names are visible; extra runtime arguments are ignored.
    Supports `bindings.a1` and `bindings["a1"]`.
    """

    __slots__ = ("_values",)

    def __init__(self, declared: Sequence[str], runtime: Mapping[str, Any]) -> None:
        object.__setattr__(self, "_values", MappingProxyType({name: runtime[name] for name in declared}))

    def __getattribute__(self, name: str) -> Any:
        # declared arguments win over any attribute of the bindings object
        values = _bound(self)
        if name in values:
            return values[name]
        return object.__getattribute__(self, name)

    def __getattr__(self, name: str) -> Any:
        try:
            return _bound(self)[name]
        except KeyError:
            raise AttributeError(f"argument '{name}' is not declared for this question") from None

    def __setattr__(self, name: str, value: Any) -> NoReturn:
        raise UsageError(f"argument '{name}' is read-only inside transitions")

    def __delattr__(self, name: str) -> NoReturn:
        raise UsageError(f"argument '{name}' is read-only inside transitions")

    def __getitem__(self, name: str) -> Any:
        return _bound(self)[name]

    def __contains__(self, name: object) -> bool:
        return name in _bound(self)

    def __iter__(self) -> Iterator[str]:
        return iter(_bound(self))

    def __len__(self) -> int:
        return len(_bound(self))

    def __repr__(self) -> str:
        return f"ArgumentBindings({dict(_bound(self))!r})"


class TransitionContext:
    """
    Per-call execution context for one question's decision function.

    Built fresh on every `apply`. The decision function reads `ctx.values`
    and picks the next question with `ctx.target(code)`; the last successful
    call wins. Returning a code from the decision function is equivalent to
    a final `ctx.target(code)`.
    """

    def __init__(
        self,
        current_code: str,
        declared_args: Sequence[str],
        runtime_args: Optional[Mapping[str, Any]],
        allowed_targets: Sequence[str] = (),
    ) -> None:
        self.current_code = normalize_code(current_code)
        self._declared_args = tuple(declared_args or ())
        self._runtime_args: Mapping[str, Any] = {
            normalize_code(name): value for name, value in (runtime_args or {}).items()
        }
        self._allowed_targets = tuple(allowed_targets or ())
        self._chosen: Optional[str] = None

        self._validate_args()
        self.values = ArgumentBindings(self._declared_args, self._runtime_args)

    @property
    def allowed_targets(self) -> tuple[str, ...]:
        return self._allowed_targets

    @property
    def chosen(self) -> Optional[str]:
        return self._chosen

    def target(self, question_code: object) -> str:
        code = normalize_code(question_code)
        if not code:
            raise QuestionArgumentError(f"question '{self.current_code}' has defined a target but it is empty")

        if code == self.current_code:
            raise QuestionArgumentError(f"question '{self.current_code}' cannot target itself")

        if self._allowed_targets and code not in self._allowed_targets:
            raise UsageError(
                f"question '{self.current_code}' target '{code}' is not in defined targets: "
                f"{list(self._allowed_targets)}"
            )

        self._chosen = code
        return code

    def evaluate(self, decision: DecisionFn) -> Optional[str]:
        returned = decision(self)
        if returned is None or returned is False:
            return self._chosen
        if not isinstance(returned, (str, Enum)):
            raise UsageError(
                f"question '{self.current_code}' transitions returned {type(returned).__name__} "
                f"{returned!r}; expected a question code, None or False"
            )
        self.target(returned)
        return self._chosen

    def _definition_only(self, name: str) -> NoReturn:
        raise UsageError(f"'{name}' should be called in the question definition, not inside transitions")

    def effects(self, *_: object) -> NoReturn:
        self._definition_only("effects")

    def deps(self, *_: object) -> NoReturn:
        self._definition_only("deps")

    def args(self, *_: object) -> NoReturn:
        self._definition_only("args")

    def targets(self, *_: object) -> NoReturn:
        self._definition_only("targets")

    def transitions(self, *_: object) -> NoReturn:
        self._definition_only("transitions")

    def _validate_args(self) -> None:
        missing = tuple(name for name in self._declared_args if name not in self._runtime_args)
        if missing:
            raise QuestionArgumentError(
                f"question '{self.current_code}' missing parameters: {', '.join(missing)}",
                missing=missing,
            )


__all__ = ["ArgumentBindings", "TransitionContext"]
