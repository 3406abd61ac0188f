from __future__ import annotations

import importlib
import importlib.util
from typing import Any, Callable, TypeVar, cast

StepFunc = TypeVar("StepFunc", bound=Callable[..., Any])
StepDecorator = Callable[[str], Callable[[StepFunc], StepFunc]]


def _identity_step_decorator(_: str) -> Callable[[StepFunc], StepFunc]:
    def _decorator(func: StepFunc) -> StepFunc:
        return func

    return _decorator


def _resolve(name: str) -> StepDecorator:
    if importlib.util.find_spec("behave") is None:
        return _identity_step_decorator
    return cast(StepDecorator, getattr(importlib.import_module("behave"), name))


# Step modules stay importable (and unit-testable) without behave installed.
given = _resolve("given")
when = _resolve("when")
then = _resolve("then")
