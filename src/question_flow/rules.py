# question_flow/rules.py
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import NoReturn, Optional

from typing_extensions import Self

from question_flow.contracts import DecisionFn, QuestionConfig, normalize_code, normalize_codes
from question_flow.errors import DefinitionError, QuestionArgumentError, UsageError
from question_flow.invariants import (
    QUESTION_INVARIANTS,
    RULE_SET_INVARIANTS,
    InvariantId,
    RuleCheckContext,
    first_stop,
    run_checkers,
)
from question_flow.ordered_set import OrderedSet
from question_flow.stable_ids import derive_rule_set_id

logger = logging.getLogger(__name__)


def _raise_on_stop(ctx: RuleCheckContext, invariant_ids: tuple[InvariantId, ...]) -> None:
    failed = first_stop(run_checkers(ctx, invariant_ids))
    if failed is not None:
        raise DefinitionError(failed.reason, outcome=failed)


class QuestionBuilder:
    """
    Configuration scope of one question.

    Every accumulation call union-merges into the existing values, keeping
    first-seen order, so `args("a1")` followed by `args("a2", "a1")` yields
    `("a1", "a2")`. Calls return the builder so they can be chained.
    """

    def __init__(self, question_code: str) -> None:
        self._code = question_code
        self._effects: OrderedSet[str] = OrderedSet()
        self._deps: OrderedSet[str] = OrderedSet()
        self._args: OrderedSet[str] = OrderedSet()
        self._targets: OrderedSet[str] = OrderedSet()
        self._decision: Optional[DecisionFn] = None

    @property
    def code(self) -> str:
        return self._code

    def effects(self, *flags: object) -> Self:
        self._effects.update(normalize_codes(flags))
        return self

    def deps(self, *flags: object) -> Self:
        self._deps.update(normalize_codes(flags))
        return self

    def args(self, *names: object) -> Self:
        self._args.update(normalize_codes(names))
        return self

    def targets(self, *codes: object) -> Self:
        self._targets.update(normalize_codes(codes))
        return self

    def transitions(self, decision: Optional[DecisionFn] = None) -> Self:
        if decision is None or not callable(decision):
            raise DefinitionError(f"question '{self._code}': 'transitions' requires a decision function")
        self._decision = decision
        return self

    def target(self, *_: object) -> NoReturn:
        raise UsageError(
            "'target' should be called inside the transitions decision function, not in the question definition"
        )

    def build(self) -> QuestionConfig:
        config = QuestionConfig(
            code=self._code,
            effects=self._effects.as_tuple(),
            deps=self._deps.as_tuple(),
            args=self._args.as_tuple(),
            targets=self._targets.as_tuple(),
            decision=self._decision,
        )
        _raise_on_stop(RuleCheckContext(question=config), QUESTION_INVARIANTS)
        return config


QuestionConfigurator = Callable[[QuestionBuilder], object]


class RuleSet:
    """
    Ordered question codes plus per-question configuration.

    Codes keep insertion order, which is the canonical flow order. Not every
    code needs a configuration. `finalize()` runs the rule-set wide checks;
    per-question checks already ran when each question's configuration closed.
    """

    def __init__(self, initial_codes: Iterable[object] = ()) -> None:
        self._codes: OrderedSet[str] = OrderedSet(normalize_codes(initial_codes or ()))
        self._configs: dict[str, QuestionConfig] = {}
        self._finalized = False

    @classmethod
    def define(
        cls,
        initial_codes: Iterable[object] = (),
        configurator: Optional[RuleSetConfigurator] = None,
    ) -> RuleSet:
        rule_set = cls(initial_codes)
        if configurator is not None:
            configurator(rule_set)
        return rule_set.finalize()

    @property
    def codes(self) -> tuple[str, ...]:
        return self._codes.as_tuple()

    @property
    def configs(self) -> Mapping[str, QuestionConfig]:
        return MappingProxyType(self._configs)

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def rule_set_id(self) -> str:
        return derive_rule_set_id(self.codes, self._configs)

    def question(self, question_code: object, configurator: Optional[QuestionConfigurator] = None) -> QuestionConfig:
        code = normalize_code(question_code)
        if not code:
            raise QuestionArgumentError("question code cannot be empty")
        if configurator is None:
            raise QuestionArgumentError(f"question '{code}' requires a configurator")

        builder = QuestionBuilder(code)
        configurator(builder)
        config = builder.build()

        self._configs[code] = config
        self._codes.add(code)
        self._finalized = False
        logger.debug(
            f"Question '{code}' defined: effects={list(config.effects)} deps={list(config.deps)} "
            f"args={list(config.args)} targets={list(config.targets)}"
        )
        return config

    def finalize(self) -> Self:
        _raise_on_stop(RuleCheckContext(codes=self.codes, configs=self._configs), RULE_SET_INVARIANTS)
        self._finalized = True
        logger.info(
            f"Rule set finalized with {len(self._codes)} questions, "
            f"{len(self._configs)} configured ({self.rule_set_id})"
        )
        return self

    def clear(self) -> None:
        self._configs = {}
        self._codes.clear()
        self._finalized = False

    def __repr__(self) -> str:
        return f"RuleSet(codes={list(self._codes)!r}, configured={list(self._configs)!r})"


RuleSetConfigurator = Callable[[RuleSet], object]


def define(initial_codes: Iterable[object] = (), configurator: Optional[RuleSetConfigurator] = None) -> RuleSet:
    """Build and finalize a rule set."""
    return RuleSet.define(initial_codes, configurator)


__all__ = ["QuestionBuilder", "RuleSet", "define"]
