# question_flow/engine.py
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any, Optional

from question_flow.contracts import Action, QuestionConfig, normalize_code
from question_flow.errors import FlowError, QuestionArgumentError
from question_flow.ordered_set import OrderedSet
from question_flow.rules import RuleSet
from question_flow.stable_ids import derive_rule_set_id
from question_flow.transition import TransitionContext

logger = logging.getLogger(__name__)


def build_effect_index(configs: Mapping[str, QuestionConfig]) -> Mapping[str, tuple[str, ...]]:
    """Map every flag to the questions that declared it as a dependency, in declaration order."""
    index: dict[str, OrderedSet[str]] = {}
    for code, config in configs.items():
        for dep in config.deps:
            index.setdefault(dep, OrderedSet()).add(code)
    return MappingProxyType({flag: codes.as_tuple() for flag, codes in index.items()})


class FlowEngine:
    """
    Skip/recover computation over a finalized rule set.

    The engine keeps a snapshot of the rule set's codes and configs and builds
    the effect index once. `run` is a pure function of that snapshot and its
    arguments, so concurrent calls need no locking.
    """

    def __init__(self, rule_set: Optional[RuleSet]) -> None:
        if rule_set is not None and not rule_set.finalized:
            rule_set.finalize()

        self._codes: tuple[str, ...] = rule_set.codes if rule_set is not None else ()
        self._configs: Mapping[str, QuestionConfig] = MappingProxyType(
            dict(rule_set.configs) if rule_set is not None else {}
        )
        self._positions: Mapping[str, int] = {code: idx for idx, code in enumerate(self._codes)}
        self._effect_index = build_effect_index(self._configs)
        self.rule_set_id = derive_rule_set_id(self._codes, self._configs)

    @property
    def codes(self) -> tuple[str, ...]:
        return self._codes

    @property
    def effect_index(self) -> Mapping[str, tuple[str, ...]]:
        return self._effect_index

    def run(self, question_code: object, args: Optional[Mapping[str, Any]] = None) -> Action:
        code = normalize_code(question_code)
        if not code:
            raise QuestionArgumentError("question code cannot be empty")

        if not self._codes or not self._configs:
            return Action()

        config = self._configs.get(code)
        if config is None:
            return Action()

        next_question = self._next_question(code, config, args)
        skip = self._skip_questions(code, next_question)
        recover = self._recover_questions(next_question, skip, config)

        logger.debug(f"[{self.rule_set_id[:14]}] {code} -> {next_question}: skip={list(skip)} recover={list(recover)}")
        return Action(skip=skip, recover=recover)

    def _next_question(
        self, code: str, config: QuestionConfig, args: Optional[Mapping[str, Any]]
    ) -> Optional[str]:
        if config.decision is None:
            return None

        ctx = TransitionContext(code, config.args, args, config.targets)
        return ctx.evaluate(config.decision)

    def _skip_questions(self, code: str, next_question: Optional[str]) -> tuple[str, ...]:
        if next_question is None:
            return ()

        current_idx = self._positions.get(code)
        next_idx = self._positions.get(next_question)
        if current_idx is None or next_idx is None or current_idx >= next_idx:
            raise FlowError(code, next_question)

        return self._codes[current_idx + 1 : next_idx]

    def _range_recover(self, next_question: Optional[str], targets: Sequence[str]) -> tuple[str, ...]:
        if next_question is None or not targets:
            return ()

        next_idx = self._positions.get(next_question)
        target_positions = [self._positions[t] for t in targets if t in self._positions]
        if next_idx is None or not target_positions:
            return ()

        last_idx = max(target_positions)
        if next_idx > last_idx:
            return ()

        return self._codes[next_idx:last_idx]

    def _recover_questions(
        self, next_question: Optional[str], skip: Sequence[str], config: QuestionConfig
    ) -> tuple[str, ...]:
        recover: OrderedSet[str] = OrderedSet(self._range_recover(next_question, config.targets))
        for effect in config.effects:
            recover.update(self._effect_index.get(effect, ()))
        recover.discard_all(skip)
        return recover.as_tuple()


class Applier:
    """Caller-facing wrapper: `use(rule_set).apply("q1", {"a1": "yes"})`."""

    def __init__(self, rule_set: Optional[RuleSet]) -> None:
        self._engine = FlowEngine(rule_set)

    @property
    def engine(self) -> FlowEngine:
        return self._engine

    def apply(self, question_code: object, args: Optional[Mapping[str, Any]] = None, /, **kwargs: Any) -> Action:
        merged = {**dict(args or {}), **kwargs}
        return self._engine.run(question_code, merged)


def use(rule_set: Optional[RuleSet]) -> Applier:
    return Applier(rule_set)


__all__ = ["Applier", "FlowEngine", "build_effect_index", "use"]
