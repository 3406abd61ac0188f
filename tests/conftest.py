from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

import pytest

from question_flow.engine import Applier, use
from question_flow.rules import QuestionBuilder, RuleSet, define
from question_flow.transition import TransitionContext

QuestionConfigurator = Callable[[QuestionBuilder], object]


@pytest.fixture
def make_rule_set() -> Callable[..., RuleSet]:
    def _make_rule_set(
        codes: Sequence[str] = (),
        questions: Mapping[str, QuestionConfigurator] | None = None,
    ) -> RuleSet:
        def _rules(rule_set: RuleSet) -> None:
            for code, configurator in (questions or {}).items():
                rule_set.question(code, configurator)

        return define(codes, _rules)

    return _make_rule_set


@pytest.fixture
def make_applier(make_rule_set: Callable[..., RuleSet]) -> Callable[..., Applier]:
    def _make_applier(
        codes: Sequence[str] = (),
        questions: Mapping[str, QuestionConfigurator] | None = None,
    ) -> Applier:
        return use(make_rule_set(codes, questions))

    return _make_applier


@pytest.fixture
def yes_no_applier(make_applier: Callable[..., Applier]) -> Applier:
    """q1 branches to q3 on 'yes', to q4 otherwise."""

    def _decide(ctx: TransitionContext) -> None:
        if ctx.values.a1 == "yes":
            ctx.target("q3")
        else:
            ctx.target("q4")

    def _q1(q: QuestionBuilder) -> None:
        q.args("a1").targets("q3", "q4").transitions(_decide)

    return make_applier(["q1", "q2", "q3", "q4"], {"q1": _q1})


@pytest.fixture
def option_applier(make_applier: Callable[..., Applier]) -> Applier:
    """q1 branches on a1/a2 and establishes flag1, which q2 depends on."""

    def _decide(ctx: TransitionContext) -> None:
        if ctx.values.a1 == "option1":
            ctx.target("q3" if ctx.values.a2 else "q4")
        elif ctx.values.a1 == "option2":
            ctx.target("q5")

    def _q1(q: QuestionBuilder) -> None:
        q.effects("flag1").args("a1", "a2").targets("q3", "q4", "q5").transitions(_decide)

    return make_applier(
        ["q1", "q2", "q3", "q4", "q5"],
        {"q1": _q1, "q2": lambda q: q.deps("flag1")},
    )
