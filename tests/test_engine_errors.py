from __future__ import annotations

from collections.abc import Callable

import pytest

from question_flow.engine import Applier
from question_flow.errors import FlowError, QuestionArgumentError, RuleError, UsageError
from question_flow.rules import QuestionBuilder
from question_flow.transition import TransitionContext


def _single_target(target: str) -> Callable[[QuestionBuilder], None]:
    def _configure(q: QuestionBuilder) -> None:
        q.args("a1").targets(target).transitions(lambda ctx: ctx.target(target))

    return _configure


@pytest.mark.parametrize("code", ["", None])
def test_empty_question_code_is_an_argument_error(make_applier: Callable[..., Applier], code: object) -> None:
    applier = make_applier(["q1", "q2"], {"q1": _single_target("q2")})

    with pytest.raises(QuestionArgumentError, match="question code cannot be empty"):
        applier.apply(code)


def test_missing_runtime_argument_is_named(make_applier: Callable[..., Applier]) -> None:
    def _q1(q: QuestionBuilder) -> None:
        q.args("a1", "required_arg").targets("q2").transitions(lambda ctx: ctx.target("q2"))

    applier = make_applier(["q1", "q2"], {"q1": _q1})

    with pytest.raises(QuestionArgumentError, match="question 'q1' missing parameters: required_arg$"):
        applier.apply("q1", {"a1": "ok"})


def test_all_missing_runtime_arguments_are_listed_in_declaration_order(make_applier: Callable[..., Applier]) -> None:
    def _q1(q: QuestionBuilder) -> None:
        q.args("a1", "a2", "required_arg1", "required_arg2").targets("q2").transitions(lambda ctx: "q2")

    applier = make_applier(["q1", "q2"], {"q1": _q1})

    with pytest.raises(QuestionArgumentError) as excinfo:
        applier.apply("q1", {"a1": "ok", "a2": "value"})

    assert "missing parameters: required_arg1, required_arg2" in str(excinfo.value)
    assert excinfo.value.missing == ("required_arg1", "required_arg2")


def test_none_counts_as_a_present_argument(make_applier: Callable[..., Applier]) -> None:
    def _q1(q: QuestionBuilder) -> None:
        q.args("a1").targets("q3").transitions(lambda ctx: "q3" if ctx.values.a1 is None else None)

    applier = make_applier(["q1", "q2", "q3"], {"q1": _q1})

    assert applier.apply("q1", {"a1": None}).skip == ("q2",)


def test_backward_jump_is_a_flow_error(make_applier: Callable[..., Applier]) -> None:
    def _decide(ctx: TransitionContext) -> None:
        if ctx.values.a1 == "back":
            ctx.target("q1")
        elif ctx.values.a1 == "forward":
            ctx.target("q3")

    def _q2(q: QuestionBuilder) -> None:
        q.args("a1").targets("q1", "q3").transitions(_decide)

    applier = make_applier(["q1", "q2", "q3"], {"q2": _q2})

    with pytest.raises(FlowError, match="invalid question flow: current=q2, next=q1") as excinfo:
        applier.apply("q2", {"a1": "back"})
    assert (excinfo.value.current, excinfo.value.next_question) == ("q2", "q1")

    assert applier.apply("q2", {"a1": "forward"}).is_empty


def test_target_outside_declared_targets_is_a_usage_error(make_applier: Callable[..., Applier]) -> None:
    def _q1(q: QuestionBuilder) -> None:
        q.args("a1").targets("q2", "q3").transitions(lambda ctx: ctx.target("q4"))

    applier = make_applier(["q1", "q2", "q3", "q4"], {"q1": _q1})

    with pytest.raises(UsageError) as excinfo:
        applier.apply("q1", {"a1": "x"})

    message = str(excinfo.value)
    assert "question 'q1' target 'q4' is not in defined targets" in message
    assert "['q2', 'q3']" in message
    assert isinstance(excinfo.value, RuleError)


def test_empty_target_is_an_argument_error(make_applier: Callable[..., Applier]) -> None:
    def _q1(q: QuestionBuilder) -> None:
        q.args("a1").targets("q2").transitions(lambda ctx: ctx.target(""))

    applier = make_applier(["q1", "q2"], {"q1": _q1})

    with pytest.raises(QuestionArgumentError, match="question 'q1' has defined a target but it is empty"):
        applier.apply("q1", {"a1": "ok"})


def test_definition_operation_inside_transitions_is_a_usage_error(make_applier: Callable[..., Applier]) -> None:
    def _decide(ctx: TransitionContext) -> None:
        ctx.args("should_not_work")
        ctx.target("q2")

    def _q1(q: QuestionBuilder) -> None:
        q.args("a1").targets("q2").transitions(_decide)

    applier = make_applier(["q1", "q2"], {"q1": _q1})

    with pytest.raises(UsageError, match="'args' should be called in the question definition"):
        applier.apply("q1", {"a1": True})


def test_decision_errors_propagate_unchanged(make_applier: Callable[..., Applier]) -> None:
    def _decide(ctx: TransitionContext) -> None:
        raise LookupError("answer store unavailable")

    def _q1(q: QuestionBuilder) -> None:
        q.args("a1").targets("q2").transitions(_decide)

    applier = make_applier(["q1", "q2"], {"q1": _q1})

    with pytest.raises(LookupError, match="answer store unavailable"):
        applier.apply("q1", {"a1": 1})
