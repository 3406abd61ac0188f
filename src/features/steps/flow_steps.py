# features/steps/flow_steps.py
from __future__ import annotations

from typing import Any, Optional

from qflow.bdd_compat import given, then, when
from qflow.step_state import get_flow_step_state

from question_flow.contracts import normalize_codes
from question_flow.engine import use
from question_flow.rules import QuestionBuilder, RuleSet

# ----------------------------
# Minimal helpers used in steps
# ----------------------------


def _split(text: str) -> list[str]:
    return list(normalize_codes(part.strip() for part in text.split(",")))


def parse_value(raw: str) -> Any:
    """Table cells are text; map the obvious literals back to Python values."""
    text = raw.strip()
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered in {"null", "none"}:
        return None
    try:
        return int(text)
    except ValueError:
        return text


def _pending(context: Any) -> dict[str, dict[str, Any]]:
    return get_flow_step_state(context).pending_questions


def _question(context: Any, code: str) -> dict[str, Any]:
    return _pending(context).setdefault(
        code, {"effects": [], "deps": [], "args": [], "targets": [], "branch_on": None, "branches": {}}
    )


def branch_decision(arg_name: str, branches: dict[Any, str]):
    def _decide(ctx) -> Optional[str]:
        return branches.get(ctx.values[arg_name])

    _decide.__qualname__ = f"branch_on_{arg_name}"
    return _decide


def configure_question(declared: dict[str, Any]):
    def _configure(q: QuestionBuilder) -> None:
        q.effects(*declared["effects"]).deps(*declared["deps"]).args(*declared["args"]).targets(*declared["targets"])
        if declared["branch_on"] is not None:
            q.transitions(branch_decision(declared["branch_on"], declared["branches"]))

    return _configure


# ----------------------------
# Behave steps
# ----------------------------


@given('the questions "{codes}"')
def step_given_questions(context, codes: str) -> None:
    state = get_flow_step_state(context)
    state.codes = _split(codes)
    state.pending_questions = {}


@given('question "{code}" branches on "{arg}" with targets "{targets}":')
def step_given_branching_question(context, code: str, arg: str, targets: str) -> None:
    question = _question(context, code)
    question["args"].append(arg)
    question["targets"].extend(_split(targets))
    question["branch_on"] = arg
    for row in context.table:
        question["branches"][parse_value(row["value"])] = row["target"].strip()


@given('question "{code}" has effects "{flags}"')
def step_given_effects(context, code: str, flags: str) -> None:
    _question(context, code)["effects"].extend(_split(flags))


@given('question "{code}" depends on "{flags}"')
def step_given_deps(context, code: str, flags: str) -> None:
    _question(context, code)["deps"].extend(_split(flags))


@given('question "{code}" also requires "{names}"')
def step_given_extra_args(context, code: str, names: str) -> None:
    _question(context, code)["args"].extend(_split(names))


@when("the rules are defined")
def step_when_rules_defined(context) -> None:
    state = get_flow_step_state(context)

    def _rules(rule_set: RuleSet) -> None:
        for code, declared in _pending(context).items():
            rule_set.question(code, configure_question(declared))

    try:
        state.rule_set = RuleSet.define(state.codes, _rules)
        state.applier = use(state.rule_set)
    except Exception as exc:  # captured for the Then step
        state.last_error = exc


@when('I apply "{code}" with:')
def step_when_apply_with_table(context, code: str) -> None:
    state = get_flow_step_state(context)
    args = {row["name"].strip(): parse_value(row["value"]) for row in context.table}
    _apply(state, code, args)


@when('I apply "{code}" with no arguments')
def step_when_apply_without_args(context, code: str) -> None:
    _apply(get_flow_step_state(context), code, {})


def _apply(state, code: str, args: dict[str, Any]) -> None:
    assert state.applier is not None, f"rules were not defined: {state.last_error!r}"
    try:
        state.last_action = state.applier.apply(code, args)
        state.last_error = None
    except Exception as exc:  # captured for the Then step
        state.last_action = None
        state.last_error = exc


@then('the skipped questions are "{codes}"')
def step_then_skipped(context, codes: str) -> None:
    action = get_flow_step_state(context).last_action
    assert action is not None
    assert list(action.skip) == _split(codes), action


@then('the recovered questions are "{codes}"')
def step_then_recovered(context, codes: str) -> None:
    action = get_flow_step_state(context).last_action
    assert action is not None
    assert list(action.recover) == _split(codes), action


@then("no questions are skipped")
def step_then_nothing_skipped(context) -> None:
    action = get_flow_step_state(context).last_action
    assert action is not None and action.skip == (), action


@then("no questions are recovered")
def step_then_nothing_recovered(context) -> None:
    action = get_flow_step_state(context).last_action
    assert action is not None and action.recover == (), action


@then('a "{error_name}" is raised mentioning "{fragment}"')
def step_then_error(context, error_name: str, fragment: str) -> None:
    error = get_flow_step_state(context).last_error
    assert error is not None, "expected an error"
    assert type(error).__name__ == error_name, repr(error)
    assert fragment in str(error), str(error)
