from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from question_flow.contracts import QuestionConfig
from question_flow.ordered_set import OrderedSet


class InvariantId(str, Enum):
    QUESTION_TRANSITION_SHAPE = "question.transition_shape.v1"
    QUESTION_NO_SELF_TARGET = "question.no_self_target.v1"
    QUESTION_DEPS_EFFECTS_DISJOINT = "question.deps_effects_disjoint.v1"
    RULES_TARGETS_DECLARED = "rules.targets_declared.v1"
    RULES_DEPS_SATISFIABLE = "rules.deps_satisfiable.v1"


class Flow(str, Enum):
    CONTINUE = "continue"
    STOP = "stop"


@dataclass(frozen=True)
class InvariantOutcome:
    invariant_id: InvariantId
    passed: bool
    reason: str
    flow: Flow
    code: str
    evidence: Sequence[Mapping[str, Any]] = field(default_factory=tuple)
    details: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RuleCheckContext:
    """
    Input for definition-time checkers.

    Question-scope checkers read `question`; rule-set checkers read `codes`
    and `configs`.
    """

    codes: Sequence[str] = ()
    configs: Mapping[str, QuestionConfig] = field(default_factory=dict)
    question: Optional[QuestionConfig] = None


Checker = Callable[[RuleCheckContext], InvariantOutcome]


def _ok(invariant_id: InvariantId, code: str, details: Optional[Mapping[str, Any]] = None) -> InvariantOutcome:
    detail_map = dict(details or {})
    return InvariantOutcome(
        invariant_id=invariant_id,
        passed=True,
        reason=str(detail_map.get("message") or code),
        flow=Flow.CONTINUE,
        code=code,
        details=detail_map,
    )


def _stop(
    invariant_id: InvariantId,
    code: str,
    reason: str,
    *,
    evidence: Sequence[Mapping[str, Any]] = (),
    details: Optional[Mapping[str, Any]] = None,
) -> InvariantOutcome:
    detail_map = {"message": reason, **dict(details or {})}
    return InvariantOutcome(
        invariant_id=invariant_id,
        passed=False,
        reason=reason,
        flow=Flow.STOP,
        code=code,
        evidence=tuple(evidence),
        details=detail_map,
    )


# ------------------------------------------------------------------------------
# Question scope
# ------------------------------------------------------------------------------


def check_transition_shape(ctx: RuleCheckContext) -> InvariantOutcome:
    question = ctx.question
    if question is None:
        return _ok(InvariantId.QUESTION_TRANSITION_SHAPE, "transition_shape_not_applicable")

    name = question.code
    problems: list[tuple[str, str]] = []
    if question.args and not question.has_decision:
        problems.append(("args_without_transitions", f"question '{name}' has args but no transitions defined"))
    if question.targets and not question.has_decision:
        problems.append(("targets_without_transitions", f"question '{name}' has targets but no transitions defined"))
    if question.has_decision and not question.args:
        problems.append(("transitions_without_args", f"question '{name}' has transitions but no args defined"))
    if question.has_decision and not question.targets:
        problems.append(("transitions_without_targets", f"question '{name}' has transitions but no targets defined"))

    if not problems:
        return _ok(InvariantId.QUESTION_TRANSITION_SHAPE, "transition_shape_consistent")

    code, reason = problems[0]
    return _stop(
        InvariantId.QUESTION_TRANSITION_SHAPE,
        code,
        reason,
        evidence=({"kind": "question", "value": name},),
        details={"violations": [c for c, _ in problems]},
    )


def check_no_self_target(ctx: RuleCheckContext) -> InvariantOutcome:
    question = ctx.question
    if question is None or question.code not in question.targets:
        return _ok(InvariantId.QUESTION_NO_SELF_TARGET, "no_self_target")

    return _stop(
        InvariantId.QUESTION_NO_SELF_TARGET,
        "self_target_declared",
        f"question '{question.code}' cannot target itself in its own targets list",
        evidence=({"kind": "question", "value": question.code},),
    )


def check_deps_effects_disjoint(ctx: RuleCheckContext) -> InvariantOutcome:
    question = ctx.question
    if question is None:
        return _ok(InvariantId.QUESTION_DEPS_EFFECTS_DISJOINT, "deps_effects_not_applicable")

    overlap = OrderedSet(question.deps).intersection(question.effects)
    if not overlap:
        return _ok(InvariantId.QUESTION_DEPS_EFFECTS_DISJOINT, "deps_effects_disjoint")

    return _stop(
        InvariantId.QUESTION_DEPS_EFFECTS_DISJOINT,
        "deps_overlap_effects",
        f"question '{question.code}' has deps that overlap with its effects {list(overlap)}",
        evidence=tuple({"kind": "flag", "value": flag} for flag in overlap),
        details={"overlap": list(overlap)},
    )


# ------------------------------------------------------------------------------
# Rule-set scope
# ------------------------------------------------------------------------------


def check_targets_declared(ctx: RuleCheckContext) -> InvariantOutcome:
    declared = set(ctx.codes)
    invalid: OrderedSet[str] = OrderedSet()
    for config in ctx.configs.values():
        invalid.update(target for target in config.targets if target not in declared)

    if not invalid:
        return _ok(InvariantId.RULES_TARGETS_DECLARED, "targets_declared")

    return _stop(
        InvariantId.RULES_TARGETS_DECLARED,
        "undeclared_targets",
        f"targets {list(invalid)} are not defined in question codes {list(ctx.codes)}",
        evidence=tuple({"kind": "target", "value": target} for target in invalid),
        details={"invalid_targets": list(invalid)},
    )


def check_deps_satisfiable(ctx: RuleCheckContext) -> InvariantOutcome:
    effects: OrderedSet[str] = OrderedSet()
    deps: OrderedSet[str] = OrderedSet()
    for config in ctx.configs.values():
        effects.update(config.effects)
        deps.update(config.deps)

    invalid = [dep for dep in deps if dep not in effects]
    if not invalid:
        return _ok(InvariantId.RULES_DEPS_SATISFIABLE, "deps_satisfiable")

    return _stop(
        InvariantId.RULES_DEPS_SATISFIABLE,
        "unsatisfiable_deps",
        f"deps {invalid} are not defined in effects {list(effects)}",
        evidence=tuple({"kind": "flag", "value": dep} for dep in invalid),
        details={"invalid_deps": invalid},
    )


REGISTRY: dict[InvariantId, Checker] = {
    InvariantId.QUESTION_TRANSITION_SHAPE: check_transition_shape,
    InvariantId.QUESTION_NO_SELF_TARGET: check_no_self_target,
    InvariantId.QUESTION_DEPS_EFFECTS_DISJOINT: check_deps_effects_disjoint,
    InvariantId.RULES_TARGETS_DECLARED: check_targets_declared,
    InvariantId.RULES_DEPS_SATISFIABLE: check_deps_satisfiable,
}

QUESTION_INVARIANTS: tuple[InvariantId, ...] = (
    InvariantId.QUESTION_TRANSITION_SHAPE,
    InvariantId.QUESTION_NO_SELF_TARGET,
    InvariantId.QUESTION_DEPS_EFFECTS_DISJOINT,
)

RULE_SET_INVARIANTS: tuple[InvariantId, ...] = (
    InvariantId.RULES_TARGETS_DECLARED,
    InvariantId.RULES_DEPS_SATISFIABLE,
)


def run_checkers(ctx: RuleCheckContext, invariant_ids: Sequence[InvariantId]) -> tuple[InvariantOutcome, ...]:
    return tuple(REGISTRY[invariant_id](ctx) for invariant_id in invariant_ids)


def first_stop(outcomes: Sequence[InvariantOutcome]) -> Optional[InvariantOutcome]:
    for outcome in outcomes:
        if outcome.flow == Flow.STOP:
            return outcome
    return None
