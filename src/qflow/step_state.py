from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from question_flow.contracts import Action
from question_flow.engine import Applier
from question_flow.rules import RuleSet


@dataclass
class FlowStepState:
    codes: list[str] = field(default_factory=list)
    rule_set: Optional[RuleSet] = None
    applier: Optional[Applier] = None
    last_action: Optional[Action] = None
    last_error: Optional[BaseException] = None
    pending_questions: dict[str, dict[str, Any]] = field(default_factory=dict)


def get_flow_step_state(context: Any) -> FlowStepState:
    state = getattr(context, "_flow_step_state", None)
    if not isinstance(state, FlowStepState):
        state = FlowStepState()
        setattr(context, "_flow_step_state", state)
    return state
