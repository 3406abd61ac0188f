"""
Skip/recover decision engine for linear, branchable questionnaires.

`define` builds and validates a rule set; `use` wraps it in an applier whose
`apply(code, args)` returns the questions to skip and to recover.
"""

from question_flow.contracts import Action, QuestionConfig
from question_flow.engine import Applier, FlowEngine, use
from question_flow.errors import DefinitionError, FlowError, QuestionArgumentError, RuleError, UsageError
from question_flow.rules import QuestionBuilder, RuleSet, define
from question_flow.transition import ArgumentBindings, TransitionContext

__all__ = [
    "Action",
    "Applier",
    "ArgumentBindings",
    "DefinitionError",
    "FlowEngine",
    "FlowError",
    "QuestionArgumentError",
    "QuestionBuilder",
    "QuestionConfig",
    "RuleError",
    "RuleSet",
    "TransitionContext",
    "UsageError",
    "define",
    "use",
]
