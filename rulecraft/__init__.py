"""rulecraft: declarative rules, composite rule groups and a rules engine."""

from rulecraft.engine import DefaultRulesEngine
from rulecraft.errors import (
    DescriptorParseError,
    ExpressionEvaluationError,
    MissingFactError,
    RuleConstructionError,
    RuleDefinitionError,
    RuleError,
)
from rulecraft.expressions import ExpressionEvaluator, SimpleEvalEvaluator
from rulecraft.models.facts import Facts

__all__ = [
    "DefaultRulesEngine",
    "DescriptorParseError",
    "ExpressionEvaluationError",
    "ExpressionEvaluator",
    "Facts",
    "MissingFactError",
    "RuleConstructionError",
    "RuleDefinitionError",
    "RuleError",
    "SimpleEvalEvaluator",
]
