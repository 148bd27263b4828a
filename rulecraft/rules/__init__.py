"""Rules, composite rule groups and declarative rule construction."""

from .annotations import action, condition, priority, rule
from .composite import (
    ActivationRuleGroup,
    CompositeRule,
    CompositeRuleType,
    ConditionalRuleGroup,
    UnitRuleGroup,
    create_composite_rule,
)
from .descriptor import JsonRuleDescriptorReader, RuleDescriptor, YamlRuleDescriptorReader
from .factory import RuleFactory
from .models import DEFAULT_PRIORITY, BasicRule, ExpressionRule, Rule, Rules
from .proxy import RuleProxy
from .validator import RuleShape, validate_descriptor, validate_rule_definition, validate_rule_shape

__all__ = [
    "ActivationRuleGroup",
    "BasicRule",
    "CompositeRule",
    "CompositeRuleType",
    "ConditionalRuleGroup",
    "DEFAULT_PRIORITY",
    "ExpressionRule",
    "JsonRuleDescriptorReader",
    "Rule",
    "RuleDescriptor",
    "RuleFactory",
    "RuleProxy",
    "RuleShape",
    "Rules",
    "UnitRuleGroup",
    "YamlRuleDescriptorReader",
    "action",
    "condition",
    "create_composite_rule",
    "priority",
    "rule",
    "validate_descriptor",
    "validate_rule_definition",
    "validate_rule_shape",
]
