"""Exceptions raised while building and evaluating rules."""

from typing import Optional


class RuleError(Exception):
    """Base class for all rulecraft errors."""

    pass


class RuleDefinitionError(RuleError, ValueError):
    """Raised when a rule definition violates a structural invariant."""

    pass


class RuleConstructionError(RuleError, ValueError):
    """Raised when a rule cannot be built from its definition."""

    def __init__(self, message: str, rule_name: Optional[str] = None):
        super().__init__(message)
        self.rule_name = rule_name


class DescriptorParseError(RuleConstructionError):
    """Raised when descriptor text cannot be parsed."""

    pass


class ExpressionEvaluationError(RuleError):
    """Raised when a bound expression fails against a set of facts."""

    def __init__(self, message: str, expression: str):
        super().__init__(message)
        self.expression = expression


class MissingFactError(RuleError):
    """Raised when an action of a decorated rule needs a fact that is not present."""

    def __init__(self, fact_name: str):
        super().__init__(f"No fact named '{fact_name}' found")
        self.fact_name = fact_name
