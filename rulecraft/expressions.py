"""Expression evaluation for declaratively defined rules.

Conditions and actions read from descriptors are plain expression strings.
They are bound to an evaluator when the rule is built and only evaluated
when the rule is evaluated or executed against a set of facts.
"""

import logging
from collections.abc import Callable
from typing import Any, Optional, Protocol

from simpleeval import DEFAULT_FUNCTIONS, EvalWithCompoundTypes  # type: ignore[import-untyped]

from rulecraft.errors import ExpressionEvaluationError
from rulecraft.models.facts import Facts

logger = logging.getLogger(__name__)

FACTS_NAME = "facts"


class ExpressionEvaluator(Protocol):
    """Evaluates textual expressions against a set of facts."""

    def evaluate_condition(self, expression: str, facts: Facts) -> bool: ...

    def execute_action(self, expression: str, facts: Facts) -> None: ...


class SimpleEvalEvaluator:
    """Expression evaluator backed by simpleeval.

    Every fact is visible as a variable. The Facts object itself is exposed
    as ``facts`` (unless a fact already uses that name) so actions can add or
    update facts, e.g. ``facts.put('adult', True)``.
    """

    def __init__(self, functions: Optional[dict[str, Callable[..., Any]]] = None):
        self._functions: dict[str, Callable[..., Any]] = dict(DEFAULT_FUNCTIONS)
        if functions:
            self._functions.update(functions)

    @property
    def functions(self) -> dict[str, Callable[..., Any]]:
        return dict(self._functions)

    def _names(self, facts: Facts) -> dict[str, Any]:
        names = facts.as_dict()
        names.setdefault(FACTS_NAME, facts)
        return names

    def _eval(self, expression: str, facts: Facts) -> Any:
        # A new interpreter per call keeps the evaluator free of shared state
        interpreter = EvalWithCompoundTypes(functions=self._functions, names=self._names(facts))
        try:
            return interpreter.eval(expression)
        except Exception as e:
            logger.debug("Expression '%s' failed: %s", expression, e)
            raise ExpressionEvaluationError(
                f"Unable to evaluate expression '{expression}': {e}", expression
            ) from e

    def evaluate_condition(self, expression: str, facts: Facts) -> bool:
        """Evaluate a condition expression and return its truth value."""
        return bool(self._eval(expression, facts))

    def execute_action(self, expression: str, facts: Facts) -> None:
        """Evaluate an action expression for its side effects."""
        self._eval(expression, facts)


class ExpressionCondition:
    """A condition expression bound to an evaluator."""

    def __init__(self, expression: str, evaluator: ExpressionEvaluator):
        self.expression = expression
        self.evaluator = evaluator

    def __call__(self, facts: Facts) -> bool:
        return self.evaluator.evaluate_condition(self.expression, facts)

    def __repr__(self) -> str:
        return f"ExpressionCondition({self.expression!r})"


class ExpressionAction:
    """An action expression bound to an evaluator."""

    def __init__(self, expression: str, evaluator: ExpressionEvaluator):
        self.expression = expression
        self.evaluator = evaluator

    def __call__(self, facts: Facts) -> None:
        self.evaluator.execute_action(self.expression, facts)

    def __repr__(self) -> str:
        return f"ExpressionAction({self.expression!r})"
