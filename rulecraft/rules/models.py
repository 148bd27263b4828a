"""Data models for the rules system."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from typing import Optional, Union

from rulecraft.expressions import ExpressionAction, ExpressionCondition, ExpressionEvaluator
from rulecraft.models.facts import Facts

DEFAULT_NAME = "rule"
DEFAULT_DESCRIPTION = "description"
DEFAULT_PRIORITY = 2**31 - 2

Condition = Callable[[Facts], bool]
Action = Callable[[Facts], None]


class Rule(ABC):
    """A named, prioritized unit of conditional logic.

    Lower priority values take precedence. Rules compare by identity, so two
    distinct instances with the same name are different rules.
    """

    def __init__(
        self,
        name: str = DEFAULT_NAME,
        description: str = DEFAULT_DESCRIPTION,
        priority: int = DEFAULT_PRIORITY,
    ):
        self.name = name
        self.description = description
        self.priority = priority

    @abstractmethod
    def evaluate(self, facts: Facts) -> bool:
        """Return True if the rule should be executed against these facts."""
        pass

    @abstractmethod
    def execute(self, facts: Facts) -> None:
        """Run the rule's actions."""
        pass

    @property
    def is_composite(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"


class BasicRule(Rule):
    """A rule with a single condition and an ordered list of actions."""

    def __init__(
        self,
        name: str = DEFAULT_NAME,
        description: str = DEFAULT_DESCRIPTION,
        priority: int = DEFAULT_PRIORITY,
        condition: Optional[Condition] = None,
        actions: Optional[list[Action]] = None,
    ):
        super().__init__(name, description, priority)
        self.condition = condition
        self.actions: list[Action] = list(actions or [])

    def evaluate(self, facts: Facts) -> bool:
        if self.condition is None:
            return False
        return self.condition(facts)

    def execute(self, facts: Facts) -> None:
        for action in self.actions:
            action(facts)


class ExpressionRule(BasicRule):
    """A basic rule whose condition and actions are expression strings.

    Example:
        rule = (
            ExpressionRule(evaluator, name="adult rule", priority=1)
            .when("age > 18")
            .then("facts.put('adult', True)")
        )
    """

    def __init__(
        self,
        evaluator: ExpressionEvaluator,
        name: str = DEFAULT_NAME,
        description: str = DEFAULT_DESCRIPTION,
        priority: int = DEFAULT_PRIORITY,
    ):
        super().__init__(name, description, priority)
        self.evaluator = evaluator

    def when(self, expression: str) -> "ExpressionRule":
        self.condition = ExpressionCondition(expression, self.evaluator)
        return self

    def then(self, expression: str) -> "ExpressionRule":
        self.actions.append(ExpressionAction(expression, self.evaluator))
        return self


class Rules:
    """Ordered set of rules, sorted by ascending priority.

    Rules with equal priority keep their registration order. Registering the
    same instance twice has no effect; distinct rules may share a name.
    """

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: list[Rule] = []
        self.register(*rules)

    def register(self, *rules: Rule) -> None:
        """Register rules and restore priority order."""
        for rule in rules:
            if not any(existing is rule for existing in self._rules):
                self._rules.append(rule)
        self._rules.sort(key=lambda r: r.priority)

    def unregister(self, *rules: Union[Rule, str]) -> None:
        """Unregister rules, given either as instances or by name."""
        for target in rules:
            if isinstance(target, str):
                self._rules = [r for r in self._rules if r.name != target]
            else:
                self._rules = [r for r in self._rules if r is not target]

    def get(self, name: str) -> Optional[Rule]:
        """Return the first rule (in priority order) with the given name."""
        return next((r for r in self._rules if r.name == name), None)

    def clear(self) -> None:
        self._rules.clear()

    def is_empty(self) -> bool:
        return not self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(list(self._rules))

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule: object) -> bool:
        return any(r is rule for r in self._rules)

    def __repr__(self) -> str:
        return f"Rules({[r.name for r in self._rules]!r})"
