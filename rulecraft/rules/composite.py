"""Composite rule groups.

A composite rule owns an ordered list of child rules and defines what it
means for the group as a whole to be triggered and executed:

* UnitRuleGroup: all children must apply, then all of them are executed.
* ConditionalRuleGroup: a trigger rule decides; if it applies, it is executed
  followed by every other child that applies.
* ActivationRuleGroup: the first applicable child (by priority) is executed,
  and only that one.

Children are kept sorted by priority (stable on ties), so "stored order" and
"priority order" are the same thing. Errors raised while evaluating a child
propagate immediately.
"""

import logging
from enum import Enum
from typing import Optional

from rulecraft.errors import RuleDefinitionError
from rulecraft.models.facts import Facts

from .models import DEFAULT_DESCRIPTION, DEFAULT_NAME, DEFAULT_PRIORITY, Rule

logger = logging.getLogger(__name__)


class CompositeRuleType(Enum):
    """Closed set of composite rule group kinds."""

    UNIT = "UnitRuleGroup"
    CONDITIONAL = "ConditionalRuleGroup"
    ACTIVATION = "ActivationRuleGroup"

    @classmethod
    def names(cls) -> list[str]:
        return [t.value for t in cls]


class CompositeRule(Rule):
    """Base class for rules composed of other rules."""

    group_type: CompositeRuleType

    def __init__(
        self,
        name: str = DEFAULT_NAME,
        description: str = DEFAULT_DESCRIPTION,
        priority: int = DEFAULT_PRIORITY,
        rules: Optional[list[Rule]] = None,
    ):
        super().__init__(name, description, priority)
        self._rules: list[Rule] = []
        for rule in rules or []:
            self.add_rule(rule)

    @property
    def rules(self) -> list[Rule]:
        """Composing rules in priority order."""
        return list(self._rules)

    @property
    def is_composite(self) -> bool:
        return True

    def add_rule(self, rule: Rule) -> None:
        if any(existing is rule for existing in self._rules):
            return
        self._rules.append(rule)
        self._rules.sort(key=lambda r: r.priority)

    def remove_rule(self, rule: Rule) -> None:
        self._rules = [r for r in self._rules if r is not rule]


class UnitRuleGroup(CompositeRule):
    """All or nothing: applies only if every composing rule applies."""

    group_type = CompositeRuleType.UNIT

    def evaluate(self, facts: Facts) -> bool:
        if not self._rules:
            return False
        return all(rule.evaluate(facts) for rule in self._rules)

    def execute(self, facts: Facts) -> None:
        for rule in self._rules:
            rule.execute(facts)


class ActivationRuleGroup(CompositeRule):
    """Exclusive group: executes only the first composing rule that applies.

    The rule selected by ``evaluate`` is the one run by the following
    ``execute`` call.
    """

    group_type = CompositeRuleType.ACTIVATION

    def __init__(
        self,
        name: str = DEFAULT_NAME,
        description: str = DEFAULT_DESCRIPTION,
        priority: int = DEFAULT_PRIORITY,
        rules: Optional[list[Rule]] = None,
    ):
        self._selected_rule: Optional[Rule] = None
        super().__init__(name, description, priority, rules)

    def evaluate(self, facts: Facts) -> bool:
        self._selected_rule = None
        for rule in self._rules:
            if rule.evaluate(facts):
                self._selected_rule = rule
                return True
        return False

    def execute(self, facts: Facts) -> None:
        if self._selected_rule is not None:
            logger.debug("Group '%s' activating rule '%s'", self.name, self._selected_rule.name)
            self._selected_rule.execute(facts)


class ConditionalRuleGroup(CompositeRule):
    """Cascading group: a trigger rule gates the remaining composing rules.

    The trigger is the rule named by ``trigger_rule`` when given, otherwise
    the first composing rule in priority order. A named trigger must be one
    of the rules passed to the constructor.
    """

    group_type = CompositeRuleType.CONDITIONAL

    def __init__(
        self,
        name: str = DEFAULT_NAME,
        description: str = DEFAULT_DESCRIPTION,
        priority: int = DEFAULT_PRIORITY,
        rules: Optional[list[Rule]] = None,
        trigger_rule: Optional[str] = None,
    ):
        self.trigger_rule = trigger_rule
        self._successful_rules: list[Rule] = []
        super().__init__(name, description, priority, rules)
        if trigger_rule is not None and self.trigger is None:
            raise RuleDefinitionError(
                f"Rule '{name}': trigger rule '{trigger_rule}' is not one of its composing rules"
            )

    @property
    def trigger(self) -> Optional[Rule]:
        """The rule whose condition decides whether the group applies."""
        if self.trigger_rule is not None:
            return next((r for r in self._rules if r.name == self.trigger_rule), None)
        return self._rules[0] if self._rules else None

    def evaluate(self, facts: Facts) -> bool:
        self._successful_rules = []
        trigger = self.trigger
        if trigger is None or not trigger.evaluate(facts):
            return False
        for rule in self._rules:
            if rule is not trigger and rule.evaluate(facts):
                self._successful_rules.append(rule)
        return True

    def execute(self, facts: Facts) -> None:
        trigger = self.trigger
        if trigger is None:
            return
        trigger.execute(facts)
        for rule in self._successful_rules:
            rule.execute(facts)


GROUP_CLASSES: dict[CompositeRuleType, type[CompositeRule]] = {
    CompositeRuleType.UNIT: UnitRuleGroup,
    CompositeRuleType.CONDITIONAL: ConditionalRuleGroup,
    CompositeRuleType.ACTIVATION: ActivationRuleGroup,
}


def create_composite_rule(
    group_type: CompositeRuleType,
    name: str = DEFAULT_NAME,
    description: str = DEFAULT_DESCRIPTION,
    priority: int = DEFAULT_PRIORITY,
    rules: Optional[list[Rule]] = None,
    trigger_rule: Optional[str] = None,
) -> CompositeRule:
    """Build the composite rule class matching a group type."""
    if group_type is CompositeRuleType.CONDITIONAL:
        return ConditionalRuleGroup(name, description, priority, rules, trigger_rule=trigger_rule)
    return GROUP_CLASSES[group_type](name, description, priority, rules)
