"""Adapts instances of ``@rule`` decorated classes to the Rule interface."""

import logging
from collections.abc import Callable
from typing import Any

from rulecraft.errors import MissingFactError, RuleConstructionError, RuleDefinitionError
from rulecraft.models.facts import Facts

from .annotations import (
    ACTION,
    ACTION_ORDER_ATTR,
    CONDITION,
    PRIORITY,
    get_marked_methods,
    get_rule_metadata,
)
from .models import Rule
from .validator import facts_parameter_names, method_parameters, validate_rule_definition

logger = logging.getLogger(__name__)


class RuleProxy(Rule):
    """A Rule backed by a decorated object.

    A condition that needs a missing fact does not apply; an action that
    needs one raises MissingFactError.
    """

    def __init__(self, target: Any):
        validate_rule_definition(target)
        metadata = get_rule_metadata(target)
        if metadata is None:
            raise RuleDefinitionError(f"Rule '{type(target).__name__}' must be decorated with @rule")
        super().__init__(metadata.name, metadata.description, metadata.priority)
        self.target = target

        _, self._condition = get_marked_methods(target, CONDITION)[0]
        self._actions = sorted(
            (func for _, func in get_marked_methods(target, ACTION)),
            key=lambda func: getattr(func, ACTION_ORDER_ATTR, 0),
        )
        priority_methods = get_marked_methods(target, PRIORITY)
        if priority_methods:
            _, priority_method = priority_methods[0]
            value = priority_method(target)
            if isinstance(value, bool) or not isinstance(value, int):
                raise RuleConstructionError(
                    f"Priority method of rule '{self.name}' returned {value!r}, expected an int",
                    self.name,
                )
            self.priority = value

    @classmethod
    def from_object(cls, target: Any) -> Rule:
        """Wrap a decorated object; objects that already are rules are returned as is."""
        if isinstance(target, Rule):
            return target
        return cls(target)

    def _arguments(self, func: Callable[..., Any], facts: Facts) -> list[Any]:
        facts_parameters = facts_parameter_names(func)
        arguments = []
        for parameter in method_parameters(func):
            if parameter.name in facts_parameters:
                arguments.append(facts)
            elif parameter.name in facts:
                arguments.append(facts[parameter.name])
            else:
                raise MissingFactError(parameter.name)
        return arguments

    def evaluate(self, facts: Facts) -> bool:
        try:
            arguments = self._arguments(self._condition, facts)
        except MissingFactError as e:
            logger.debug("Rule '%s' does not apply: %s", self.name, e)
            return False
        return bool(self._condition(self.target, *arguments))

    def execute(self, facts: Facts) -> None:
        for func in self._actions:
            func(self.target, *self._arguments(func, facts))
