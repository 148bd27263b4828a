"""Factory for building rules from declarative descriptors."""

import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from rulecraft.errors import RuleConstructionError, RuleDefinitionError
from rulecraft.expressions import (
    ExpressionAction,
    ExpressionCondition,
    ExpressionEvaluator,
    SimpleEvalEvaluator,
)

from .composite import CompositeRuleType, create_composite_rule
from .descriptor import RuleDescriptor, RuleDescriptorReader, Source, YamlRuleDescriptorReader
from .models import DEFAULT_DESCRIPTION, DEFAULT_PRIORITY, BasicRule, Rule, Rules
from .validator import validate_descriptor

logger = logging.getLogger(__name__)

RuleSource = Union[Source, Mapping[str, Any], RuleDescriptor]


def _parse_priority(value: Any, rule_name: str, default: int) -> int:
    """Parse a descriptor priority into an int."""
    if value is None:
        return default
    if isinstance(value, bool):
        raise RuleConstructionError(
            f"Invalid priority {value!r} for rule '{rule_name}': expected an integer", rule_name
        )
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise RuleConstructionError(
        f"Invalid priority {value!r} for rule '{rule_name}': expected an integer", rule_name
    )


def _description(descriptor: RuleDescriptor) -> str:
    if descriptor.description is None:
        return DEFAULT_DESCRIPTION
    return descriptor.description


class RuleFactory:
    """Builds rules from descriptor text using a reader and an expression evaluator.

    The factory keeps no state between calls and can be shared freely.

    Example:
        factory = RuleFactory(YamlRuleDescriptorReader(), SimpleEvalEvaluator())
        with open("rules.yml") as f:
            rules = factory.create_rules(f)
    """

    def __init__(
        self,
        reader: Optional[RuleDescriptorReader] = None,
        evaluator: Optional[ExpressionEvaluator] = None,
        default_priority: int = DEFAULT_PRIORITY,
    ):
        self._reader = reader or YamlRuleDescriptorReader()
        self._evaluator = evaluator or SimpleEvalEvaluator()
        self._default_priority = default_priority

    @property
    def reader(self) -> RuleDescriptorReader:
        return self._reader

    @property
    def evaluator(self) -> ExpressionEvaluator:
        return self._evaluator

    def _descriptors(self, source: RuleSource) -> list[RuleDescriptor]:
        if isinstance(source, RuleDescriptor):
            return [source]
        if isinstance(source, Mapping):
            return [RuleDescriptor.from_mapping(source)]
        return [RuleDescriptor.from_mapping(data) for data in self._reader.read(source)]

    def create_rule(self, source: RuleSource) -> Rule:
        """Create a single rule from a descriptor.

        Args:
            source: Descriptor text, a text stream, a parsed mapping or a
                RuleDescriptor. When the text holds several definitions only
                the first one is used.

        Returns:
            The rule, a composite rule group when the descriptor declares a
            composite rule type

        Raises:
            RuleDefinitionError: If the descriptor is structurally invalid
            RuleConstructionError: If a field is missing or malformed
        """
        descriptors = self._descriptors(source)
        if not descriptors:
            raise RuleConstructionError("No rule definition found")
        if len(descriptors) > 1:
            logger.warning(
                "Descriptor holds %d rule definitions, only '%s' is used",
                len(descriptors),
                descriptors[0].name,
            )
        return self.create_rule_from_descriptor(descriptors[0])

    def create_rules(self, source: RuleSource) -> Rules:
        """Create all rules of a descriptor, ordered by priority.

        Either every rule is created or an error is raised; no partial rule
        set is returned.
        """
        created = [self.create_rule_from_descriptor(d) for d in self._descriptors(source)]
        logger.info("Created %d rule(s)", len(created))
        return Rules(created)

    def create_rule_from_descriptor(self, descriptor: RuleDescriptor) -> Rule:
        """Validate a descriptor and build its rule, recursing into composing rules."""
        validate_descriptor(descriptor)
        if descriptor.composite_rule_type is not None:
            group_type = CompositeRuleType(descriptor.composite_rule_type)
            return self._create_composite_rule(descriptor, group_type)
        return self._create_simple_rule(descriptor)

    def _create_simple_rule(self, descriptor: RuleDescriptor) -> Rule:
        if descriptor.condition is None:
            raise RuleDefinitionError(f"Rule '{descriptor.name}' must define exactly one condition")
        rule = BasicRule(
            name=descriptor.name,
            description=_description(descriptor),
            priority=_parse_priority(descriptor.priority, descriptor.name, self._default_priority),
            condition=ExpressionCondition(descriptor.condition, self._evaluator),
            actions=[ExpressionAction(a, self._evaluator) for a in descriptor.actions],
        )
        logger.debug("Created rule '%s' (priority=%d)", rule.name, rule.priority)
        return rule

    def _create_composite_rule(self, descriptor: RuleDescriptor, group_type: CompositeRuleType) -> Rule:
        # A group's condition and actions come from its composing rules
        if descriptor.condition is not None:
            logger.warning("Condition of composite rule '%s' will be ignored", descriptor.name)
        if descriptor.actions:
            logger.warning("Actions of composite rule '%s' will be ignored", descriptor.name)

        children = [self.create_rule_from_descriptor(d) for d in descriptor.composing_rules]
        rule = create_composite_rule(
            group_type,
            name=descriptor.name,
            description=_description(descriptor),
            priority=_parse_priority(descriptor.priority, descriptor.name, self._default_priority),
            rules=children,
            trigger_rule=descriptor.trigger_rule,
        )
        logger.debug(
            "Created %s '%s' with %d composing rule(s)",
            group_type.value,
            rule.name,
            len(children),
        )
        return rule
