"""Structural validation of rule definitions.

Descriptors and decorated classes are both reduced to a ``RuleShape`` and
checked by the same function. Decorated classes get extra checks on the
signatures of their marked methods. Validation stops at the first violation.
"""

import inspect
import typing
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional

from rulecraft.errors import RuleDefinitionError
from rulecraft.models.facts import Facts

from .annotations import (
    ACTION,
    CONDITION,
    PRIORITY,
    get_marked_methods,
    get_rule_metadata,
)
from .composite import CompositeRuleType
from .descriptor import RuleDescriptor


@dataclass(frozen=True)
class RuleShape:
    """What a rule definition declares, independent of where it came from."""

    name: str
    composite_rule_type: Optional[str] = None
    composing_rules: int = 0
    conditions: int = 0
    actions: int = 0
    priorities: int = 0
    trigger_rule: Optional[str] = None
    composing_rule_names: tuple[str, ...] = ()

    @classmethod
    def from_descriptor(cls, descriptor: RuleDescriptor) -> "RuleShape":
        return cls(
            name=descriptor.name,
            composite_rule_type=descriptor.composite_rule_type,
            composing_rules=len(descriptor.composing_rules),
            conditions=0 if descriptor.condition is None else 1,
            actions=len(descriptor.actions),
            priorities=0 if descriptor.priority is None else 1,
            trigger_rule=descriptor.trigger_rule,
            composing_rule_names=tuple(d.name for d in descriptor.composing_rules),
        )

    @classmethod
    def from_object(cls, obj: Any) -> "RuleShape":
        metadata = get_rule_metadata(obj)
        return cls(
            name=metadata.name if metadata else type(obj).__name__,
            conditions=len(get_marked_methods(obj, CONDITION)),
            actions=len(get_marked_methods(obj, ACTION)),
            priorities=len(get_marked_methods(obj, PRIORITY)),
        )


def _validate_composite(shape: RuleShape) -> None:
    if shape.composite_rule_type not in CompositeRuleType.names():
        allowed = ", ".join(CompositeRuleType.names())
        raise RuleDefinitionError(f"Invalid composite rule type, must be one of [{allowed}]")
    if shape.composing_rules == 0:
        raise RuleDefinitionError("Composite rules must have composing rules specified")
    if shape.trigger_rule is None:
        return
    if shape.composite_rule_type != CompositeRuleType.CONDITIONAL.value:
        raise RuleDefinitionError(
            f"Rule '{shape.name}': only {CompositeRuleType.CONDITIONAL.value} "
            "rules can designate a trigger rule"
        )
    if shape.trigger_rule not in shape.composing_rule_names:
        raise RuleDefinitionError(
            f"Rule '{shape.name}': trigger rule '{shape.trigger_rule}' "
            "is not one of its composing rules"
        )


def validate_rule_shape(shape: RuleShape) -> None:
    """Check the invariants every rule definition must satisfy.

    Raises:
        RuleDefinitionError: On the first violated invariant
    """
    if shape.composite_rule_type is not None:
        _validate_composite(shape)
        return

    if shape.composing_rules > 0:
        raise RuleDefinitionError("Non-composite rules cannot have composing rules")
    if shape.trigger_rule is not None:
        raise RuleDefinitionError(
            f"Rule '{shape.name}': only composite rules can designate a trigger rule"
        )
    if shape.conditions != 1:
        raise RuleDefinitionError(f"Rule '{shape.name}' must define exactly one condition")
    if shape.actions < 1:
        raise RuleDefinitionError(f"Rule '{shape.name}' must define at least one action")
    if shape.priorities > 1:
        raise RuleDefinitionError(f"Rule '{shape.name}' must define at most one priority")


def validate_descriptor(descriptor: RuleDescriptor) -> None:
    """Validate a descriptor (composing descriptors are validated when built)."""
    validate_rule_shape(RuleShape.from_descriptor(descriptor))


def _annotation_is(annotation: Any, expected: Any) -> bool:
    # String annotations come from modules using postponed evaluation
    if expected is None:
        return annotation is None or annotation is type(None) or annotation == "None"
    return annotation is expected or annotation == expected.__name__


def _parameter_annotations(func: Callable[..., Any]) -> dict[str, Any]:
    """Parameter annotations with string annotations resolved where possible."""
    try:
        return typing.get_type_hints(func)
    except (NameError, TypeError):
        return dict(getattr(func, "__annotations__", {}))


def _is_facts_annotation(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation == Facts.__name__
    try:
        return isinstance(annotation, type) and issubclass(annotation, Facts)
    except TypeError:
        # Parameterized generics such as list[int]
        return False


def facts_parameter_names(func: Callable[..., Any]) -> set[str]:
    """Names of the parameters that receive the Facts object itself."""
    annotations = _parameter_annotations(func)
    return {
        p.name
        for p in method_parameters(func)
        if _is_facts_annotation(annotations.get(p.name, p.annotation))
    }


def method_parameters(func: Callable[..., Any]) -> list[inspect.Parameter]:
    """Parameters of a method, without ``self``."""
    parameters = list(inspect.signature(func).parameters.values())
    return parameters[1:]


def _validate_public(rule_name: str, role: str, method_name: str) -> None:
    if method_name.startswith("_"):
        raise RuleDefinitionError(
            f"{role.capitalize()} method '{method_name}' in rule '{rule_name}' must be public"
        )


def _validate_fact_parameters(rule_name: str, method_name: str, func: Callable[..., Any]) -> None:
    for parameter in method_parameters(func):
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            raise RuleDefinitionError(
                f"Method '{method_name}' in rule '{rule_name}' must not take variadic parameters"
            )
    if len(facts_parameter_names(func)) > 1:
        raise RuleDefinitionError(
            f"Method '{method_name}' in rule '{rule_name}' must take at most one Facts parameter"
        )


def _validate_return(
    rule_name: str, role: str, method_name: str, func: Callable[..., Any], expected: Any
) -> None:
    annotation = inspect.signature(func).return_annotation
    if annotation is inspect.Signature.empty or _annotation_is(annotation, expected):
        return
    expected_name = "None" if expected is None else expected.__name__
    raise RuleDefinitionError(
        f"{role.capitalize()} method '{method_name}' in rule '{rule_name}' "
        f"must return {expected_name}"
    )


def _validate_methods(obj: Any, rule_name: str) -> None:
    for method_name, func in get_marked_methods(obj, CONDITION):
        _validate_public(rule_name, CONDITION, method_name)
        _validate_fact_parameters(rule_name, method_name, func)
        _validate_return(rule_name, CONDITION, method_name, func, bool)

    for method_name, func in get_marked_methods(obj, ACTION):
        _validate_public(rule_name, ACTION, method_name)
        _validate_fact_parameters(rule_name, method_name, func)
        _validate_return(rule_name, ACTION, method_name, func, None)

    for method_name, func in get_marked_methods(obj, PRIORITY):
        _validate_public(rule_name, PRIORITY, method_name)
        if method_parameters(func):
            raise RuleDefinitionError(
                f"Priority method '{method_name}' in rule '{rule_name}' must not take parameters"
            )
        _validate_return(rule_name, PRIORITY, method_name, func, int)


def validate_rule_definition(obj: Any) -> None:
    """Validate an instance of a class decorated with ``@rule``.

    Raises:
        RuleDefinitionError: If the class is not decorated or a marked method
            has the wrong shape
    """
    if get_rule_metadata(obj) is None:
        raise RuleDefinitionError(
            f"Rule '{type(obj).__name__}' must be decorated with @rule"
        )
    shape = RuleShape.from_object(obj)
    validate_rule_shape(shape)
    _validate_methods(obj, shape.name)
