"""Decorators for defining rules as plain Python classes.

Example:
    @rule(name="adult rule", priority=1)
    class AdultRule:
        @condition
        def is_adult(self, age: int) -> bool:
            return age > 18

        @action
        def mark_adult(self, facts: Facts) -> None:
            facts.put("adult", True)

Condition and action parameters are resolved from the facts by name, except
for a single parameter annotated with ``Facts``, which receives the facts
themselves.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional, TypeVar, overload

from .models import DEFAULT_DESCRIPTION, DEFAULT_PRIORITY

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])

RULE_DEFINITION_ATTR = "__rule_definition__"
ROLE_ATTR = "__rule_role__"
ACTION_ORDER_ATTR = "__rule_action_order__"

CONDITION = "condition"
ACTION = "action"
PRIORITY = "priority"


@dataclass(frozen=True)
class RuleMetadata:
    """Rule metadata attached to a class by the ``@rule`` decorator."""

    name: str
    description: str = DEFAULT_DESCRIPTION
    priority: int = DEFAULT_PRIORITY


def rule(
    name: Optional[str] = None,
    description: str = DEFAULT_DESCRIPTION,
    priority: int = DEFAULT_PRIORITY,
) -> Callable[[type[T]], type[T]]:
    """Mark a class as a rule definition. The name defaults to the class name."""

    def decorator(cls: type[T]) -> type[T]:
        metadata = RuleMetadata(name or cls.__name__, description, priority)
        setattr(cls, RULE_DEFINITION_ATTR, metadata)
        return cls

    return decorator


def condition(func: F) -> F:
    """Mark the method that decides whether the rule applies."""
    setattr(func, ROLE_ATTR, CONDITION)
    return func


@overload
def action(func: F) -> F: ...


@overload
def action(*, order: int = 0) -> Callable[[F], F]: ...


def action(func: Optional[F] = None, *, order: int = 0) -> Any:
    """Mark a method as one of the rule's actions. Actions run by ascending order."""

    def decorator(f: F) -> F:
        setattr(f, ROLE_ATTR, ACTION)
        setattr(f, ACTION_ORDER_ATTR, order)
        return f

    if func is not None:
        return decorator(func)
    return decorator


def priority(func: F) -> F:
    """Mark the method that computes the rule's priority."""
    setattr(func, ROLE_ATTR, PRIORITY)
    return func


def get_rule_metadata(obj: Any) -> Optional[RuleMetadata]:
    return getattr(type(obj), RULE_DEFINITION_ATTR, None)


def get_marked_methods(obj: Any, role: str) -> list[tuple[str, Callable[..., Any]]]:
    """Return (name, function) pairs of the class methods marked with a role."""
    methods = []
    for klass in reversed(type(obj).__mro__):
        for attr_name, value in vars(klass).items():
            if callable(value) and getattr(value, ROLE_ATTR, None) == role:
                methods = [(n, m) for n, m in methods if n != attr_name]
                methods.append((attr_name, value))
    return methods
