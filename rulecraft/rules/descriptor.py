"""Rule descriptors and the readers that produce them from text."""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, TextIO, Union

import yaml  # type: ignore[import-untyped]

from rulecraft.errors import DescriptorParseError, RuleConstructionError

Source = Union[str, TextIO]

COMPOSING_RULES_KEYS = ("composingRules", "rules")


@dataclass
class RuleDescriptor:
    """Format-agnostic definition of one rule, as read from a descriptor file.

    ``priority`` is kept as read and only converted to an int by the factory.
    """

    name: str
    description: Optional[str] = None
    priority: Any = None
    condition: Optional[str] = None
    actions: list[str] = field(default_factory=list)
    composite_rule_type: Optional[str] = None
    composing_rules: list["RuleDescriptor"] = field(default_factory=list)
    trigger_rule: Optional[str] = None

    @property
    def is_composite(self) -> bool:
        return self.composite_rule_type is not None

    @classmethod
    def from_mapping(cls, data: Any) -> "RuleDescriptor":
        """Build a descriptor (and its composing descriptors) from a mapping."""
        if not isinstance(data, Mapping):
            raise RuleConstructionError(
                f"Rule definition must be a mapping, got {type(data).__name__}"
            )

        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise RuleConstructionError("Rule definition missing required 'name' field")

        return cls(
            name=name,
            description=_optional_str(data, "description", name),
            priority=data.get("priority"),
            condition=_optional_str(data, "condition", name),
            actions=_parse_actions(data.get("actions"), name),
            composite_rule_type=_optional_str(data, "compositeRuleType", name),
            composing_rules=[
                cls.from_mapping(child) for child in _composing_rules_data(data, name)
            ],
            trigger_rule=_optional_str(data, "triggerRule", name),
        )


def _optional_str(data: Mapping[str, Any], key: str, rule_name: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise RuleConstructionError(
            f"Rule '{rule_name}' field '{key}' must be a string", rule_name
        )
    return value


def _parse_actions(value: Any, rule_name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(a, str) for a in value):
        raise RuleConstructionError(
            f"Rule '{rule_name}' field 'actions' must be a list of strings", rule_name
        )
    return list(value)


def _composing_rules_data(data: Mapping[str, Any], rule_name: str) -> list[Any]:
    for key in COMPOSING_RULES_KEYS:
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, list):
            raise RuleConstructionError(
                f"Rule '{rule_name}' field '{key}' must be a list of rule definitions",
                rule_name,
            )
        return value
    return []


def _read_text(source: Source) -> str:
    if isinstance(source, str):
        return source
    return source.read()


class RuleDescriptorReader(Protocol):
    """Parses descriptor text into a list of rule definition mappings."""

    def read(self, source: Source) -> list[dict[str, Any]]: ...


def _collect_definitions(item: Any, definitions: list[dict[str, Any]]) -> None:
    """Add one parsed document (a mapping or a list of mappings)."""
    if item is None:
        return
    if isinstance(item, dict):
        definitions.append(item)
    elif isinstance(item, list):
        for entry in item:
            if not isinstance(entry, dict):
                raise DescriptorParseError(
                    f"Rule definition must be a mapping, got {type(entry).__name__}"
                )
            definitions.append(entry)
    else:
        raise DescriptorParseError(
            f"Descriptor must contain rule definitions, got {type(item).__name__}"
        )


class YamlRuleDescriptorReader:
    """Reads rule definitions from a YAML stream.

    Each YAML document is either a single rule definition or a list of them;
    documents are separated with ``---``.
    """

    def read(self, source: Source) -> list[dict[str, Any]]:
        text = _read_text(source)
        definitions: list[dict[str, Any]] = []
        try:
            for document in yaml.safe_load_all(text):
                _collect_definitions(document, definitions)
        except yaml.YAMLError as e:
            raise DescriptorParseError(f"Invalid YAML: {e}") from e
        return definitions


class JsonRuleDescriptorReader:
    """Reads rule definitions from a JSON object or array of objects."""

    def read(self, source: Source) -> list[dict[str, Any]]:
        text = _read_text(source)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DescriptorParseError(f"Invalid JSON: {e}") from e
        definitions: list[dict[str, Any]] = []
        _collect_definitions(data, definitions)
        return definitions
