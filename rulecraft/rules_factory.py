"""Factory for building rule sets from descriptor files and settings."""

import logging
from pathlib import Path
from typing import Optional

from rulecraft.config import RulesSettings, get_settings
from rulecraft.errors import RuleError
from rulecraft.expressions import ExpressionEvaluator
from rulecraft.rules import (
    JsonRuleDescriptorReader,
    Rule,
    RuleFactory,
    Rules,
    YamlRuleDescriptorReader,
)
from rulecraft.rules.descriptor import RuleDescriptorReader

logger = logging.getLogger(__name__)


def _is_yaml_file(file_path: Path) -> bool:
    """Check if a file is a YAML file based on extension."""
    return file_path.suffix.lower() in [".yaml", ".yml"]


def _is_json_file(file_path: Path) -> bool:
    """Check if a file is a JSON file based on extension."""
    return file_path.suffix.lower() == ".json"


def get_reader(file_path: Path, descriptor_format: str = "auto") -> RuleDescriptorReader:
    """Pick the descriptor reader for a file.

    Args:
        file_path: Path to the descriptor file
        descriptor_format: "yaml", "json" or "auto" to decide from the extension

    Raises:
        ValueError: If the format cannot be determined
    """
    if descriptor_format == "yaml":
        return YamlRuleDescriptorReader()
    if descriptor_format == "json":
        return JsonRuleDescriptorReader()
    if _is_yaml_file(file_path):
        return YamlRuleDescriptorReader()
    if _is_json_file(file_path):
        return JsonRuleDescriptorReader()
    raise ValueError(
        f"Cannot determine descriptor format of '{file_path}': expected a .yml, .yaml or .json file"
    )


def build_rule_factory(
    file_path: Path,
    settings: RulesSettings,
    evaluator: Optional[ExpressionEvaluator] = None,
) -> RuleFactory:
    """Build a rule factory suited to a descriptor file."""
    return RuleFactory(
        reader=get_reader(file_path, settings.descriptor_format),
        evaluator=evaluator,
        default_priority=settings.default_priority,
    )


def _log_active_rules(rules: Rules) -> None:
    """Log the loaded rules for debugging."""
    if rules.is_empty():
        logger.warning("No rules defined - nothing will be fired")
        return

    logger.debug("Active rules:")
    for rule in rules:
        _log_rule(rule, indent="  ")


def _log_rule(rule: Rule, indent: str) -> None:
    logger.debug("%s%s (priority=%d, type=%s)", indent, rule.name, rule.priority, type(rule).__name__)
    for child in getattr(rule, "rules", []):
        _log_rule(child, indent + "  ")


def load_rules(
    file_path: str | Path,
    settings: Optional[RulesSettings] = None,
    evaluator: Optional[ExpressionEvaluator] = None,
) -> Rules:
    """Load a rule set from a descriptor file.

    Args:
        file_path: Path to a YAML or JSON descriptor file
        settings: Rule construction settings; the global ones when omitted
        evaluator: Expression evaluator; the simpleeval one when omitted

    Returns:
        Rules ordered by priority

    Raises:
        FileNotFoundError: If the file doesn't exist
        RuleError: If a rule definition is invalid
    """
    path = Path(file_path)
    if settings is None:
        settings = get_settings().rules
    logger.info("Loading rules from file: %s", path)

    try:
        factory = build_rule_factory(path, settings, evaluator)
        with open(path, "r") as f:
            rules = factory.create_rules(f)
    except (FileNotFoundError, RuleError) as e:
        logger.error("Failed to load rules file: %s", e)
        raise

    logger.info("Loaded %d rule(s) from %s", len(rules), path)
    _log_active_rules(rules)
    return rules
