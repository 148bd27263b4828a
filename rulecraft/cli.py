"""CLI interface for rulecraft."""

import logging
import sys
from pathlib import Path
from typing import Any

import click
import yaml  # type: ignore[import-untyped]
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from rulecraft.config import RulecraftSettings, RulesSettings, get_settings, set_settings
from rulecraft.engine import DefaultRulesEngine
from rulecraft.errors import RuleError
from rulecraft.expressions import SimpleEvalEvaluator
from rulecraft.models.facts import Facts
from rulecraft.rules import CompositeRule, Rule, Rules
from rulecraft.rules_factory import load_rules

console = Console()


def setup_logging(log_level: str) -> None:
    """Configure logging with rich handler."""
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_or_exit(path: Path, evaluator: Any = None) -> Rules:
    """Load rules with the global settings, printing the error and exiting on failure."""
    try:
        return load_rules(path, evaluator=evaluator)
    except (RuleError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)


def _rule_type(rule: Rule) -> str:
    if isinstance(rule, CompositeRule):
        return rule.group_type.value
    return "Rule"


def _add_rule_rows(table: Table, rule: Rule, depth: int = 0) -> None:
    indent = "  " * depth
    table.add_row(f"{indent}{rule.name}", str(rule.priority), _rule_type(rule), rule.description)
    if isinstance(rule, CompositeRule):
        for child in rule.rules:
            _add_rule_rows(table, child, depth + 1)


def display_rules(rules: Rules) -> None:
    """Display rules (and composing rules) as a table in firing order."""
    table = Table(title="\n[bold cyan]Rules[/bold cyan]", show_header=True, header_style="bold")
    table.add_column("Name", style="cyan")
    table.add_column("Priority", justify="right")
    table.add_column("Type")
    table.add_column("Description", style="dim")
    for rule in rules:
        _add_rule_rows(table, rule)
    console.print(table)


def display_facts(facts: Facts) -> None:
    """Display facts as a table."""
    table = Table(title="\n[bold cyan]Facts[/bold cyan]", show_header=True, header_style="bold")
    table.add_column("Name", style="cyan")
    table.add_column("Value")
    for name, value in facts.items():
        table.add_row(name, repr(value))
    console.print(table)


def _parse_fact(fact: str) -> tuple[str, Any]:
    """Parse a NAME=VALUE option; the value is read as a YAML scalar."""
    if "=" not in fact:
        raise click.BadParameter(f"Invalid fact '{fact}': expected 'name=value'")
    name, value = fact.split("=", 1)
    return name.strip(), yaml.safe_load(value)


def _load_facts(facts_file: Path | None, fact_options: tuple[str, ...]) -> Facts:
    """Build facts from a YAML/JSON mapping file and NAME=VALUE options."""
    facts = Facts()
    if facts_file is not None:
        with open(facts_file, "r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise click.BadParameter(f"Facts file '{facts_file}' must contain a mapping")
        for name, value in data.items():
            facts.put(str(name), value)
    for fact in fact_options:
        name, value = _parse_fact(fact)
        facts.put(name, value)
    return facts


def _load_facts_or_exit(facts_file: Path | None, fact_options: tuple[str, ...]) -> Facts:
    """Load facts, printing the error and exiting when a fact is rejected."""
    try:
        return _load_facts(facts_file, fact_options)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)


def _configure_engine(**skip_flags: bool) -> None:
    """Turn on the engine parameters given as flags, keeping those set in the environment."""
    settings = get_settings()
    enabled = {name: True for name, value in skip_flags.items() if value}
    engine = settings.engine.model_copy(update=enabled)
    set_settings(settings.model_copy(update={"engine": engine}))


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="WARNING",
    help="Set the logging level",
)
@click.option(
    "--format",
    "descriptor_format",
    type=click.Choice(["auto", "yaml", "json"], case_sensitive=False),
    default="auto",
    help="Descriptor format (default: from the file extension)",
)
def main(log_level: str, descriptor_format: str) -> None:
    """Declarative rules: build rule sets from YAML or JSON descriptors and fire them."""
    setup_logging(log_level.upper())

    set_settings(RulecraftSettings(rules=RulesSettings(descriptor_format=descriptor_format.lower())))


@main.command(name="list")
@click.argument("rules_file", type=click.Path(exists=True, path_type=Path))
def list_rules(rules_file: Path) -> None:
    """List the rules of a descriptor file in firing order."""
    rules = _load_or_exit(rules_file)
    console.print(f"\nRules file: [cyan]{rules_file}[/cyan]")
    display_rules(rules)


@main.command()
@click.argument("rules_file", type=click.Path(exists=True, path_type=Path))
def validate(rules_file: Path) -> None:
    """Check that every rule of a descriptor file can be built."""
    rules = _load_or_exit(rules_file)
    console.print(f"[green]✓[/green] {rules_file}: {len(rules)} valid rule(s)")


@main.command()
@click.argument("rules_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--facts",
    "facts_file",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="YAML or JSON file holding a mapping of facts",
)
@click.option(
    "--fact",
    "fact_options",
    multiple=True,
    help="Fact as name=value (repeatable; the value is parsed as YAML)",
)
@click.option(
    "--skip-on-first-applied-rule",
    is_flag=True,
    default=False,
    help="Stop after the first rule that is applied",
)
@click.option(
    "--skip-on-first-failed-rule",
    is_flag=True,
    default=False,
    help="Stop after the first rule whose actions fail",
)
@click.option(
    "--skip-on-first-non-triggered-rule",
    is_flag=True,
    default=False,
    help="Stop after the first rule whose condition is false",
)
def fire(
    rules_file: Path,
    facts_file: Path | None,
    fact_options: tuple[str, ...],
    skip_on_first_applied_rule: bool,
    skip_on_first_failed_rule: bool,
    skip_on_first_non_triggered_rule: bool,
) -> None:
    """Fire the rules of a descriptor file against a set of facts."""
    _configure_engine(
        skip_on_first_applied_rule=skip_on_first_applied_rule,
        skip_on_first_failed_rule=skip_on_first_failed_rule,
        skip_on_first_non_triggered_rule=skip_on_first_non_triggered_rule,
    )

    facts = _load_facts_or_exit(facts_file, fact_options)
    evaluator = SimpleEvalEvaluator(functions={"print": console.print})
    rules = _load_or_exit(rules_file, evaluator)

    applied = DefaultRulesEngine().fire(rules, facts)

    console.print(f"\n[bold green]Applied {len(applied)} of {len(rules)} rule(s)[/bold green]")
    for rule in applied:
        console.print(f"  [green]✓[/green] {rule.name}")
    display_facts(facts)


if __name__ == "__main__":
    main()
