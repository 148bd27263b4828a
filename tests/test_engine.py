"""Tests for the rules engine."""

import pytest

from rulecraft.config import RulesEngineParameters
from rulecraft.engine import DefaultRulesEngine
from rulecraft.models.facts import Facts
from rulecraft.rules import BasicRule, RuleFactory, Rules
from tests.conftest import fixture_path, make_rule


def _failing_rule(name, priority, fired):
    def fail(facts):
        fired.append(name)
        raise RuntimeError("action failed")

    return BasicRule(name=name, priority=priority, condition=lambda facts: True, actions=[fail])


class TestDefaultRulesEngine:
    """Tests for DefaultRulesEngine.fire."""

    def test_fires_in_priority_order(self):
        """Test that triggered rules are executed by ascending priority."""
        fired: list[str] = []
        rules = Rules([make_rule("b", 2, fired=fired), make_rule("a", 1, fired=fired)])

        applied = DefaultRulesEngine().fire(rules, Facts())

        assert fired == ["a", "b"]
        assert [r.name for r in applied] == ["a", "b"]

    def test_non_triggered_rules_are_not_executed(self):
        """Test that rules whose condition is false are skipped."""
        fired: list[str] = []
        rules = Rules([make_rule("a", 1, result=False, fired=fired), make_rule("b", 2, fired=fired)])

        DefaultRulesEngine().fire(rules, Facts())
        assert fired == ["b"]

    def test_evaluation_error_continues_with_next_rule(self):
        """Test that a failing condition does not stop the cycle."""
        fired: list[str] = []
        rules = Rules([make_rule("a", 1, error=RuntimeError("boom")), make_rule("b", 2, fired=fired)])

        DefaultRulesEngine().fire(rules, Facts())
        assert fired == ["b"]

    def test_action_error_is_not_applied(self):
        """Test that a rule whose action fails is not reported as applied."""
        fired: list[str] = []
        rules = Rules([_failing_rule("a", 1, fired), make_rule("b", 2, fired=fired)])

        applied = DefaultRulesEngine().fire(rules, Facts())
        assert fired == ["a", "b"]
        assert [r.name for r in applied] == ["b"]

    def test_empty_rules(self):
        """Test that firing no rules does nothing."""
        assert DefaultRulesEngine().fire(Rules(), Facts()) == []

    @pytest.mark.parametrize(
        "parameters, rule_rows, expected",
        [
            (
                RulesEngineParameters(skip_on_first_applied_rule=True),
                [("a", 1, True), ("b", 2, True)],
                ["a"],
            ),
            (
                RulesEngineParameters(skip_on_first_non_triggered_rule=True),
                [("a", 1, False), ("b", 2, True)],
                [],
            ),
            (
                RulesEngineParameters(priority_threshold=1),
                [("a", 1, True), ("b", 2, True)],
                ["a"],
            ),
        ],
    )
    def test_parameters(self, parameters, rule_rows, expected):
        """Test the skip parameters and the priority threshold."""
        fired: list[str] = []
        rules = Rules([make_rule(n, p, result=r, fired=fired) for n, p, r in rule_rows])

        DefaultRulesEngine(parameters).fire(rules, Facts())
        assert fired == expected

    def test_skip_on_first_failed_rule(self):
        """Test that firing stops after a failing rule when asked to."""
        fired: list[str] = []
        rules = Rules([_failing_rule("a", 1, fired), make_rule("b", 2, fired=fired)])

        DefaultRulesEngine(RulesEngineParameters(skip_on_first_failed_rule=True)).fire(rules, Facts())
        assert fired == ["a"]

    def test_check(self):
        """Test evaluating rules without executing them."""
        fired: list[str] = []
        a = make_rule("a", 1, fired=fired)
        b = make_rule("b", 2, result=False, fired=fired)

        results = DefaultRulesEngine().check(Rules([a, b]), Facts())
        assert results == {a: True, b: False}
        assert fired == []


class TestFiringDescriptorRules:
    """End-to-end tests firing rules built from descriptors."""

    def test_activation_group_picks_one_discount(self, evaluator):
        """Test that only the highest precedence discount is applied."""
        with open(fixture_path("discount-rules.yml")) as f:
            rules = RuleFactory(evaluator=evaluator).create_rules(f)
        facts = Facts({"age": 70})

        DefaultRulesEngine().fire(rules, facts)
        assert facts["adult"] is True
        assert facts["discount"] == 20

    def test_activation_group_falls_through(self, evaluator):
        """Test that a lower precedence child fires when the first does not match."""
        with open(fixture_path("discount-rules.yml")) as f:
            rules = RuleFactory(evaluator=evaluator).create_rules(f)
        facts = Facts({"age": 30})

        DefaultRulesEngine().fire(rules, facts)
        assert facts["discount"] == 5

    def test_unit_group_all_or_nothing(self, evaluator):
        """Test the composite fixture: both children fire or none does."""
        with open(fixture_path("composite-rules.yml")) as f:
            rules = RuleFactory(evaluator=evaluator).create_rules(f)

        class Clock:
            hour = 21

        class Movie:
            rating = "R"

        facts = Facts({"day": Clock(), "movie": Movie(), "rain": False})
        DefaultRulesEngine().fire(rules, facts)
        assert facts["evening"] is True
        assert facts["restricted"] is True

        Movie.rating = "PG"
        facts = Facts({"day": Clock(), "movie": Movie(), "rain": False})
        DefaultRulesEngine().fire(rules, facts)
        assert "evening" not in facts
        assert "restricted" not in facts
