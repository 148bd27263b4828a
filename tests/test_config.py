"""Tests for settings."""

from rulecraft.config import RulecraftSettings, RulesEngineParameters, RulesSettings, get_settings, set_settings
from rulecraft.engine import DefaultRulesEngine
from rulecraft.models.facts import Facts
from rulecraft.rules import DEFAULT_PRIORITY, Rules
from rulecraft.rules_factory import load_rules
from tests.conftest import make_rule


class TestSettings:
    """Tests for the pydantic settings."""

    def test_defaults(self):
        """Test the default values."""
        settings = RulecraftSettings()

        assert settings.rules.default_priority == DEFAULT_PRIORITY
        assert settings.rules.descriptor_format == "auto"
        assert not settings.engine.skip_on_first_applied_rule
        assert settings.engine.priority_threshold > DEFAULT_PRIORITY

    def test_environment(self, monkeypatch):
        """Test that settings are read from prefixed environment variables."""
        monkeypatch.setenv("RULES_DEFAULT_PRIORITY", "10")
        monkeypatch.setenv("RULES_ENGINE_SKIP_ON_FIRST_APPLIED_RULE", "true")

        assert RulesSettings().default_priority == 10
        assert RulesEngineParameters().skip_on_first_applied_rule

    def test_set_settings(self):
        """Test replacing the global settings."""
        settings = RulecraftSettings(rules=RulesSettings(default_priority=3))
        set_settings(settings)

        assert get_settings() is settings


class TestGlobalSettingsUsage:
    """Tests that the global settings are used when none are passed."""

    def test_load_rules_uses_global_rules_settings(self, tmp_path):
        """Test that load_rules reads the default priority and format from the global settings."""
        rules_file = tmp_path / "rules.txt"
        rules_file.write_text('{"name": "r", "condition": "True", "actions": ["1"]}')
        set_settings(
            RulecraftSettings(rules=RulesSettings(default_priority=7, descriptor_format="json"))
        )

        rules = load_rules(rules_file)

        assert [r.priority for r in rules] == [7]

    def test_engine_uses_global_parameters(self):
        """Test that an engine built without parameters uses the global ones."""
        set_settings(
            RulecraftSettings(engine=RulesEngineParameters(skip_on_first_applied_rule=True))
        )
        fired: list[str] = []
        rules = Rules([make_rule("a", 1, fired=fired), make_rule("b", 2, fired=fired)])

        engine = DefaultRulesEngine()
        engine.fire(rules, Facts())

        assert engine.parameters.skip_on_first_applied_rule
        assert fired == ["a"]

    def test_explicit_parameters_win(self):
        """Test that parameters passed to the engine override the global ones."""
        set_settings(
            RulecraftSettings(engine=RulesEngineParameters(skip_on_first_applied_rule=True))
        )

        engine = DefaultRulesEngine(RulesEngineParameters())

        assert not engine.parameters.skip_on_first_applied_rule
