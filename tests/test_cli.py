"""Tests for the command line interface."""

from click.testing import CliRunner

from rulecraft.cli import main
from tests.conftest import fixture_path


class TestCli:
    """Tests for the rulecraft CLI."""

    def test_list(self):
        """Test listing the rules of a descriptor file."""
        result = CliRunner().invoke(main, ["list", str(fixture_path("composite-rules.yml"))])

        assert result.exit_code == 0, result.output
        assert "Movie id rule" in result.output
        assert "Time is evening" in result.output
        assert "weather rule" in result.output

    def test_validate(self):
        """Test validating a correct descriptor file."""
        result = CliRunner().invoke(main, ["validate", str(fixture_path("rules.json"))])

        assert result.exit_code == 0, result.output
        assert "2 valid rule(s)" in result.output

    def test_validate_invalid_file(self):
        """Test that an invalid descriptor exits with an error."""
        path = fixture_path("composite-rule-invalid-empty-composing-rules.json")
        result = CliRunner().invoke(main, ["validate", str(path)])

        assert result.exit_code == 1
        assert "Composite rules must have composing rules specified" in result.output

    def test_fire_with_fact_options(self):
        """Test firing rules with facts given on the command line."""
        result = CliRunner().invoke(
            main, ["fire", str(fixture_path("discount-rules.yml")), "--fact", "age=70"]
        )

        assert result.exit_code == 0, result.output
        assert "Applied 2 of 2 rule(s)" in result.output
        assert "discount" in result.output

    def test_fire_with_facts_file(self):
        """Test firing rules with facts read from a file."""
        result = CliRunner().invoke(
            main,
            ["fire", str(fixture_path("rules.yml")), "--facts", str(fixture_path("facts.yml"))],
        )

        assert result.exit_code == 0, result.output
        assert "It rains, take an umbrella!" in result.output

    def test_fire_skip_on_first_applied_rule(self):
        """Test passing engine parameters as options."""
        result = CliRunner().invoke(
            main,
            [
                "fire",
                str(fixture_path("discount-rules.yml")),
                "--fact",
                "age=70",
                "--skip-on-first-applied-rule",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Applied 1 of 2 rule(s)" in result.output

    def test_invalid_fact_option(self):
        """Test that a fact without '=' is rejected."""
        result = CliRunner().invoke(main, ["fire", str(fixture_path("rules.yml")), "--fact", "age"])

        assert result.exit_code != 0

    def test_fact_without_value(self):
        """Test that an empty fact value is reported as an error."""
        result = CliRunner().invoke(main, ["fire", str(fixture_path("rules.yml")), "--fact", "age="])

        assert result.exit_code == 1
        assert "Fact 'age' must not be None" in result.output

    def test_facts_file_with_null_value(self, tmp_path):
        """Test that a null value in a facts file is reported as an error."""
        facts_file = tmp_path / "facts.yml"
        facts_file.write_text("age: 30\nrain:\n")

        result = CliRunner().invoke(
            main, ["fire", str(fixture_path("rules.yml")), "--facts", str(facts_file)]
        )

        assert result.exit_code == 1
        assert "Fact 'rain' must not be None" in result.output
