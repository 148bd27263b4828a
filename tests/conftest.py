from pathlib import Path

import pytest

from rulecraft.config import RulecraftSettings, get_settings, set_settings
from rulecraft.expressions import SimpleEvalEvaluator
from rulecraft.models.facts import Facts
from rulecraft.rules import (
    BasicRule,
    JsonRuleDescriptorReader,
    RuleFactory,
    YamlRuleDescriptorReader,
)

FIXTURES = Path(__file__).parent / "fixtures"


def fixture_path(name: str) -> Path:
    """Path of a descriptor fixture file."""
    return FIXTURES / name


class Person:
    """Mutable fact used by the descriptor fixtures."""

    def __init__(self, name: str, age: int):
        self.name = name
        self.age = age
        self.adult = False

    def set_adult(self, adult: bool) -> None:
        self.adult = adult


def make_rule(name, priority, result=True, fired=None, error=None):
    """Create a BasicRule with a fixed condition that records its execution in ``fired``."""

    def condition(facts):
        if error is not None:
            raise error
        return result

    def record(facts):
        if fired is not None:
            fired.append(name)

    return BasicRule(name=name, priority=priority, condition=condition, actions=[record])


@pytest.fixture
def printed():
    """Collects everything expressions pass to print()."""
    return []


@pytest.fixture
def evaluator(printed):
    """simpleeval evaluator whose print() records into ``printed``."""
    return SimpleEvalEvaluator(functions={"print": lambda *args: printed.append(" ".join(map(str, args)))})


@pytest.fixture(params=["yml", "json"])
def factory_and_ext(request, evaluator):
    """A rule factory for each descriptor format, with the matching fixture extension."""
    reader = YamlRuleDescriptorReader() if request.param == "yml" else JsonRuleDescriptorReader()
    return RuleFactory(reader, evaluator), request.param


@pytest.fixture
def facts():
    return Facts()


@pytest.fixture(autouse=True)
def isolated_settings():
    """Give every test fresh settings and restore the global ones afterwards."""
    original_settings = get_settings()
    set_settings(RulecraftSettings())

    yield

    set_settings(original_settings)
