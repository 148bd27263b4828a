"""Configuration for rule construction and firing using pydantic-settings."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from rulecraft.rules.models import DEFAULT_PRIORITY


class RulesSettings(BaseSettings):
    """Settings for building rules from descriptors."""

    model_config = SettingsConfigDict(
        env_prefix="RULES_",
    )

    default_priority: int = Field(
        default=DEFAULT_PRIORITY,
        description="Priority given to rules whose descriptor has none (lower runs first)",
    )
    descriptor_format: Literal["auto", "yaml", "json"] = Field(
        default="auto",
        description="Descriptor format; 'auto' picks it from the file extension",
    )


class RulesEngineParameters(BaseSettings):
    """Parameters controlling how the engine fires a rule set."""

    model_config = SettingsConfigDict(
        env_prefix="RULES_ENGINE_",
    )

    skip_on_first_applied_rule: bool = Field(
        default=False,
        description="Stop firing after the first rule that is applied",
    )
    skip_on_first_failed_rule: bool = Field(
        default=False,
        description="Stop firing after the first rule whose actions fail",
    )
    skip_on_first_non_triggered_rule: bool = Field(
        default=False,
        description="Stop firing after the first rule whose condition is false",
    )
    priority_threshold: int = Field(
        default=DEFAULT_PRIORITY + 1,
        description="Rules with a priority above this value are not fired",
    )


class RulecraftSettings(BaseSettings):
    """Global settings."""

    model_config = SettingsConfigDict(
        env_prefix="RULECRAFT_",
    )

    rules: RulesSettings = Field(default_factory=RulesSettings)
    engine: RulesEngineParameters = Field(default_factory=RulesEngineParameters)


# Global settings instance that can be accessed throughout the application
_settings: RulecraftSettings | None = None


def get_settings() -> RulecraftSettings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = RulecraftSettings()
    return _settings


def set_settings(settings: RulecraftSettings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings
