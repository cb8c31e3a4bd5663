"""Configuration management for Agent.QA."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated
import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .ai import AIProviderKind


class QASettings(BaseSettings):
    """Runtime configuration sourced from environment variables and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    log_level: str = Field(default="INFO", validation_alias="AGENT_QA_LOG_LEVEL")

    headless: bool = Field(default=True, validation_alias="AGENT_QA_HEADLESS")
    viewport_width: int = Field(default=1280, validation_alias="AGENT_QA_VIEWPORT_WIDTH")
    viewport_height: int = Field(default=720, validation_alias="AGENT_QA_VIEWPORT_HEIGHT")
    default_timeout: float = Field(default=30.0, validation_alias="AGENT_QA_DEFAULT_TIMEOUT")
    navigation_timeout: float = Field(default=15.0, validation_alias="AGENT_QA_NAVIGATION_TIMEOUT")
    console_observation_window: float = Field(
        default=2.0, validation_alias="AGENT_QA_CONSOLE_WINDOW"
    )
    user_agent: str = Field(
        default="Agent.QA WebTester/1.0", validation_alias="AGENT_QA_USER_AGENT"
    )

    monitoring_interval: float = Field(
        default=300.0, validation_alias="AGENT_QA_MONITORING_INTERVAL"
    )
    performance_samples: int = Field(default=1, validation_alias="AGENT_QA_PERFORMANCE_SAMPLES")

    ai_provider: AIProviderKind = Field(
        default=AIProviderKind.OPENAI, validation_alias="AGENT_QA_AI_PROVIDER"
    )
    ai_model: str = Field(default="gpt-4", validation_alias="AGENT_QA_AI_MODEL")
    ai_temperature: float = Field(default=0.1, validation_alias="AGENT_QA_AI_TEMPERATURE")

    threshold_functionality: float = Field(
        default=95, validation_alias="AGENT_QA_THRESHOLD_FUNCTIONALITY"
    )
    threshold_performance: float = Field(
        default=90, validation_alias="AGENT_QA_THRESHOLD_PERFORMANCE"
    )
    threshold_security: float = Field(default=98, validation_alias="AGENT_QA_THRESHOLD_SECURITY")
    threshold_accessibility: float = Field(
        default=92, validation_alias="AGENT_QA_THRESHOLD_ACCESSIBILITY"
    )
    threshold_maintainability: float | None = Field(
        default=None, validation_alias="AGENT_QA_THRESHOLD_MAINTAINABILITY"
    )
    threshold_overall: float = Field(default=94, validation_alias="AGENT_QA_THRESHOLD_OVERALL")

    budget_load_ms: float = Field(default=3000, validation_alias="AGENT_QA_BUDGET_LOAD_MS")
    budget_dom_content_loaded_ms: float = Field(
        default=1500, validation_alias="AGENT_QA_BUDGET_DCL_MS"
    )
    budget_first_contentful_paint_ms: float = Field(
        default=1800, validation_alias="AGENT_QA_BUDGET_FCP_MS"
    )

    project_paths: Annotated[tuple[Path, ...], NoDecode] = Field(
        default=(Path("projects"),), validation_alias="AGENT_QA_PROJECT_PATHS"
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "AGENT_QA_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized

    @field_validator("ai_provider", mode="before")
    @classmethod
    def _normalize_provider(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator(
        "default_timeout", "navigation_timeout", "monitoring_interval", "performance_samples"
    )
    @classmethod
    def _require_positive(cls, value):
        if value <= 0:
            raise ValueError("timeouts, intervals and sample counts must be > 0")
        return value

    @field_validator("console_observation_window")
    @classmethod
    def _require_non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("AGENT_QA_CONSOLE_WINDOW must be >= 0")
        return value

    @field_validator("project_paths", mode="before")
    @classmethod
    def _parse_project_paths(cls, value):
        if value is None or value == "":
            return (Path("projects"),)
        if isinstance(value, (list, tuple)):
            return tuple(Path(str(item)) for item in value)
        if isinstance(value, str):
            parts = [part.strip() for part in value.split(os.pathsep) if part.strip()]
            return tuple(Path(part) for part in parts) or (Path("projects"),)
        raise TypeError("AGENT_QA_PROJECT_PATHS must be a list of paths or a path-separated string")

    @property
    def viewport(self) -> dict[str, int]:
        return {"width": self.viewport_width, "height": self.viewport_height}

    @property
    def thresholds(self) -> dict[str, float]:
        """Per-category quality thresholds.

        Maintainability falls back to the overall threshold unless overridden.
        """

        maintainability = self.threshold_maintainability
        if maintainability is None:
            maintainability = self.threshold_overall
        return {
            "functionality": self.threshold_functionality,
            "performance": self.threshold_performance,
            "security": self.threshold_security,
            "accessibility": self.threshold_accessibility,
            "maintainability": maintainability,
            "overall": self.threshold_overall,
        }

    @property
    def performance_budgets(self) -> dict[str, float]:
        return {
            "load_time": self.budget_load_ms,
            "dom_content_loaded": self.budget_dom_content_loaded_ms,
            "first_contentful_paint": self.budget_first_contentful_paint_ms,
        }


@lru_cache(maxsize=1)
def get_settings() -> QASettings:
    """Return cached settings instance."""

    settings = QASettings()
    settings.project_paths = tuple(path.expanduser().resolve() for path in settings.project_paths)
    return settings


__all__ = ["QASettings", "get_settings"]
