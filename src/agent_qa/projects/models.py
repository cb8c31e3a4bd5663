"""Project descriptors assessed by Agent.QA."""

from __future__ import annotations

from typing import Any, ClassVar, Literal

from pydantic import BaseModel, Field, field_validator

ProjectType = Literal["website", "web_app", "ecommerce"]
Complexity = Literal["low", "medium", "high"]
Priority = Literal["critical", "high", "medium", "low"]


class Project(BaseModel):
    """A web property under assessment."""

    id: str = Field(..., description="Stable identifier for the project.")
    name: str = Field(..., description="Display name used in reports and alerts.")
    url: str = Field(..., description="Entry URL every checking unit starts from.")
    type: ProjectType | None = Field(
        default=None,
        description="Explicit project type; inferred from features when omitted.",
    )
    pages: list[str] = Field(
        default_factory=list,
        description="Additional page URLs that belong to the property.",
    )
    features: list[str] = Field(
        default_factory=list,
        description="Product features (login, checkout, search...) used for classification.",
    )
    dependencies: list[str] = Field(
        default_factory=list,
        description="Third-party services the property relies on.",
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Arbitrary metadata attached to reports.",
    )

    @field_validator("id", "name")
    @classmethod
    def _normalize_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Project id and name must not be empty")
        return normalized

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized.startswith(("http://", "https://", "file://")):
            raise ValueError("Project url must be an http(s) or file URL")
        return normalized

    @field_validator("pages", "features", "dependencies", mode="before")
    @classmethod
    def _ensure_list(cls, value: Any):  # type: ignore[override]
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return list(value)
        raise TypeError("pages, features and dependencies must be sequences of strings")


class TestPlan(BaseModel):
    """Execution plan derived from a project's type and complexity."""

    __test__: ClassVar[bool] = False

    project_type: ProjectType
    complexity: Complexity
    priority: Priority
    suites: list[str] = Field(default_factory=lambda: ["basic"])
    targets: list[str] = Field(default_factory=list)
    coverage: int = Field(default=80, ge=0, le=100, description="Target coverage percentage.")
    timeline: dict[str, Any] = Field(default_factory=dict)
    resources: dict[str, Any] = Field(default_factory=dict)
    analysis_notes: str = ""


__all__ = ["Complexity", "Priority", "Project", "ProjectType", "TestPlan"]
