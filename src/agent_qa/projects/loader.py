"""Reads project descriptors from YAML files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import yaml
from pydantic import ValidationError

from ..errors import ProjectLoadError
from .models import Project

DESCRIPTOR_SUFFIXES = (".yaml", ".yml")


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"]) or "<root>"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


class ProjectLoader:
    """Builds :class:`Project` descriptors from the YAML files in a list of directories.

    A file holds one project mapping, a list of mappings, or a mapping with a
    ``projects`` list. When two directories declare the same id the later
    directory wins; the same id twice inside one directory is an error.
    Problems from every file are gathered into a single :class:`ProjectLoadError`.
    """

    def __init__(self, search_paths: Iterable[Path] | None = None) -> None:
        roots = [Path(path) for path in (search_paths or [])]
        self._roots: list[Path] = [root for root in roots if root.is_dir()]

    @property
    def search_paths(self) -> list[Path]:
        return list(self._roots)

    def descriptor_files(self, root: Path) -> list[Path]:
        return sorted(
            path for path in root.iterdir() if path.is_file() and path.suffix in DESCRIPTOR_SUFFIXES
        )

    def _entries(self, path: Path, problems: list[str]) -> list[Any]:
        try:
            document = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            problems.append(f"{path}: invalid YAML ({exc})")
            return []
        if document is None:
            return []
        if isinstance(document, dict) and "projects" in document:
            document = document["projects"] or []
        if isinstance(document, dict):
            return [document]
        if isinstance(document, list):
            return document
        problems.append(f"{path}: expected a project mapping or a list of projects")
        return []

    def load_all(self) -> dict[str, Project]:
        projects: dict[str, Project] = {}
        problems: list[str] = []

        for root in self._roots:
            declared: dict[str, Path] = {}
            for path in self.descriptor_files(root):
                for entry in self._entries(path, problems):
                    try:
                        project = Project.model_validate(entry)
                    except ValidationError as exc:
                        problems.append(f"{path}: {_describe(exc)}")
                        continue
                    if project.id in declared:
                        problems.append(
                            f"{path}: project '{project.id}' is already declared in "
                            f"{declared[project.id].name}"
                        )
                        continue
                    declared[project.id] = path
                    projects[project.id] = project

        if problems:
            raise ProjectLoadError("; ".join(problems))
        return projects

    def get(self, project_id: str) -> Project:
        projects = self.load_all()
        if project_id not in projects:
            known = ", ".join(sorted(projects)) or "none"
            raise ProjectLoadError(f"Unknown project '{project_id}' (known: {known})")
        return projects[project_id]


__all__ = ["DESCRIPTOR_SUFFIXES", "Project", "ProjectLoadError", "ProjectLoader"]
