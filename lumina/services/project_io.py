"""JSON-based project save / load (.lumina.json)."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from lumina.models.project import Project
from lumina.utils.config import PROJECT_EXTENSION

logger = logging.getLogger(__name__)

PROJECT_VERSION = 1


class ProjectFormatError(ValueError):
    """The file is not a project this version can read."""


def is_project_file(path: Path) -> bool:
    """True when *path* names an existing project file (by extension)."""
    return path.is_file() and path.name.lower().endswith(PROJECT_EXTENSION)


def save_project(project: Project, path: Path) -> None:
    """Serialize *project* to a JSON file."""
    data = {"version": PROJECT_VERSION, "project": project.to_dict()}
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Saved project %s to %s", project.name, path)


def load_project(path: Path) -> Project:
    """Deserialize a project from a JSON file.

    Raises:
        ProjectFormatError: If the file is not valid JSON, was written by a
            newer version, or does not describe a project tree.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except json.JSONDecodeError as e:
        raise ProjectFormatError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ProjectFormatError(f"{path} does not contain a project object")

    version = data.get("version", 1)
    if not isinstance(version, int) or version > PROJECT_VERSION:
        raise ProjectFormatError(f"Unsupported project version {version!r} (max {PROJECT_VERSION})")

    try:
        project = Project.from_dict(data["project"])
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ProjectFormatError(f"Malformed project data in {path}: {e!r}") from e
    logger.info("Loaded project %s from %s (%d tracks)", project.name, path, len(project.tracks))
    return project
