"""Directory layout checks for a listings repository.

Project files are only published when they live in the projects directory
and end in ``.yml``. Anything else is either a misplaced project file or a
file the site will silently ignore.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

# Keys that only a project listing would combine at the top level.
_PROJECT_KEYS = {"name", "desc", "site"}


@dataclass(frozen=True)
class DirectoryScan:
    stray_files: tuple[str, ...] = ()
    non_yaml_files: tuple[str, ...] = ()


def _looks_like_project(path: Path) -> bool:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.debug("Not treating %s as a project file: %s", path, e)
        return False
    if not isinstance(data, dict):
        return False
    return "upforgrabs" in data or _PROJECT_KEYS <= data.keys()


def scan_directory(
    root: Path | str,
    projects_dir: str = "_data/projects",
    allowed_extensions: tuple[str, ...] | list[str] = (".yml",),
) -> DirectoryScan:
    """Return project-like files outside the projects directory and
    non-YAML files inside it, as sorted paths relative to root."""
    root = Path(root)
    projects_path = root / projects_dir

    non_yaml: list[str] = []
    if projects_path.is_dir():
        for p in projects_path.iterdir():
            if p.is_file() and p.suffix not in allowed_extensions:
                non_yaml.append(p.relative_to(root).as_posix())

    stray: list[str] = []
    for p in root.glob("*.yml"):
        if p.is_file() and _looks_like_project(p):
            stray.append(p.relative_to(root).as_posix())

    return DirectoryScan(stray_files=tuple(sorted(stray)), non_yaml_files=tuple(sorted(non_yaml)))
