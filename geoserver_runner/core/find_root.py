import os
import subprocess
from pathlib import Path

from geoserver_runner.core.exceptions import ProjectRootNotFoundError

# Cache for project root path
_project_root_cache = None

VERSION_MARKER = "<geoserver.version>"


def find_git_root() -> Path | None:
    try:
        git_root = subprocess.check_output(
            ["git", "rev-parse", "--show-toplevel"],
            stderr=subprocess.DEVNULL,
            text=True,
        ).strip()

        return Path(git_root)
    except (OSError, subprocess.CalledProcessError):
        return None


def find_descriptor_root(start: Path | None = None) -> Path | None:
    """Walk up from ``start`` to the first directory whose pom.xml declares a GeoServer version."""
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        pom = candidate / "pom.xml"
        try:
            if pom.is_file() and VERSION_MARKER in pom.read_text(encoding="utf-8", errors="replace"):
                return candidate
        except OSError:
            continue
    return None


def find_project_root() -> Path:
    """
    Returns GEOSERVER_RUNNER_ROOT if set, otherwise the nearest ancestor holding the
    parent build descriptor, otherwise the git root.
    The result is cached after the first call.
    """
    global _project_root_cache

    if _project_root_cache is not None:
        return _project_root_cache

    # 1. Use GEOSERVER_RUNNER_ROOT if set
    project_root = os.getenv("GEOSERVER_RUNNER_ROOT")
    if project_root:
        _project_root_cache = Path(project_root)
        return _project_root_cache

    # 2. Use the directory of the parent pom.xml
    descriptor_root = find_descriptor_root()
    if descriptor_root:
        _project_root_cache = descriptor_root
        return _project_root_cache

    # 3. Use git root
    git_root = find_git_root()
    if git_root:
        _project_root_cache = git_root
        return _project_root_cache

    raise ProjectRootNotFoundError("project root not found - set GEOSERVER_RUNNER_ROOT or run from inside the checkout")


def clear_project_root_cache() -> None:
    global _project_root_cache
    _project_root_cache = None


if __name__ == "__main__":
    print("Project root:", find_project_root())
