"""Install GeoMesa data store plugins from a local GeoMesa checkout."""

import os
import re
from pathlib import Path
from typing import List, Optional

from geoserver_runner.core.cmd_utils import CommandRunner
from geoserver_runner.core.exceptions import ArtifactNotFoundError
from geoserver_runner.core.logging import get_logger
from geoserver_runner.deploys.geoserver import lib_dir
from geoserver_runner.utils.file_utils import extract_tar, remove_dir

logger = get_logger(__name__)

PLUGIN_SUFFIX = "-install.tar.gz"
TOOLS_SUFFIX = "-bin.tar.gz"

_PLUGIN_DIR = re.compile(r"^geomesa-(.+)-gs-plugin$")
_TOOLS_DIR = re.compile(r"^geomesa-(.+)-dist$")
_SKIPPED_DIRS = {".git"}


def plugin_search_path(geomesa_dir: Path, plugin: str) -> Path:
    return geomesa_dir / f"geomesa-{plugin}" / f"geomesa-{plugin}-gs-plugin" / "target"


def tools_search_path(geomesa_dir: Path, plugin: str) -> Path:
    return geomesa_dir / f"geomesa-{plugin}" / f"geomesa-{plugin}-dist" / "target"


def _find_archives(search_path: Path, suffix: str) -> List[Path]:
    if not search_path.is_dir():
        return []
    return sorted(p for p in search_path.rglob(f"*{suffix}") if p.is_file())


def _discover(geomesa_dir: Path, pattern: re.Pattern) -> List[str]:
    names = set()
    for root, dirs, _ in os.walk(geomesa_dir):
        dirs[:] = [d for d in dirs if d not in _SKIPPED_DIRS]
        if "archetypes" in os.path.relpath(root, geomesa_dir):
            continue
        for d in dirs:
            match = pattern.match(d)
            if match and "archetypes" not in d:
                names.add(match.group(1))
    return sorted(names)


def available_plugins(geomesa_dir: Path) -> List[str]:
    """Names of every data store plugin module in the GeoMesa checkout."""
    return _discover(geomesa_dir, _PLUGIN_DIR)


def available_tools(geomesa_dir: Path) -> List[str]:
    """Names of every CLI tools distribution module in the GeoMesa checkout."""
    return _discover(geomesa_dir, _TOOLS_DIR)


def find_plugin_bundle(geomesa_dir: Path, plugin: str) -> Path:
    bundles = _find_archives(plugin_search_path(geomesa_dir, plugin), PLUGIN_SUFFIX)
    if not bundles:
        raise ArtifactNotFoundError(
            f"no plugin found for {plugin}",
            available=available_plugins(geomesa_dir),
            heading="Available plugins:",
        )
    if len(bundles) > 1:
        logger.warning(f"Found {len(bundles)} plugin bundles for {plugin}, using {bundles[-1].name}")
    return bundles[-1]


def find_tools_bundle(geomesa_dir: Path, plugin: str) -> Path:
    bundles = _find_archives(tools_search_path(geomesa_dir, plugin), TOOLS_SUFFIX)
    if not bundles:
        raise ArtifactNotFoundError(
            f"no CLI tools found for {plugin}",
            available=available_tools(geomesa_dir),
            heading="Available tools:",
        )
    return bundles[0]


def install_plugin(geomesa_dir: Path, plugin: str, war_dir: Path) -> Path:
    """Extract the data store plugin bundle into the web application's library directory."""
    bundle = find_plugin_bundle(geomesa_dir, plugin)
    logger.info(f"Extracting {bundle.name}")
    extract_tar(bundle, lib_dir(war_dir))
    return bundle


def relabel_progress(line: str) -> Optional[str]:
    """Turn a dependency installer 'fetching' line into an 'Installing' status line; drop anything else."""
    if "fetching" not in line:
        return None
    return line.replace("fetching", "Installing", 1)


def install_tools(runner: CommandRunner, geomesa_dir: Path, plugin: str, install_dir: Path, war_dir: Path) -> Path:
    """
    Unpack the plugin's CLI tools next to the web application and use their
    dependency installer to add the backend client jars to it.

    Returns:
        The directory the tools were extracted to
    """
    bundle = find_tools_bundle(geomesa_dir, plugin)
    tools_dir = install_dir / bundle.name[: -len(TOOLS_SUFFIX)]
    remove_dir(tools_dir)
    extract_tar(bundle, install_dir)

    def _log(line: str) -> None:
        status = relabel_progress(line)
        if status:
            logger.info(status.strip())

    runner.run_streaming(
        [tools_dir / "bin" / "install-dependencies.sh", lib_dir(war_dir)],
        on_line=_log,
        input="y\n",
        name="install-dependencies",
    )
    return tools_dir
