"""Install the GeoMesa WFS extension built by this repository."""

import shutil
from pathlib import Path

from geoserver_runner.core.exceptions import ArtifactNotFoundError
from geoserver_runner.core.logging import get_logger
from geoserver_runner.deploys.geoserver import lib_dir

logger = get_logger(__name__)

WFS_JAR_PATTERN = "geomesa-gs-wfs*.jar"


def find_wfs_jar(target_dir: Path) -> Path:
    jars = sorted(target_dir.rglob(WFS_JAR_PATTERN), reverse=True) if target_dir.is_dir() else []
    jars = [j for j in jars if j.is_file()]
    if not jars:
        raise ArtifactNotFoundError("no WFS plugin found - try building with Maven")
    return jars[0]


def install_wfs(target_dir: Path, war_dir: Path) -> Path:
    # the wfs plugin requires a data store plugin to work
    jar = find_wfs_jar(target_dir)
    logger.info(f"Copying {jar.name}")
    shutil.copy(jar, lib_dir(war_dir))
    return jar
