"""Install the GeoServer web application and its extensions."""

from pathlib import Path
from typing import Iterable

from geoserver_runner.core.logging import get_logger
from geoserver_runner.deploys.downloads import ArchiveCache
from geoserver_runner.utils.file_utils import extract_member, extract_zip, merge_jars

logger = get_logger(__name__)


def war_zip_name(version: str) -> str:
    return f"geoserver-{version}-war.zip"


def extension_zip_name(version: str, extension: str) -> str:
    return f"geoserver-{version}-{extension}-plugin.zip"


def lib_dir(war_dir: Path) -> Path:
    return war_dir / "WEB-INF" / "lib"


def install_geoserver(cache: ArchiveCache, base_url: str, version: str, war_dir: Path) -> None:
    """Unpack the GeoServer war into ``war_dir``, which must already exist and be empty."""
    base_url = base_url.rstrip("/")
    gs_zip = war_zip_name(version)
    archive = cache.fetch(f"{base_url}/{version}/{gs_zip}", gs_zip, label=f"geoserver-{version}")

    logger.info(f"Extracting geoserver-{version} to {war_dir}")
    war = extract_member(archive, "geoserver.war", war_dir)
    extract_zip(war, war_dir)
    war.unlink()


def install_extensions(cache: ArchiveCache, base_url: str, version: str, extensions: Iterable[str], war_dir: Path) -> None:
    """Merge the jars of each GeoServer extension into the web application, keeping files already present."""
    base_url = base_url.rstrip("/")
    target = lib_dir(war_dir)
    target.mkdir(parents=True, exist_ok=True)
    for ext in extensions:
        ext_zip = extension_zip_name(version, ext)
        archive = cache.fetch(f"{base_url}/{version}/extensions/{ext_zip}", ext_zip, label=f"{ext} plugin")
        logger.info(f"Extracting {ext} plugin")
        added = merge_jars(archive, target)
        logger.debug(f"Added {len(added)} jars from {ext_zip}")
