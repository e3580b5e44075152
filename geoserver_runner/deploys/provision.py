"""Provision a GeoServer install with GeoMesa plugins and run it."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from geoserver_runner.core.cmd_utils import CommandRunner
from geoserver_runner.core.config import Settings
from geoserver_runner.core.logging import get_logger
from geoserver_runner.core.versions import read_geoserver_version
from geoserver_runner.deploys import container, geomesa, geoserver, wfs
from geoserver_runner.deploys.downloads import ArchiveCache
from geoserver_runner.utils.file_utils import remove_dir, reset_dir

logger = get_logger(__name__)


class ProvisionOptions(BaseModel):
    java_version: Optional[int] = None
    plugin: Optional[str] = None
    geomesa_home: Optional[Path] = None
    reset: bool = False
    debug: bool = False


def needs_rebuild(war_dir: Path, reset: bool = False, plugin: Optional[str] = None) -> bool:
    """The install tree is rebuilt when it is missing, a reset was requested or a plugin is being installed."""
    return reset or bool(plugin) or not war_dir.is_dir()


class Provisioner:
    """
    Keeps a plugin-augmented GeoServer web application unpacked under the
    install directory and runs it in a container.
    """

    def __init__(
        self,
        settings: Settings,
        options: ProvisionOptions,
        runner: Optional[CommandRunner] = None,
        cache: Optional[ArchiveCache] = None,
    ):
        self.settings = settings
        self.options = options
        self.runner = runner or CommandRunner()
        self.cache = cache or ArchiveCache(settings.DOWNLOAD_DIR, timeout=settings.DOWNLOAD_TIMEOUT)
        self.install_dir = settings.INSTALL_DIR
        self.data_dir = settings.DATA_DIR
        self.geomesa_dir = options.geomesa_home or settings.GEOMESA_DIR
        self.java_version = options.java_version or settings.JAVA_VERSION
        self._version: Optional[str] = None

    @property
    def version(self) -> str:
        if self._version is None:
            self._version = read_geoserver_version(self.settings.POM_PATH)
        return self._version

    @property
    def war_dir(self) -> Path:
        return self.install_dir / f"geoserver-{self.version}"

    @property
    def image(self) -> str:
        return self.settings.image(self.java_version)

    def prepare(self) -> bool:
        """
        Make sure the install tree is ready to serve.

        Returns:
            True if the install tree was rebuilt, False if the existing one was reused
        """
        self.cache.download_dir.mkdir(parents=True, exist_ok=True)
        self.install_dir.mkdir(parents=True, exist_ok=True)

        if not needs_rebuild(self.war_dir, self.options.reset, self.options.plugin):
            logger.info(f"Using existing geoserver-{self.version} install")
            return False

        self.rebuild()
        return True

    def rebuild(self) -> None:
        war_dir = reset_dir(self.war_dir)
        geoserver.install_geoserver(self.cache, self.settings.GEOSERVER_DOWNLOAD_URL, self.version, war_dir)
        geoserver.install_extensions(
            self.cache,
            self.settings.GEOSERVER_DOWNLOAD_URL,
            self.version,
            self.settings.GEOSERVER_EXTENSIONS,
            war_dir,
        )

        plugin = self.options.plugin
        if plugin:
            geomesa.install_plugin(self.geomesa_dir, plugin, war_dir)
            geomesa.install_tools(self.runner, self.geomesa_dir, plugin, self.install_dir, war_dir)
            wfs.install_wfs(self.settings.WFS_TARGET_DIR, war_dir)

        if self.options.reset:
            self.wipe_data()

    def wipe_data(self) -> None:
        logger.info("Wiping geoserver-data directory")
        remove_dir(self.data_dir)

    def start(self) -> int:
        debug_port = self.settings.DEBUG_PORT if self.options.debug else None
        return container.run_geoserver(
            self.runner, self.settings.DOCKER_BIN, self.image, self.war_dir, self.data_dir, debug_port
        )

    def run(self) -> int:
        """Prepare the install tree, then run GeoServer until it exits."""
        with self.cache:
            self.prepare()
        return self.start()
