"""Configuration management for geoserver-runner."""

import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from geoserver_runner.core.find_root import find_project_root

_CURRENT_ENV = os.getenv("ENV", "dev")

# Global flag to track if dotenvs have been loaded
_dotenvs_loaded = False


def load_dotenvs() -> None:
    """
    Load environment variables from .env files.

    Loads variables from:
    - .env.common
    - .env.{ENV} (where ENV defaults to 'dev')

    Values end up in os.environ, so they are also visible to the external
    commands run during provisioning (the GeoMesa dependency installer in
    particular). Call once at startup.
    """
    global _dotenvs_loaded

    if _dotenvs_loaded:
        return

    load_dotenv(find_dotenv(".env.common", usecwd=True))
    load_dotenv(find_dotenv(f".env.{_CURRENT_ENV}", usecwd=True))

    _dotenvs_loaded = True


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env.common", f".env.{_CURRENT_ENV}"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ##### Logging #####
    LOG_LEVEL: str = "INFO"
    LOG_JSON_FORMAT: bool = False

    ##### Layout #####
    PROJECT_ROOT: str | None = None
    WORK_DIR: str = "build/docker"
    # assumes that the geomesa and geomesa-geoserver repos are checked out side-by-side
    GEOMESA_HOME: str | None = None

    ##### GeoServer #####
    GEOSERVER_DOWNLOAD_URL: str = "https://downloads.sourceforge.net/project/geoserver/GeoServer"
    GEOSERVER_EXTENSIONS: list[str] = ["wps"]
    DOWNLOAD_TIMEOUT: float = 60.0

    ##### Container #####
    JAVA_VERSION: int = 11
    # tomcat 9 is latest supported by geoserver 2.24
    TOMCAT_IMAGE: str = "tomcat:9.0-jdk{java_version}"
    DOCKER_BIN: str = "docker"
    DEBUG_PORT: int = 5005

    @computed_field
    @property
    def ROOT_DIR(self) -> Path:
        if self.PROJECT_ROOT:
            return Path(self.PROJECT_ROOT)
        return find_project_root()

    @computed_field
    @property
    def GEOMESA_DIR(self) -> Path:
        if self.GEOMESA_HOME:
            return Path(self.GEOMESA_HOME)
        return self.ROOT_DIR.parent / "geomesa"

    @computed_field
    @property
    def DOWNLOAD_DIR(self) -> Path:
        return self.ROOT_DIR / self.WORK_DIR / "download"

    @computed_field
    @property
    def INSTALL_DIR(self) -> Path:
        return self.ROOT_DIR / self.WORK_DIR / "install"

    @computed_field
    @property
    def DATA_DIR(self) -> Path:
        return self.ROOT_DIR / self.WORK_DIR / "geoserver-data"

    @computed_field
    @property
    def POM_PATH(self) -> Path:
        return self.ROOT_DIR / "pom.xml"

    @computed_field
    @property
    def WFS_TARGET_DIR(self) -> Path:
        return self.ROOT_DIR / "geomesa-gs-wfs" / "target"

    def image(self, java_version: int | None = None) -> str:
        return self.TOMCAT_IMAGE.format(java_version=java_version or self.JAVA_VERSION)


settings = Settings()
