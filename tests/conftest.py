import io
import tarfile
import zipfile
from pathlib import Path
from typing import Dict, List

import httpx
import pytest

from geoserver_runner.core.cmd_utils import CommandRunner
from geoserver_runner.core.config import Settings
from geoserver_runner.core.find_root import clear_project_root_cache
from geoserver_runner.deploys.downloads import ArchiveCache

GS_VERSION = "2.24.2"
BASE_URL = "https://downloads.example.org/geoserver"

POM = f"""<?xml version="1.0"?>
<project>
    <properties>
        <geoserver.version>{GS_VERSION}</geoserver.version>
        <gt.version>30.2</gt.version>
    </properties>
</project>
"""


def zip_bytes(members: Dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, data in members.items():
            zf.writestr(name, data)
    return buf.getvalue()


def write_tar(path: Path, members: Dict[str, bytes], executable: tuple = ()) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(path, "w:gz") as tf:
        for name, data in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755 if name in executable else 0o644
            tf.addfile(info, io.BytesIO(data))
    return path


class FakeRunner(CommandRunner):
    """Records commands instead of running them."""

    def __init__(self, output: List[str] | None = None, server_returncode: int = 0, interrupt: bool = False):
        self.calls: List[List[str]] = []
        self.inputs: List[str | None] = []
        self.output = output or []
        self.server_returncode = server_returncode
        self.interrupt = interrupt

    def run(self, args, name=None, env=None, check=True):
        cmd = [str(a) for a in args]
        self.calls.append(cmd)
        if "--network" in cmd:
            if self.interrupt:
                raise KeyboardInterrupt()
            return self.server_returncode
        return 0

    def run_streaming(self, args, on_line, input=None, name=None, env=None):
        self.calls.append([str(a) for a in args])
        self.inputs.append(input)
        for line in self.output:
            on_line(line)
        return 0


class FakeArchiveServer:
    """Serves synthesised GeoServer archives through an httpx.MockTransport."""

    def __init__(self):
        self.requests: List[str] = []
        self.files: Dict[str, bytes] = {}

    def add(self, path: str, data: bytes) -> None:
        self.files[f"{BASE_URL}/{path}"] = data

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        if url in self.files:
            return httpx.Response(200, content=self.files[url])
        return httpx.Response(404, content=b"not found")

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler), follow_redirects=True)


@pytest.fixture(autouse=True)
def _clear_root_cache():
    clear_project_root_cache()
    yield
    clear_project_root_cache()


@pytest.fixture
def project_root(tmp_path) -> Path:
    root = tmp_path / "geomesa-geoserver"
    root.mkdir()
    (root / "pom.xml").write_text(POM)
    return root


@pytest.fixture
def geomesa_home(tmp_path) -> Path:
    home = tmp_path / "geomesa"
    home.mkdir()
    return home


@pytest.fixture
def settings(project_root, geomesa_home) -> Settings:
    return Settings(
        PROJECT_ROOT=str(project_root),
        GEOMESA_HOME=str(geomesa_home),
        GEOSERVER_DOWNLOAD_URL=BASE_URL,
        GEOSERVER_EXTENSIONS=["wps"],
        JAVA_VERSION=11,
        DEBUG_PORT=5005,
        DOCKER_BIN="docker",
    )


@pytest.fixture
def archive_server() -> FakeArchiveServer:
    server = FakeArchiveServer()
    war = zip_bytes({"WEB-INF/lib/gs-main.jar": b"main", "WEB-INF/web.xml": b"<web-app/>", "index.html": b"gs"})
    server.add(f"{GS_VERSION}/geoserver-{GS_VERSION}-war.zip", zip_bytes({"geoserver.war": war, "LICENSE.txt": b"GPL"}))
    server.add(
        f"{GS_VERSION}/extensions/geoserver-{GS_VERSION}-wps-plugin.zip",
        zip_bytes({"gs-wps-core.jar": b"wps", "gs-main.jar": b"other-main", "LICENSE.html": b"GPL"}),
    )
    return server


@pytest.fixture
def cache(settings, archive_server) -> ArchiveCache:
    return ArchiveCache(settings.DOWNLOAD_DIR, client=archive_server.client())


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner(output=["fetching hbase-client-2.5.jar", "Continue? (y/n)", "fetching zookeeper-3.8.jar"])


def build_geomesa_plugin(geomesa_home: Path, plugin: str, version: str = "5.3.0") -> None:
    """Lay out pre-built plugin and tools bundles the way a GeoMesa build leaves them."""
    plugin_target = geomesa_home / f"geomesa-{plugin}" / f"geomesa-{plugin}-gs-plugin" / "target"
    write_tar(
        plugin_target / f"geomesa-{plugin}-gs-plugin_2.12-{version}-install.tar.gz",
        {f"geomesa-{plugin}-datastore_2.12-{version}.jar": b"datastore"},
    )
    dist_target = geomesa_home / f"geomesa-{plugin}" / f"geomesa-{plugin}-dist" / "target"
    tools = f"geomesa-{plugin}_2.12-{version}"
    write_tar(
        dist_target / f"{tools}-bin.tar.gz",
        {
            f"{tools}/bin/install-dependencies.sh": b"#!/usr/bin/env bash\n",
            f"{tools}/conf/dependencies.sh": b"",
        },
        executable=(f"{tools}/bin/install-dependencies.sh",),
    )


def build_wfs_jar(project_root: Path, version: str = "5.3.0-SNAPSHOT") -> Path:
    target = project_root / "geomesa-gs-wfs" / "target"
    target.mkdir(parents=True, exist_ok=True)
    jar = target / f"geomesa-gs-wfs_2.12-{version}.jar"
    jar.write_bytes(b"wfs")
    return jar
