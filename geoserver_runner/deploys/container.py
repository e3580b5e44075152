"""Run the managed GeoServer inside a Tomcat container."""

import os
from pathlib import Path
from typing import List, Optional

from geoserver_runner.core.cmd_utils import CommandRunner
from geoserver_runner.core.exceptions import CommandError
from geoserver_runner.core.logging import get_logger

logger = get_logger(__name__)

WEBAPP_MOUNT = "/usr/local/tomcat/webapps/geoserver"
DATA_MOUNT = "/tmp/data"
CATALINA_PROPERTIES = "/usr/local/tomcat/conf/catalina.properties"

# exit codes of the docker client itself rather than of the server: daemon or image errors, entrypoint not runnable
DOCKER_FAILURE_CODES = (125, 126, 127)

# skipping TLD jar scanning improves startup time by ~10-20 seconds
SKIP_JAR_SCAN = (
    rf"sed -i '/tomcat.util.scan.StandardJarScanFilter.jarsToSkip=/,/.*\.jar$/d' {CATALINA_PROPERTIES}"
    rf" && echo 'tomcat.util.scan.StandardJarScanFilter.jarsToSkip=\\n*.jar' >> {CATALINA_PROPERTIES}"
)
# the default container entrypoint is 'catalina.sh run'
ENTRYPOINT = f"{SKIP_JAR_SCAN} && exec catalina.sh run"


def debug_agent(port: int) -> str:
    return f"-agentlib:jdwp=transport=dt_socket,server=y,suspend=n,address=127.0.0.1:{port}"


def catalina_opts(debug_port: Optional[int] = None) -> str:
    # add-opens required by arrow for jdk 11+
    opts = [f"-DGEOSERVER_DATA_DIR={DATA_MOUNT}", "--add-opens=java.base/java.nio=ALL-UNNAMED"]
    if debug_port:
        opts.append(debug_agent(debug_port))
    return " ".join(opts)


def server_command(
    docker: str, image: str, war_dir: Path, data_dir: Path, debug_port: Optional[int] = None
) -> List[str]:
    return [
        docker, "run", "--rm",
        "--network", "host",
        "-v", f"{war_dir}:{WEBAPP_MOUNT}",
        "-v", f"{data_dir}:{DATA_MOUNT}",
        "-e", f"CATALINA_OPTS={catalina_opts(debug_port)}",
        "--entrypoint", "/bin/sh",
        image,
        "-c", ENTRYPOINT,
    ]


def chown_command(docker: str, image: str, data_dir: Path, uid: int, gid: int) -> List[str]:
    return [
        docker, "run", "--rm",
        "-v", f"{data_dir}:{DATA_MOUNT}",
        "--entrypoint", "bash",
        image,
        "-c", f"chown -R {uid}:{gid} {DATA_MOUNT}/",
    ]


def run_geoserver(
    runner: CommandRunner,
    docker: str,
    image: str,
    war_dir: Path,
    data_dir: Path,
    debug_port: Optional[int] = None,
) -> int:
    """
    Start GeoServer in the foreground and block until the container exits.

    Once it is gone, whether it exited on its own or was interrupted, the data
    directory is handed back to the invoking user so that bind-mounted files
    don't end up owned by tomcat.

    Returns:
        The exit code of the server container

    Raises:
        CommandError: if docker itself failed (125-127) rather than the server
    """
    data_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Starting geoserver")
    if debug_port:
        logger.info(f"Remote debugging enabled on port {debug_port}")
    cmd = server_command(docker, image, war_dir, data_dir, debug_port)
    returncode = None
    try:
        returncode = runner.run(cmd, name="geoserver", check=False)
    except KeyboardInterrupt:
        logger.info("Geoserver interrupted")
        raise
    finally:
        if returncode:
            logger.warning(f"Geoserver exited with code {returncode}")
        reset_permissions(runner, docker, image, data_dir)
    if returncode in DOCKER_FAILURE_CODES:
        raise CommandError(cmd, returncode)
    return returncode


def reset_permissions(runner: CommandRunner, docker: str, image: str, data_dir: Path) -> None:
    """Reset ownership of the data directory to the current user."""
    runner.run(chown_command(docker, image, data_dir, os.getuid(), os.getgid()), name="chown geoserver-data")
