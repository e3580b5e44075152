import re
from pathlib import Path

from geoserver_runner.core.exceptions import VersionNotFoundError

_GEOSERVER_VERSION = re.compile(r"<geoserver\.version>([0-9.]+)</geoserver\.version>")


def read_geoserver_version(pom_path: Path) -> str:
    """Return the first ``<geoserver.version>`` declared in the given pom.xml."""
    if not pom_path.is_file():
        raise VersionNotFoundError(f"Build descriptor not found: {pom_path}")
    with open(pom_path, "r", encoding="utf-8") as f:
        for line in f:
            if "<geoserver.version>" not in line:
                continue
            match = _GEOSERVER_VERSION.search(line)
            if match:
                return match.group(1)
            break
    raise VersionNotFoundError(f"No <geoserver.version> found in {pom_path}")
