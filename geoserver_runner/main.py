"""Entrypoint to the run-geoserver CLI."""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from geoserver_runner.core.config import Settings, load_dotenvs
from geoserver_runner.core.exceptions import ProvisionError
from geoserver_runner.core.logging import configure_logging, get_logger
from geoserver_runner.deploys.provision import ProvisionOptions, Provisioner

logger = get_logger("run-geoserver")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="run-geoserver",
        description="Configure and run a GeoServer instance with GeoMesa plugins",
        allow_abbrev=False,
    )
    parser.add_argument(
        "--install",
        metavar="<plugin>",
        dest="plugin",
        help="Install the GeoMesa plugin <plugin> into the GeoServer managed by this script",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Wipe out any existing geoserver managed by this script",
    )
    parser.add_argument(
        "--java-version",
        metavar="<version>",
        type=int,
        help="Set the Java major version used to run GeoServer",
    )
    parser.add_argument(
        "--geomesa-home",
        metavar="<path>",
        type=Path,
        help="Set the path to a local clone of https://github.com/locationtech/geomesa to use for installing plugins",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable remote debugging on port 5005",
    )
    return parser


def parse_options(argv: Optional[Sequence[str]] = None) -> ProvisionOptions:
    """Parse command line arguments; exits with code 2 and usage on standard error if they are invalid."""
    args = build_parser().parse_args(argv)
    return ProvisionOptions(
        java_version=args.java_version,
        plugin=args.plugin,
        geomesa_home=args.geomesa_home,
        reset=args.reset,
        debug=args.debug,
    )


def main(argv: Optional[Sequence[str]] = None, settings: Optional[Settings] = None) -> int:
    options = parse_options(argv)

    load_dotenvs()
    settings = settings or Settings()
    configure_logging(settings)

    if options.geomesa_home:
        logger.info(f"Using GEOMESA_HOME {options.geomesa_home}")
    if options.java_version:
        logger.info(f"Using Java version {options.java_version}")

    try:
        Provisioner(settings, options).run()
    except ProvisionError as e:
        logger.error(f"ERROR: {e}")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED
    return EXIT_OK


def run_cli() -> None:
    """Entrypoint for the run-geoserver console script."""
    sys.exit(main())


if __name__ == "__main__":
    run_cli()
