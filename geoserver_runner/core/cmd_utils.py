"""Command utilities for geoserver_runner."""

import os
import subprocess
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence, Union

from geoserver_runner.core.exceptions import CommandError, CommandStartError
from geoserver_runner.core.logging import get_logger

logger = get_logger(__name__)

Arg = Union[str, Path]


class CommandRunner:
    """
    Runs external commands in the foreground.

    Every provisioning step that leaves the Python process (the container
    runtime, the GeoMesa dependency installer) goes through an instance of
    this class, so tests can substitute a recording double.
    """

    def run(
        self,
        args: Sequence[Arg],
        name: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
        check: bool = True,
    ) -> int:
        """
        Run a command with inherited stdio and wait for it.

        Args:
            args: Command and arguments
            name: Optional human readable name used in log lines
            env: Extra environment variables layered over os.environ
            check: Raise CommandError on a non-zero exit code

        Returns:
            The process exit code
        """
        cmd = [str(a) for a in args]
        logger.debug("Running command", name=name or cmd[0], cmd=cmd)
        process = self._start(cmd, env=self._env(env))
        try:
            returncode = process.wait()
        except KeyboardInterrupt:
            # the child got the interrupt too; let it finish shutting down
            process.wait()
            raise
        if check and returncode != 0:
            raise CommandError(cmd, returncode)
        return returncode

    def run_streaming(
        self,
        args: Sequence[Arg],
        on_line: Callable[[str], None],
        input: Optional[str] = None,
        name: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> int:
        """
        Run a command with stderr merged into stdout and hand every output line to ``on_line``.

        ``input`` is written to the command's standard input, which is then closed.
        Raises CommandError on a non-zero exit code.
        """
        cmd = [str(a) for a in args]
        logger.debug("Running command", name=name or cmd[0], cmd=cmd)
        with self._start(
            cmd,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            encoding="utf-8",
            errors="replace",
            env=self._env(env),
        ) as process:
            try:
                if input is not None:
                    process.stdin.write(input)
                process.stdin.close()
            except BrokenPipeError:
                # command exited without reading its input
                pass
            for line in process.stdout:
                on_line(line.rstrip("\n"))
            returncode = process.wait()
        if returncode != 0:
            raise CommandError(cmd, returncode)
        return returncode

    @staticmethod
    def _env(extra: Optional[Mapping[str, str]]) -> Optional[dict]:
        if not extra:
            return None
        env = dict(os.environ)
        env.update(extra)
        return env

    @staticmethod
    def _start(cmd: List[str], **kwargs) -> subprocess.Popen:
        try:
            return subprocess.Popen(cmd, **kwargs)
        except OSError as e:
            raise CommandStartError(f"Could not run {cmd[0]}: {e.strerror or e}") from e
