from typing import Sequence


class ProvisionError(Exception):
    pass


class VersionNotFoundError(ProvisionError):
    pass


class DownloadError(ProvisionError):
    pass


class CommandError(ProvisionError):
    def __init__(self, args: Sequence[str], returncode: int):
        self.cmd = list(args)
        self.returncode = returncode
        super().__init__(f"Command failed with exit code {returncode}: {' '.join(self.cmd)}")


class ArtifactNotFoundError(ProvisionError):
    """A required plugin, tools bundle or jar is missing; ``available`` lists what was found instead."""

    def __init__(self, message: str, available: Sequence[str] | None = None, heading: str | None = None):
        self.available = list(available or [])
        self.heading = heading
        lines = [message]
        if heading:
            lines.append(heading)
            lines.extend(f"  {name}" for name in self.available)
        super().__init__("\n".join(lines))


class ProjectRootNotFoundError(ProvisionError):
    pass


class CommandStartError(ProvisionError):
    pass


class ArchiveError(ProvisionError):
    pass
