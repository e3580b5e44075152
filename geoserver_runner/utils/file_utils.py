import shutil
import tarfile
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List

from geoserver_runner.core.exceptions import ArchiveError


@contextmanager
def _reading(archive: Path) -> Iterator[None]:
    try:
        yield
    except KeyError as e:
        raise ArchiveError(f"{archive.name} has no member {e.args[0]}") from e
    except (zipfile.BadZipFile, tarfile.TarError) as e:
        raise ArchiveError(f"Could not extract {archive}: {e}") from e
    except FileNotFoundError as e:
        raise ArchiveError(f"Archive not found: {e.filename or archive}") from e


def extract_member(zip_path: Path, member: str, dest: Path) -> Path:
    """Extract a single member of a zip archive into ``dest`` and return its path."""
    zip_path = Path(zip_path)
    with _reading(zip_path), zipfile.ZipFile(zip_path) as zf:
        return Path(zf.extract(member, dest))


def extract_zip(zip_path: Path, dest: Path) -> None:
    zip_path = Path(zip_path)
    with _reading(zip_path), zipfile.ZipFile(zip_path) as zf:
        zf.extractall(dest)


def merge_jars(zip_path: Path, lib_dir: Path) -> List[str]:
    """
    Extract every ``*.jar`` member of a zip archive into ``lib_dir``.

    Files already present in ``lib_dir`` are never overwritten.

    Returns:
        The member names that were extracted
    """
    zip_path = Path(zip_path)
    added = []
    with _reading(zip_path), zipfile.ZipFile(zip_path) as zf:
        for info in zf.infolist():
            if info.is_dir() or not info.filename.endswith(".jar"):
                continue
            if (lib_dir / info.filename).exists():
                continue
            zf.extract(info, lib_dir)
            added.append(info.filename)
    return added


def extract_tar(tar_path: Path, dest: Path) -> None:
    """Extract a (possibly compressed) tar archive into ``dest``."""
    tar_path = Path(tar_path)
    with _reading(tar_path), tarfile.open(tar_path) as tf:
        tf.extractall(dest, filter="data")


def remove_dir(path: Path) -> bool:
    """Remove a directory tree if it exists; returns whether anything was removed."""
    if path.is_dir():
        shutil.rmtree(path)
        return True
    return False


def reset_dir(path: Path) -> Path:
    remove_dir(path)
    path.mkdir(parents=True)
    return path
