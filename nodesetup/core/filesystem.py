"""
Cross-platform file system utilities for nodesetup.

This module provides the archive primitives and safe file operations used by
the acquisition pipeline and the tool cache:
- Archive extraction (tar.gz and 7z, the latter optionally via a bundled 7-Zip)
- Safe file operations (safe deletion, recursive copy)
- Path containment checks

Extraction validates every member path to block directory traversal.
"""

import os
import shutil
import subprocess
import sys
import tarfile
import tempfile
from pathlib import Path
from typing import Optional, Union

import py7zr
from py7zr.exceptions import ArchiveError as SevenZipError

from nodesetup.core.exceptions import NodeSetupError

IS_WINDOWS = os.name == "nt"


# ============================================================================
# Errors
# ============================================================================


class FilesystemError(NodeSetupError):
    """Base exception for filesystem operations."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


class ArchiveLayoutError(FilesystemError):
    """Extracted archive does not contain the expected root folder."""

    pass


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check whether ``path`` lies under ``parent``.

    Example:
        >>> is_relative_to(Path('/a/b/c'), Path('/a'))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def _prepare_destination(
    archive_path: Union[str, Path], destination: Optional[Union[str, Path]]
) -> tuple:
    archive_path = Path(archive_path)
    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    if destination is None:
        destination = Path(tempfile.mkdtemp(prefix="nodesetup_extract_"))
    else:
        destination = Path(destination)
        destination.mkdir(parents=True, exist_ok=True)

    return archive_path, destination


def extract_tar(
    archive_path: Union[str, Path],
    destination: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Extract a gzip-compressed tar archive.

    Args:
        archive_path: Path to the .tar.gz file
        destination: Directory to extract to (default: new temp directory)

    Returns:
        The extraction directory

    Raises:
        ArchiveExtractionError: If the archive is missing or cannot be read
        InsecureArchiveError: If a member escapes the destination

    Example:
        >>> extract_tar('node-v18.17.0-linux-x64.tar.gz', '/tmp/node')
        PosixPath('/tmp/node')
    """
    archive_path, destination = _prepare_destination(archive_path, destination)

    try:
        with tarfile.open(archive_path, "r:gz") as tar:
            for member in tar.getmembers():
                _validate_archive_path(member.name, destination)

            # Python 3.12+ also applies the data filter
            if sys.version_info >= (3, 12):
                tar.extractall(destination, filter="data")
            else:
                tar.extractall(destination)
    except InsecureArchiveError:
        raise
    except (tarfile.TarError, OSError) as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e

    return destination


def extract_7z(
    archive_path: Union[str, Path],
    destination: Optional[Union[str, Path]] = None,
    seven_zip_path: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Extract a .7z archive.

    When ``seven_zip_path`` names an existing 7-Zip executable (such as the
    ``7zr.exe`` shipped alongside the installer on Windows) it is used;
    otherwise extraction goes through ``py7zr``.

    Args:
        archive_path: Path to the .7z file
        destination: Directory to extract to (default: new temp directory)
        seven_zip_path: Optional 7-Zip executable

    Returns:
        The extraction directory

    Raises:
        ArchiveExtractionError: If extraction fails
        InsecureArchiveError: If a member escapes the destination
    """
    archive_path, destination = _prepare_destination(archive_path, destination)

    if seven_zip_path and Path(seven_zip_path).exists():
        cmd = [str(seven_zip_path), "x", str(archive_path), f"-o{destination}", "-y"]
        try:
            subprocess.run(cmd, capture_output=True, text=True, check=True)
        except subprocess.CalledProcessError as e:
            raise ArchiveExtractionError(f"7-Zip extraction failed: {e.stderr}") from e
        except OSError as e:
            raise ArchiveExtractionError(f"Failed to run 7-Zip: {e}") from e
        return destination

    try:
        with py7zr.SevenZipFile(archive_path, "r") as archive:
            for member in archive.getnames():
                _validate_archive_path(member, destination)
            archive.extractall(destination)
    except InsecureArchiveError:
        raise
    except (SevenZipError, OSError) as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e

    return destination


# ============================================================================
# Safe File Operations
# ============================================================================


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, path, exc):
                """Error handler for Windows read-only files."""
                if not os.access(path, os.W_OK):
                    os.chmod(path, 0o777)
                    func(path)
                else:
                    raise

            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)

    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


def recursive_copy(
    source: Union[str, Path],
    destination: Union[str, Path],
    symlinks: bool = True,
) -> None:
    """
    Recursively copy a directory tree.

    Args:
        source: Source directory
        destination: Destination directory (created if missing)
        symlinks: If True, copy symlinks as symlinks (npm/npx in bin/ are links)

    Raises:
        FilesystemError: If source is missing or not a directory
    """
    source = Path(source)
    destination = Path(destination)

    if not source.exists():
        raise FilesystemError(f"Source does not exist: {source}")

    if not source.is_dir():
        raise FilesystemError(f"Source is not a directory: {source}")

    destination.mkdir(parents=True, exist_ok=True)

    for item in source.rglob("*"):
        rel_path = item.relative_to(source)
        dest_item = destination / rel_path

        if item.is_symlink() and symlinks:
            link_target = os.readlink(item)
            if dest_item.exists() or dest_item.is_symlink():
                dest_item.unlink()
            dest_item.parent.mkdir(parents=True, exist_ok=True)
            os.symlink(link_target, dest_item)
        elif item.is_dir():
            dest_item.mkdir(parents=True, exist_ok=True)
        else:
            dest_item.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(item, dest_item)


__all__ = [
    "FilesystemError",
    "ArchiveExtractionError",
    "InsecureArchiveError",
    "ArchiveLayoutError",
    "is_relative_to",
    "extract_tar",
    "extract_7z",
    "safe_rmtree",
    "recursive_copy",
]
