"""
Pytest configuration and shared fixtures for nodesetup tests.
"""

import io
import tarfile
from pathlib import Path
from typing import Dict, List

import pytest

from nodesetup.cache.tool_cache import ToolCache
from nodesetup.core.download import DownloadOutcome, DownloadStatus
from nodesetup.core.platform import PlatformInfo, clear_platform_cache


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires network access)",
    )


# ============================================================================
# Environment Isolation
# ============================================================================


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep runner and nodesetup variables from leaking into tests."""
    for name in (
        "GITHUB_PATH",
        "RUNNER_TOOL_CACHE",
        "RUNNER_TEMP",
        "NODESETUP_MIRROR",
        "NODESETUP_TIMEOUT",
        "NODESETUP_7Z_PATH",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Create isolated home directory for tests."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))

    return fake_home


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def linux_x64() -> PlatformInfo:
    return PlatformInfo("linux", "x64")


@pytest.fixture
def windows_x64() -> PlatformInfo:
    return PlatformInfo("win32", "x64")


@pytest.fixture
def tool_cache(tmp_path: Path) -> ToolCache:
    """Empty tool cache rooted in the test directory."""
    return ToolCache(tmp_path / "toolcache", lock_timeout=5)


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    path = tmp_path / "work"
    path.mkdir()
    return path


def make_tar_gz(path: Path, files: Dict[str, bytes]) -> Path:
    """Write a .tar.gz containing ``files`` (archive name -> content)."""
    with tarfile.open(path, "w:gz") as tar:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(content))
    return path


def tar_gz_bytes(files: Dict[str, bytes]) -> bytes:
    """In-memory variant of :func:`make_tar_gz` for mocked HTTP bodies."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


@pytest.fixture
def tar_factory():
    """Expose the archive helpers to tests."""
    return make_tar_gz


@pytest.fixture
def tar_bytes_factory():
    return tar_gz_bytes


class FakeDownloader:
    """Serves canned bodies by URL; unknown URLs are not found."""

    def __init__(self, work_dir: Path, bodies: Dict[str, bytes], failing=()):
        self.work_dir = work_dir
        self.bodies = bodies
        self.failing = set(failing)
        self.requested: List[str] = []

    def download(self, url, destination=None):
        self.requested.append(url)
        if url in self.failing:
            return DownloadOutcome(
                url, DownloadStatus.FAILED, status_code=500, error=OSError("boom")
            )
        if url not in self.bodies:
            return DownloadOutcome(url, DownloadStatus.NOT_FOUND, status_code=404)
        path = self.work_dir / f"dl-{len(self.requested)}"
        path.write_bytes(self.bodies[url])
        return DownloadOutcome(url, DownloadStatus.OK, path=path, status_code=200)


@pytest.fixture
def fake_downloader(work_dir):
    """Factory for FakeDownloader instances writing into the work directory."""

    def factory(bodies: Dict[str, bytes], failing=()) -> FakeDownloader:
        return FakeDownloader(work_dir, bodies, failing)

    return factory
