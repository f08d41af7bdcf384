"""
Tests for legacy loose-file fallback acquisition.
"""

import pytest

from nodesetup.core.exceptions import TransportError, TransportNotFoundError
from nodesetup.core.platform import PlatformInfo
from nodesetup.installer.legacy import (
    LegacyAsset,
    LegacyLayout,
    WindowsLegacyLayout,
    acquire_fallback,
    create_temp_dir,
    get_legacy_layout,
    register_legacy_layout,
    unregister_legacy_layout,
)

MIRROR = "https://nodejs.org/dist"


class TestWindowsLegacyLayout:
    """Tests for the Windows legacy URL tiers."""

    def test_candidates(self, windows_x64):
        tiers = WindowsLegacyLayout().candidates(MIRROR, "5.10.1", windows_x64)

        assert tiers == [
            [
                LegacyAsset(f"{MIRROR}/v5.10.1/win-x64/node.exe", "node.exe"),
                LegacyAsset(f"{MIRROR}/v5.10.1/win-x64/node.lib", "node.lib"),
            ],
            [
                LegacyAsset(f"{MIRROR}/v5.10.1/node.exe", "node.exe"),
                LegacyAsset(f"{MIRROR}/v5.10.1/node.lib", "node.lib"),
            ],
        ]


class TestRegistry:
    """Tests for layout lookup."""

    def test_windows_registered(self, windows_x64):
        assert isinstance(get_legacy_layout(windows_x64), WindowsLegacyLayout)

    def test_no_layout_for_linux(self, linux_x64):
        assert get_legacy_layout(linux_x64) is None

    def test_register_custom_layout(self):
        class LinuxLayout(LegacyLayout):
            def candidates(self, mirror, version, platform):
                return [[LegacyAsset(f"{mirror}/v{version}/node", "node")]]

        register_legacy_layout("linux", LinuxLayout())
        try:
            assert isinstance(
                get_legacy_layout(PlatformInfo("linux", "x64")), LinuxLayout
            )
        finally:
            unregister_legacy_layout("linux")

    def test_register_rejects_non_layout(self):
        with pytest.raises(TypeError):
            register_legacy_layout("linux", object())


class TestCreateTempDir:
    """Tests for the randomized download directory."""

    def test_name_and_existence(self, work_dir):
        temp_dir = create_temp_dir(work_dir)

        assert temp_dir.parent == work_dir
        assert temp_dir.is_dir()
        assert temp_dir.name.startswith("temp_")
        assert 0 <= int(temp_dir.name[len("temp_"):]) < 2_000_000_000


class TestAcquireFallback:
    """Tests for the two-tier fallback."""

    def _acquire(self, downloader, tool_cache, work_dir, platform, layout=None):
        return acquire_fallback(
            "5.10.1",
            platform,
            tool_cache,
            MIRROR,
            downloader,
            work_dir,
            layout or WindowsLegacyLayout(),
        )

    def test_first_tier(self, tool_cache, work_dir, windows_x64, fake_downloader):
        """Test files from the arch folder are installed under canonical names."""
        downloader = fake_downloader(
            {
                f"{MIRROR}/v5.10.1/win-x64/node.exe": b"exe",
                f"{MIRROR}/v5.10.1/win-x64/node.lib": b"lib",
            }
        )

        path = self._acquire(downloader, tool_cache, work_dir, windows_x64)

        assert sorted(p.name for p in path.iterdir()) == ["node.exe", "node.lib"]
        assert (path / "node.exe").read_bytes() == b"exe"
        assert path == tool_cache.root / "node" / "5.10.1" / "x64"
        assert len(downloader.requested) == 2

    def test_second_tier(self, tool_cache, work_dir, windows_x64, fake_downloader):
        """Test the release root is tried after a not-found in the arch folder."""
        downloader = fake_downloader(
            {
                f"{MIRROR}/v5.10.1/node.exe": b"exe-root",
                f"{MIRROR}/v5.10.1/node.lib": b"lib-root",
            }
        )

        path = self._acquire(downloader, tool_cache, work_dir, windows_x64)

        assert downloader.requested == [
            f"{MIRROR}/v5.10.1/win-x64/node.exe",
            f"{MIRROR}/v5.10.1/node.exe",
            f"{MIRROR}/v5.10.1/node.lib",
        ]
        assert sorted(p.name for p in path.iterdir()) == ["node.exe", "node.lib"]
        assert (path / "node.lib").read_bytes() == b"lib-root"

    def test_partial_first_tier_falls_through(
        self, tool_cache, work_dir, windows_x64, fake_downloader
    ):
        """Test a missing lib in tier one re-fetches both files from tier two."""
        downloader = fake_downloader(
            {
                f"{MIRROR}/v5.10.1/win-x64/node.exe": b"exe-arch",
                f"{MIRROR}/v5.10.1/node.exe": b"exe-root",
                f"{MIRROR}/v5.10.1/node.lib": b"lib-root",
            }
        )

        path = self._acquire(downloader, tool_cache, work_dir, windows_x64)

        assert (path / "node.exe").read_bytes() == b"exe-root"
        assert sorted(p.name for p in path.iterdir()) == ["node.exe", "node.lib"]

    def test_second_tier_not_found(
        self, tool_cache, work_dir, windows_x64, fake_downloader
    ):
        downloader = fake_downloader({})

        with pytest.raises(TransportNotFoundError) as exc_info:
            self._acquire(downloader, tool_cache, work_dir, windows_x64)

        assert exc_info.value.url == f"{MIRROR}/v5.10.1/node.exe"
        assert tool_cache.find("node", "5.10.1", "x64") is None

    def test_first_tier_error_propagates(
        self, tool_cache, work_dir, windows_x64, fake_downloader
    ):
        """Test non-404 failures do not move on to the next tier."""
        downloader = fake_downloader(
            {}, failing=[f"{MIRROR}/v5.10.1/win-x64/node.exe"]
        )

        with pytest.raises(TransportError) as exc_info:
            self._acquire(downloader, tool_cache, work_dir, windows_x64)

        assert not isinstance(exc_info.value, TransportNotFoundError)
        assert downloader.requested == [f"{MIRROR}/v5.10.1/win-x64/node.exe"]

    def test_empty_layout(self, tool_cache, work_dir, windows_x64, fake_downloader):
        class EmptyLayout(LegacyLayout):
            def candidates(self, mirror, version, platform):
                return []

        with pytest.raises(TransportError, match="No legacy locations"):
            self._acquire(
                fake_downloader({}), tool_cache, work_dir, windows_x64, EmptyLayout()
            )
