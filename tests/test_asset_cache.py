"""Tests for the derived icon cache."""

import asyncio

import pytest
from PIL import Image

from core.errors import (
    ApplicationNotFoundError,
    FallbackMissingError,
    UnknownRenditionError,
)
from core.panel.cache import AssetCache, RenditionOutcome
from core.panel.imaging import PillowResizer
from core.panel.renditions import RenditionKind

from tests.conftest import FALLBACK_BYTES, RecordingResizer, write_application


class TestAssetCacheFetch:
    """Tests for cache hits, generation and fallback."""

    def test_second_fetch_is_a_cache_hit(self, registry, cache, resizer, install_root):
        """Repeated requests return identical bytes and resize once."""
        write_application(install_root, "uk-alpha")
        registry.load("uk-alpha")

        first = asyncio.run(cache.fetch("uk-alpha", RenditionKind.LARGE_GRID))
        second = asyncio.run(cache.fetch("uk-alpha", "largeGridIcon"))

        assert first.outcome == RenditionOutcome.GENERATED
        assert second.outcome == RenditionOutcome.HIT
        assert first.data == second.data == b"icon.avif:88x88:webp"
        assert second.media_type == "image/webp"
        assert len(resizer.calls) == 1

    def test_cache_file_location(self, registry, cache, paths, install_root):
        write_application(install_root, "uk-alpha")
        registry.load("uk-alpha")

        asset = asyncio.run(cache.fetch("uk-alpha", RenditionKind.LIST))

        expected = paths.fs_root / "Cache" / "panel" / "applications" / "uk-alpha" / "listIcon.webp"
        assert asset.path == expected
        assert expected.read_bytes() == asset.data

    def test_quick_shortcut_uses_png_source(self, registry, cache, resizer, install_root):
        app_dir = write_application(install_root, "uk-alpha", icons=("icon.avif", "assets/icon.png"))
        registry.load("uk-alpha")

        asset = asyncio.run(cache.fetch("uk-alpha", RenditionKind.QUICK_SHORTCUT))

        assert asset.data == b"icon.png:88x88:webp"
        assert resizer.calls[0][0] == app_dir.resolve() / "assets" / "icon.png"

    def test_missing_source_serves_fallback(self, registry, cache, paths, resizer, install_root):
        """No source icon: fallback bytes, nothing cached for the application."""
        write_application(install_root, "uk-plain", icons=())
        registry.load("uk-plain")

        asset = asyncio.run(cache.fetch("uk-plain", RenditionKind.SMALL_GRID))

        assert asset.outcome == RenditionOutcome.FALLBACK
        assert asset.data == FALLBACK_BYTES
        assert resizer.calls == []
        app_cache = paths.application_cache_directory("uk-plain")
        assert app_cache.is_dir()
        assert list(app_cache.iterdir()) == []

    def test_resize_failure_serves_fallback(self, registry, paths, install_root, fallback_icon):
        resizer = RecordingResizer(fail=True)
        cache = AssetCache(registry, paths, resizer)
        write_application(install_root, "uk-alpha")
        registry.load("uk-alpha")

        asset = asyncio.run(cache.fetch("uk-alpha", RenditionKind.LARGE_GRID))

        assert asset.outcome == RenditionOutcome.FALLBACK
        assert asset.data == FALLBACK_BYTES
        assert not paths.rendition_cache_path("uk-alpha", "largeGridIcon", "webp").exists()

    def test_unknown_application(self, cache):
        with pytest.raises(ApplicationNotFoundError):
            asyncio.run(cache.fetch("uk-missing", RenditionKind.LIST))

    def test_unknown_rendition_kind(self, registry, cache, install_root):
        write_application(install_root, "uk-alpha")
        registry.load("uk-alpha")

        with pytest.raises(UnknownRenditionError):
            asyncio.run(cache.fetch("uk-alpha", "hugeIcon"))

    def test_missing_fallback_raises(self, registry, paths, resizer, install_root):
        cache = AssetCache(registry, paths, resizer)
        write_application(install_root, "uk-plain", icons=())
        registry.load("uk-plain")

        with pytest.raises(FallbackMissingError):
            asyncio.run(cache.fetch("uk-plain", RenditionKind.LIST))

    def test_unwritable_cache_directory_raises(self, registry, cache, paths, install_root):
        """A filesystem error surfaces to the caller and leaves the registry intact."""
        write_application(install_root, "uk-alpha")
        registry.load("uk-alpha")
        blocker = paths.application_cache_directory("uk-alpha")
        blocker.parent.mkdir(parents=True, exist_ok=True)
        blocker.write_bytes(b"not a directory")

        with pytest.raises(OSError):
            asyncio.run(cache.fetch("uk-alpha", RenditionKind.LIST))

        assert registry.find_by_id("uk-alpha") is not None

    def test_example_application_small_grid_icon(self, registry, paths, install_root, fallback_icon):
        """A real source image is rendered to an 88x88 webp and cached."""
        app_dir = write_application(install_root, "uk-example-app", icons=())
        Image.new("RGBA", (512, 384), (255, 0, 0, 255)).save(app_dir / "icon.avif", format="PNG")
        cache = AssetCache(registry, paths, PillowResizer())
        registry.load("uk-example-app")

        asset = asyncio.run(cache.fetch("uk-example-app", RenditionKind.SMALL_GRID))

        cached = paths.rendition_cache_path("uk-example-app", "smallGridIcon", "webp")
        assert asset.outcome == RenditionOutcome.GENERATED
        assert cached.read_bytes() == asset.data
        with Image.open(cached) as img:
            assert img.format == "WEBP"
            assert img.size == (88, 88)

        again = asyncio.run(cache.fetch("uk-example-app", RenditionKind.SMALL_GRID))
        assert again.outcome == RenditionOutcome.HIT
        assert again.data == asset.data


class TestAssetCacheConcurrency:
    """Tests for collapsing concurrent first requests."""

    def test_concurrent_fetches_resize_once(self, registry, paths, install_root, fallback_icon):
        resizer = RecordingResizer(delay=0.1)
        cache = AssetCache(registry, paths, resizer)
        write_application(install_root, "uk-alpha")
        registry.load("uk-alpha")

        async def scenario():
            return await asyncio.gather(
                *(cache.fetch("uk-alpha", RenditionKind.LARGE_GRID) for _ in range(8))
            )

        results = asyncio.run(scenario())

        assert len(resizer.calls) == 1
        assert len({r.data for r in results}) == 1
        assert cache._inflight == {}

    def test_different_kinds_generate_independently(self, registry, paths, install_root, fallback_icon):
        resizer = RecordingResizer(delay=0.05)
        cache = AssetCache(registry, paths, resizer)
        write_application(install_root, "uk-alpha")
        registry.load("uk-alpha")

        async def scenario():
            return await asyncio.gather(
                cache.fetch("uk-alpha", RenditionKind.LARGE_GRID),
                cache.fetch("uk-alpha", RenditionKind.LIST),
            )

        asyncio.run(scenario())

        assert len(resizer.calls) == 2

    def test_cancelled_requester_does_not_cancel_generation(self, registry, paths, install_root, fallback_icon):
        resizer = RecordingResizer(delay=0.2)
        cache = AssetCache(registry, paths, resizer)
        write_application(install_root, "uk-alpha")
        registry.load("uk-alpha")

        async def scenario():
            first = asyncio.ensure_future(cache.fetch("uk-alpha", RenditionKind.LIST))
            second = asyncio.ensure_future(cache.fetch("uk-alpha", RenditionKind.LIST))
            await asyncio.sleep(0.05)
            first.cancel()
            with pytest.raises(asyncio.CancelledError):
                await first
            return await second

        asset = asyncio.run(scenario())

        assert asset.data == b"icon.avif:88x88:webp"
        assert len(resizer.calls) == 1


class TestAssetCacheClear:
    """Tests for dropping cached renditions."""

    def test_clear_one_application(self, registry, cache, paths, resizer, install_root):
        write_application(install_root, "uk-alpha")
        registry.load("uk-alpha")
        asyncio.run(cache.fetch("uk-alpha", RenditionKind.LIST))

        assert cache.clear("uk-alpha") is True
        assert not paths.application_cache_directory("uk-alpha").exists()

        asyncio.run(cache.fetch("uk-alpha", RenditionKind.LIST))
        assert len(resizer.calls) == 2

    def test_clear_all_keeps_root(self, registry, cache, paths, install_root):
        write_application(install_root, "uk-alpha")
        registry.load("uk-alpha")
        asyncio.run(cache.fetch("uk-alpha", RenditionKind.LIST))

        assert cache.clear() is True
        assert paths.applications_cache_directory().is_dir()
        assert list(paths.applications_cache_directory().iterdir()) == []

    def test_clear_nothing_cached(self, cache):
        assert cache.clear("uk-alpha") is False
