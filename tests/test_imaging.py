"""Tests for Pillow-backed resizing."""

import pytest
from PIL import Image

from core.errors import RenditionError
from core.panel.imaging import PillowResizer, render_placeholder


class TestPillowResizer:
    """Tests for PillowResizer."""

    def test_resizes_to_webp(self, tmp_path):
        source = tmp_path / "icon.png"
        Image.new("RGB", (300, 200), (0, 128, 255)).save(source, format="PNG")
        destination = tmp_path / "out" / "largeGridIcon.webp"

        PillowResizer().resize(source, 88, 88, destination, "webp")

        with Image.open(destination) as img:
            assert img.format == "WEBP"
            assert img.size == (88, 88)

    def test_invalid_source_raises(self, tmp_path):
        """Undecodable input leaves neither output nor temp files behind."""
        source = tmp_path / "icon.avif"
        source.write_bytes(b"definitely not an image")
        destination = tmp_path / "listIcon.webp"

        with pytest.raises(RenditionError, match="Cannot render"):
            PillowResizer().resize(source, 88, 88, destination, "webp")

        assert not destination.exists()
        assert list(tmp_path.glob("*.tmp")) == []

    def test_missing_source_raises(self, tmp_path):
        with pytest.raises(RenditionError):
            PillowResizer().resize(tmp_path / "missing.png", 88, 88, tmp_path / "out.webp", "webp")

    def test_unknown_format_raises(self, tmp_path):
        source = tmp_path / "icon.png"
        Image.new("RGB", (10, 10)).save(source, format="PNG")

        with pytest.raises(RenditionError):
            PillowResizer().resize(source, 8, 8, tmp_path / "out.nope", "nope")

        assert list(tmp_path.glob(".*.tmp")) == []


def test_render_placeholder(tmp_path):
    destination = tmp_path / "Cache" / "panel" / "invalidIcon.webp"

    render_placeholder(destination, size=64)

    with Image.open(destination) as img:
        assert img.format == "WEBP"
        assert img.size == (64, 64)
