"""Shared test fixtures for the file converter."""
import io
from pathlib import Path

import pytest
from PIL import Image

from file_converter.conversion.models import ConversionRequest
from file_converter.conversion.service import ConversionService
from file_converter.storage import StorageContext


@pytest.fixture
def storage(tmp_path):
    """Isolated upload/output directories for one test."""
    ctx = StorageContext.under(tmp_path / "artifacts", retention_hours=1)
    ctx.ensure_directories()
    return ctx


@pytest.fixture
def service(storage):
    return ConversionService(storage=storage)


@pytest.fixture
def png_bytes():
    """A small RGBA PNG with some colour variation."""
    img = Image.new("RGBA", (64, 48), (255, 0, 0, 255))
    for x in range(64):
        for y in range(0, 48, 4):
            img.putpixel((x, y), (x * 4 % 256, 128, 255 - x * 4 % 256, 200))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_file(tmp_path, png_bytes) -> Path:
    path = tmp_path / "photo.png"
    path.write_bytes(png_bytes)
    return path


@pytest.fixture
def make_request():
    def _make(data=b"", filename=None, source=None, target=None, content_type=None):
        return ConversionRequest(
            data=data,
            filename=filename,
            source_format=source,
            target_format=target,
            content_type=content_type,
        )
    return _make


@pytest.fixture
def files_in():
    """Regular files currently in a directory (empty if it does not exist)."""
    def _files(directory: Path) -> list[Path]:
        if not directory.exists():
            return []
        return [p for p in directory.iterdir() if p.is_file()]
    return _files
