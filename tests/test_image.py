"""Raster image conversion."""
import pytest
from PIL import Image

from file_converter.conversion.errors import ConversionFailedError
from file_converter.conversion.models import FileFormat as F
from file_converter.converters import image
from file_converter.converters.image import ImageConverter, rasterize_svg

SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="40" height="20">'
    '<rect width="40" height="20" fill="#0000ff"/></svg>'
)


@pytest.fixture
def converter():
    return ImageConverter(quality=80)


@pytest.mark.parametrize(
    "target, pil_format, mode",
    [
        (F.JPG, "JPEG", "RGB"),
        (F.BMP, "BMP", "RGB"),
        (F.PNG, "PNG", "RGBA"),
        (F.WEBP, "WEBP", "RGBA"),
        (F.TIFF, "TIFF", "RGBA"),
        (F.GIF, "GIF", "P"),
        (F.TGA, "TGA", "RGBA"),
    ],
)
def test_png_to_raster_formats(tmp_path, converter, png_file, target, pil_format, mode):
    out = tmp_path / f"out.{target.value}"
    converter.convert(png_file, out, F.PNG, target)
    with Image.open(out) as img:
        assert img.format == pil_format
        assert img.size == (64, 48)
        assert img.mode == mode


def test_png_to_ico_contains_several_sizes(tmp_path, converter, png_file):
    out = tmp_path / "icon.ico"
    converter.convert(png_file, out, F.PNG, F.ICO)
    with Image.open(out) as img:
        assert img.format == "ICO"
        assert (16, 16) in img.info["sizes"]
        assert (32, 32) in img.info["sizes"]


def test_jpeg_output_has_no_alpha(tmp_path, converter, png_file):
    out = tmp_path / "flat.jpeg"
    converter.convert(png_file, out, F.PNG, F.JPEG)
    with Image.open(out) as img:
        # fully opaque red rows survive flattening
        r, g, b = img.getpixel((10, 2))
        assert r > 200 and g < 60 and b < 60


def test_exif_orientation_is_applied(tmp_path, converter):
    src = tmp_path / "rotated.jpg"
    exif = Image.Exif()
    exif[0x0112] = 6  # rotate 90 CW on display
    Image.new("RGB", (40, 20), (0, 128, 0)).save(src, format="JPEG", exif=exif)
    out = tmp_path / "upright.png"
    converter.convert(src, out, F.JPG, F.PNG)
    with Image.open(out) as img:
        assert img.size == (20, 40)


@pytest.mark.parametrize("target", [F.SVG, F.PSD, F.EPS, F.DDS])
def test_specialized_outputs_are_refused(tmp_path, converter, png_file, target):
    with pytest.raises(ConversionFailedError, match="requires|Cannot convert"):
        converter.convert(png_file, tmp_path / f"out.{target.value}", F.PNG, target)


def test_not_an_image(tmp_path, converter):
    src = tmp_path / "fake.png"
    src.write_bytes(b"hello")
    with pytest.raises(OSError):
        converter.convert(src, tmp_path / "out.jpg", F.PNG, F.JPG)


def test_svg_source_is_rasterized_before_saving(tmp_path, converter, png_bytes, monkeypatch):
    seen = []

    def fake_rasterize(path):
        seen.append(path)
        return png_bytes

    monkeypatch.setattr(image, "rasterize_svg", fake_rasterize)
    src = tmp_path / "logo.svg"
    src.write_text(SVG, encoding="utf-8")
    out = tmp_path / "logo.jpg"
    converter.convert(src, out, F.SVG, F.JPG)
    assert seen == [src]
    with Image.open(out) as img:
        assert img.format == "JPEG"
        assert img.size == (64, 48)


def test_svg_to_png_with_imagemagick(tmp_path, converter):
    pytest.importorskip("wand.image")
    src = tmp_path / "logo.svg"
    src.write_text(SVG, encoding="utf-8")
    out = tmp_path / "logo.png"
    converter.convert(src, out, F.SVG, F.PNG)
    with Image.open(out) as img:
        assert img.format == "PNG"
        assert img.width > 0
        assert abs(img.width - 2 * img.height) <= 2


def test_rasterize_svg_returns_png_bytes(tmp_path):
    pytest.importorskip("wand.image")
    src = tmp_path / "logo.svg"
    src.write_text(SVG, encoding="utf-8")
    assert rasterize_svg(src).startswith(b"\x89PNG")
