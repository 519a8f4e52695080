"""Raster image conversion with Pillow (HEIC/HEIF through pillow-heif, SVG through ImageMagick)."""
import io
import logging
from pathlib import Path
from typing import Optional

from PIL import Image, ImageOps
from pillow_heif import register_heif_opener

from file_converter import config
from file_converter.conversion.errors import ConversionFailedError
from file_converter.conversion.models import FileCategory, FileFormat
from file_converter.converters.base import Converter

register_heif_opener()

logger = logging.getLogger("file_converter.image")

ICO_SIZES = [(16, 16), (32, 32), (48, 48), (64, 64), (128, 128), (256, 256)]

# Rasterization density for SVG sources, in dots per inch
SVG_DENSITY = 96

# Outputs that need tools outside Pillow
_SPECIALIZED_OUTPUTS = {
    FileFormat.SVG: "Cannot convert raster images to SVG. SVG is a vector format that requires vectorization tools like Potrace.",
    FileFormat.PSD: "PSD output requires specialized software such as Photoshop or GIMP.",
    FileFormat.EPS: "EPS output requires specialized software such as Ghostscript or Inkscape.",
    FileFormat.DDS: "DDS output requires specialized texture tools.",
}

# Pillow save format per target
_PIL_FORMATS = {
    FileFormat.JPG: "JPEG",
    FileFormat.JPEG: "JPEG",
    FileFormat.PNG: "PNG",
    FileFormat.WEBP: "WEBP",
    FileFormat.GIF: "GIF",
    FileFormat.BMP: "BMP",
    FileFormat.AVIF: "AVIF",
    FileFormat.ICO: "ICO",
    FileFormat.TIFF: "TIFF",
    FileFormat.TIF: "TIFF",
    FileFormat.HEIC: "HEIF",
    FileFormat.HEIF: "HEIF",
    FileFormat.TGA: "TGA",
}


def _flatten(img: Image.Image, background=(255, 255, 255)) -> Image.Image:
    """Drop alpha onto a solid background; JPEG and BMP cannot store it."""
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        out = Image.new("RGB", rgba.size, background)
        out.paste(rgba, mask=rgba.getchannel("A"))
        return out
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def rasterize_svg(input_path: Path, density: int = SVG_DENSITY) -> bytes:
    """Render an SVG file to PNG bytes with ImageMagick, keeping transparency."""
    try:
        from wand.color import Color
        from wand.image import Image as WandImage
    except ImportError as e:
        # Wand loads the MagickWand library on import
        raise ConversionFailedError(f"SVG rasterization needs ImageMagick: {e}") from e
    with WandImage(filename=f"svg:{input_path}", resolution=density, background=Color("transparent")) as svg:
        svg.format = "png"
        return svg.make_blob()


def _prepare(img: Image.Image, target: FileFormat) -> Image.Image:
    if target in (FileFormat.JPG, FileFormat.JPEG, FileFormat.BMP):
        return _flatten(img)
    if target == FileFormat.GIF:
        if img.mode in ("P", "L"):
            return img
        return img.convert("RGB").quantize(colors=256)
    if img.mode in ("RGB", "RGBA", "L"):
        return img
    if img.mode in ("LA", "P", "PA"):
        return img.convert("RGBA")
    return img.convert("RGB")


class ImageConverter(Converter):
    category = FileCategory.IMAGE
    targets = frozenset(_PIL_FORMATS)

    def __init__(self, quality: Optional[int] = None):
        self.quality = quality or config.IMAGE_QUALITY

    def _save_kwargs(self, target: FileFormat) -> dict:
        fmt = _PIL_FORMATS[target]
        if fmt == "JPEG":
            return {"format": fmt, "quality": self.quality, "optimize": True}
        if fmt == "PNG":
            return {"format": fmt, "optimize": True}
        if fmt == "WEBP":
            return {"format": fmt, "quality": self.quality, "method": 4}
        if fmt in ("AVIF", "HEIF"):
            return {"format": fmt, "quality": self.quality}
        if fmt == "TIFF":
            return {"format": fmt, "compression": "tiff_lzw"}
        if fmt == "ICO":
            return {"format": fmt, "sizes": ICO_SIZES}
        return {"format": fmt}

    def convert(self, input_path: Path, output_path: Path, source: FileFormat, target: FileFormat) -> None:
        if target in _SPECIALIZED_OUTPUTS:
            raise ConversionFailedError(_SPECIALIZED_OUTPUTS[target])
        if target not in _PIL_FORMATS:
            raise ConversionFailedError(f"Unsupported image format: {target.value}")
        save_kw = self._save_kwargs(target)
        if source == FileFormat.SVG:
            opened = Image.open(io.BytesIO(rasterize_svg(input_path)))
        else:
            opened = Image.open(input_path)
        with opened as img:
            logger.debug("Image %s: %sx%s, format=%s", input_path.name, img.width, img.height, img.format)
            work = _prepare(ImageOps.exif_transpose(img), target)
            try:
                work.save(str(output_path), **save_kw)
            except (KeyError, OSError) as e:
                if save_kw["format"] in ("AVIF", "HEIF"):
                    output_path.unlink(missing_ok=True)
                    raise ConversionFailedError(
                        f"{target.value.upper()} encoding not supported by this Pillow installation ({e})"
                    ) from e
                raise
        logger.info("Converted %s -> %s", input_path.name, output_path.name)
