"""Upload checks against the declared source format. Run before anything touches disk."""
from pathlib import Path
from typing import Optional

from file_converter.conversion.errors import ValidationFailedError
from file_converter.conversion.models import FileFormat, FormatInfo
from file_converter.conversion.registry import format_file_size

# Extensions that name the same container
_EXTENSION_ALIASES = {
    FileFormat.JPG: {"jpg", "jpeg"},
    FileFormat.JPEG: {"jpg", "jpeg"},
    FileFormat.TIFF: {"tif", "tiff"},
    FileFormat.TIF: {"tif", "tiff"},
    FileFormat.AIFF: {"aif", "aiff"},
    FileFormat.AIF: {"aif", "aiff"},
    FileFormat.YAML: {"yaml", "yml"},
    FileFormat.HTML: {"html", "htm"},
    FileFormat.MD: {"md", "markdown"},
    FileFormat.MPEG: {"mpeg", "mpg"},
    FileFormat.MPG: {"mpeg", "mpg"},
}

# Content types browsers send when they do not know better
_GENERIC_MIME_TYPES = {"", "application/octet-stream"}


def get_file_extension(filename: Optional[str]) -> str:
    return Path(filename or "").suffix.lstrip(".").lower()


def is_valid_file_extension(filename: Optional[str], fmt: FileFormat) -> bool:
    ext = get_file_extension(filename)
    return ext in _EXTENSION_ALIASES.get(fmt, {fmt.value})


def validate_upload(
    format_info: FormatInfo,
    size: int,
    filename: Optional[str],
    content_type: Optional[str] = None,
) -> None:
    """Raise ValidationFailedError if the upload cannot be a file of ``format_info``."""
    if size <= 0:
        raise ValidationFailedError("Uploaded file is empty")
    if size > format_info.max_size:
        raise ValidationFailedError(
            f"File size exceeds maximum allowed size of {format_file_size(format_info.max_size)}",
            status_code=413,
        )
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    mime_ok = mime in _GENERIC_MIME_TYPES or mime in format_info.mime_types
    if not mime_ok and not is_valid_file_extension(filename, format_info.format):
        raise ValidationFailedError(f"Invalid file type. Expected {format_info.label} file")
