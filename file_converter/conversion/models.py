"""Format, category and conversion request/response models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional


class FileCategory(str, Enum):
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    DOCUMENT = "document"
    ARCHIVE = "archive"


class FileFormat(str, Enum):
    """Every format tag the service knows about. The set is closed."""

    # images
    JPG = "jpg"
    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    GIF = "gif"
    BMP = "bmp"
    SVG = "svg"
    AVIF = "avif"
    ICO = "ico"
    TIFF = "tiff"
    TIF = "tif"
    HEIC = "heic"
    HEIF = "heif"
    EPS = "eps"
    PSD = "psd"
    DDS = "dds"
    TGA = "tga"
    # audio
    MP3 = "mp3"
    WAV = "wav"
    OGG = "ogg"
    M4A = "m4a"
    FLAC = "flac"
    AAC = "aac"
    AIFF = "aiff"
    AIF = "aif"
    WMA = "wma"
    OPUS = "opus"
    AMR = "amr"
    WV = "wv"
    ALAC = "alac"
    # video
    MP4 = "mp4"
    WEBM = "webm"
    MKV = "mkv"
    AVI = "avi"
    MOV = "mov"
    FLV = "flv"
    WMV = "wmv"
    MPEG = "mpeg"
    MPG = "mpg"
    M4V = "m4v"
    VOB = "vob"
    TS = "ts"
    THREE_GP = "3gp"
    OGV = "ogv"
    # documents
    TXT = "txt"
    MD = "md"
    HTML = "html"
    XML = "xml"
    JSON = "json"
    YAML = "yaml"
    CSV = "csv"
    # archives
    ZIP = "zip"
    RAR = "rar"
    SEVEN_Z = "7z"
    TAR = "tar"
    GZ = "gz"
    BZ2 = "bz2"
    XZ = "xz"
    TGZ = "tgz"
    ZST = "zst"


@dataclass(frozen=True)
class FormatInfo:
    format: FileFormat
    label: str
    mime_types: tuple[str, ...]
    category: FileCategory
    max_size: int  # bytes

    @property
    def extension(self) -> str:
        return self.format.value

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format.value,
            "label": self.label,
            "mimeTypes": list(self.mime_types),
            "category": self.category.value,
            "maxSize": self.max_size,
        }


@dataclass(frozen=True)
class CategoryConfig:
    category: FileCategory
    label: str
    formats: tuple[FileFormat, ...]
    conversions: Mapping[FileFormat, tuple[FileFormat, ...]]
    max_size: int


@dataclass
class ConversionRequest:
    """One upload to convert. Lives for a single request."""

    data: Optional[bytes]
    filename: Optional[str]
    source_format: Optional[str]
    target_format: Optional[str]
    content_type: Optional[str] = None


@dataclass
class ConversionResult:
    success: bool
    file_name: Optional[str] = None
    file_path: Optional[str] = None  # data URI with the converted bytes
    file_size: Optional[int] = None
    error: Optional[str] = None
    status_code: int = field(default=200, repr=False)

    @classmethod
    def failure(cls, error: str, status_code: int = 400) -> "ConversionResult":
        return cls(success=False, error=error, status_code=status_code)

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "fileName": self.file_name,
            "filePath": self.file_path,
            "fileSize": self.file_size,
        }
