"""Format registry: the static capability table.

Every supported format is listed once in ``FORMAT_INFO`` with its category,
label, accepted MIME types and maximum upload size. ``CATEGORIES`` holds the
per-category conversion graph: source format -> ordered targets. The graph is
sparse and asymmetric on purpose; it lists only conversions the converter
collaborators actually perform. Adding an edge here without a matching
encoder makes ``ConversionRouter`` refuse to start.
"""
from types import MappingProxyType
from typing import Union

from file_converter.conversion.errors import UnknownFormatError
from file_converter.conversion.models import CategoryConfig, FileCategory, FileFormat, FormatInfo

F = FileFormat
MB = 1024 * 1024

FormatLike = Union[FileFormat, str]


def _info(fmt: FileFormat, label: str, mime_types: tuple[str, ...], category: FileCategory, max_mb: int) -> FormatInfo:
    return FormatInfo(format=fmt, label=label, mime_types=mime_types, category=category, max_size=max_mb * MB)


_IMAGE, _AUDIO, _VIDEO, _DOC, _ARCHIVE = (
    FileCategory.IMAGE,
    FileCategory.AUDIO,
    FileCategory.VIDEO,
    FileCategory.DOCUMENT,
    FileCategory.ARCHIVE,
)

_FORMATS = (
    # images
    _info(F.JPG, "JPG", ("image/jpeg",), _IMAGE, 10),
    _info(F.JPEG, "JPEG", ("image/jpeg",), _IMAGE, 10),
    _info(F.PNG, "PNG", ("image/png",), _IMAGE, 10),
    _info(F.WEBP, "WebP", ("image/webp",), _IMAGE, 10),
    _info(F.GIF, "GIF", ("image/gif",), _IMAGE, 10),
    _info(F.BMP, "BMP", ("image/bmp", "image/x-windows-bmp"), _IMAGE, 20),
    _info(F.SVG, "SVG", ("image/svg+xml",), _IMAGE, 5),
    _info(F.AVIF, "AVIF", ("image/avif",), _IMAGE, 10),
    _info(F.ICO, "ICO", ("image/x-icon", "image/vnd.microsoft.icon"), _IMAGE, 5),
    _info(F.TIFF, "TIFF", ("image/tiff",), _IMAGE, 50),
    _info(F.TIF, "TIF", ("image/tiff",), _IMAGE, 50),
    _info(F.HEIC, "HEIC", ("image/heic",), _IMAGE, 20),
    _info(F.HEIF, "HEIF", ("image/heif",), _IMAGE, 20),
    _info(F.EPS, "EPS", ("application/postscript",), _IMAGE, 30),
    _info(F.PSD, "PSD", ("image/vnd.adobe.photoshop",), _IMAGE, 100),
    _info(F.DDS, "DDS", ("image/vnd-ms.dds",), _IMAGE, 50),
    _info(F.TGA, "TGA", ("image/x-tga",), _IMAGE, 30),
    # audio
    _info(F.MP3, "MP3", ("audio/mpeg",), _AUDIO, 50),
    _info(F.WAV, "WAV", ("audio/wav", "audio/wave"), _AUDIO, 100),
    _info(F.OGG, "OGG", ("audio/ogg",), _AUDIO, 50),
    _info(F.M4A, "M4A", ("audio/mp4", "audio/m4a"), _AUDIO, 50),
    _info(F.FLAC, "FLAC", ("audio/flac",), _AUDIO, 100),
    _info(F.AAC, "AAC", ("audio/aac",), _AUDIO, 50),
    _info(F.AIFF, "AIFF", ("audio/aiff", "audio/x-aiff"), _AUDIO, 100),
    _info(F.AIF, "AIF", ("audio/aiff", "audio/x-aiff"), _AUDIO, 100),
    _info(F.WMA, "WMA", ("audio/x-ms-wma",), _AUDIO, 50),
    _info(F.OPUS, "OPUS", ("audio/opus",), _AUDIO, 50),
    _info(F.AMR, "AMR", ("audio/amr",), _AUDIO, 20),
    _info(F.WV, "WavPack", ("audio/x-wavpack",), _AUDIO, 100),
    _info(F.ALAC, "ALAC", ("audio/x-alac",), _AUDIO, 100),
    # video
    _info(F.MP4, "MP4", ("video/mp4",), _VIDEO, 500),
    _info(F.WEBM, "WebM", ("video/webm",), _VIDEO, 500),
    _info(F.MKV, "MKV", ("video/x-matroska",), _VIDEO, 500),
    _info(F.AVI, "AVI", ("video/x-msvideo",), _VIDEO, 500),
    _info(F.MOV, "MOV", ("video/quicktime",), _VIDEO, 500),
    _info(F.FLV, "FLV", ("video/x-flv",), _VIDEO, 300),
    _info(F.WMV, "WMV", ("video/x-ms-wmv",), _VIDEO, 500),
    _info(F.MPEG, "MPEG", ("video/mpeg",), _VIDEO, 500),
    _info(F.MPG, "MPG", ("video/mpeg",), _VIDEO, 500),
    _info(F.M4V, "M4V", ("video/x-m4v",), _VIDEO, 500),
    _info(F.VOB, "VOB", ("video/dvd",), _VIDEO, 1024),
    _info(F.TS, "TS", ("video/mp2t",), _VIDEO, 500),
    _info(F.THREE_GP, "3GP", ("video/3gpp",), _VIDEO, 200),
    _info(F.OGV, "OGV", ("video/ogg",), _VIDEO, 500),
    # documents
    _info(F.TXT, "TXT", ("text/plain",), _DOC, 20),
    _info(F.MD, "Markdown", ("text/markdown", "text/x-markdown"), _DOC, 20),
    _info(F.HTML, "HTML", ("text/html",), _DOC, 20),
    _info(F.XML, "XML", ("application/xml", "text/xml"), _DOC, 30),
    _info(F.JSON, "JSON", ("application/json",), _DOC, 30),
    _info(F.YAML, "YAML", ("application/x-yaml", "text/yaml"), _DOC, 20),
    _info(F.CSV, "CSV", ("text/csv",), _DOC, 50),
    # archives
    _info(F.ZIP, "ZIP", ("application/zip",), _ARCHIVE, 500),
    _info(F.RAR, "RAR", ("application/x-rar-compressed", "application/vnd.rar"), _ARCHIVE, 500),
    _info(F.SEVEN_Z, "7Z", ("application/x-7z-compressed",), _ARCHIVE, 500),
    _info(F.TAR, "TAR", ("application/x-tar",), _ARCHIVE, 500),
    _info(F.GZ, "GZIP", ("application/gzip",), _ARCHIVE, 500),
    _info(F.BZ2, "BZ2", ("application/x-bzip2",), _ARCHIVE, 500),
    _info(F.XZ, "XZ", ("application/x-xz",), _ARCHIVE, 500),
    _info(F.TGZ, "TGZ", ("application/x-compressed-tar",), _ARCHIVE, 500),
    _info(F.ZST, "Zstandard", ("application/zstd",), _ARCHIVE, 500),
)

FORMAT_INFO: MappingProxyType = MappingProxyType({i.format: i for i in _FORMATS})


def _graph(edges: dict[FileFormat, list[FileFormat]]) -> MappingProxyType:
    return MappingProxyType({src: tuple(targets) for src, targets in edges.items()})


_IMAGE_GRAPH = _graph({
    F.JPG: [F.PNG, F.WEBP, F.GIF, F.BMP, F.AVIF, F.ICO, F.TIFF, F.TIF, F.HEIC, F.HEIF, F.TGA],
    F.JPEG: [F.PNG, F.WEBP, F.GIF, F.BMP, F.AVIF, F.ICO, F.TIFF, F.TIF, F.HEIC, F.HEIF, F.TGA],
    F.PNG: [F.JPG, F.JPEG, F.WEBP, F.GIF, F.BMP, F.AVIF, F.ICO, F.TIFF, F.TIF, F.HEIC, F.HEIF, F.TGA],
    F.WEBP: [F.JPG, F.JPEG, F.PNG, F.GIF, F.BMP, F.AVIF, F.ICO, F.TIFF, F.TIF, F.TGA],
    F.GIF: [F.JPG, F.JPEG, F.PNG, F.WEBP, F.BMP, F.ICO, F.TIFF, F.TIF],
    F.BMP: [F.JPG, F.JPEG, F.PNG, F.WEBP, F.GIF, F.AVIF, F.ICO, F.TIFF, F.TIF, F.TGA],
    # rasterized through ImageMagick, then saved by Pillow
    F.SVG: [F.PNG, F.JPG, F.JPEG, F.WEBP, F.AVIF, F.ICO, F.TIFF],
    F.AVIF: [F.JPG, F.JPEG, F.PNG, F.WEBP, F.BMP, F.ICO, F.TIFF, F.TIF],
    F.ICO: [F.PNG, F.JPG, F.JPEG, F.WEBP, F.BMP, F.GIF],
    F.TIFF: [F.JPG, F.JPEG, F.PNG, F.WEBP, F.GIF, F.BMP, F.AVIF, F.ICO, F.TIF, F.TGA],
    F.TIF: [F.JPG, F.JPEG, F.PNG, F.WEBP, F.GIF, F.BMP, F.AVIF, F.ICO, F.TIFF, F.TGA],
    F.HEIC: [F.JPG, F.JPEG, F.PNG, F.WEBP, F.AVIF, F.TIFF, F.TIF, F.HEIF],
    F.HEIF: [F.JPG, F.JPEG, F.PNG, F.WEBP, F.AVIF, F.TIFF, F.TIF, F.HEIC],
    F.EPS: [F.PNG, F.JPG, F.JPEG],
    F.PSD: [F.PNG, F.JPG, F.JPEG, F.TIFF, F.BMP],
    F.DDS: [F.PNG, F.JPG, F.JPEG, F.TGA, F.BMP],
    F.TGA: [F.PNG, F.JPG, F.JPEG, F.BMP, F.TIFF, F.TIF],
})

_AUDIO_GRAPH = _graph({
    F.MP3: [F.WAV, F.OGG, F.M4A, F.FLAC, F.AAC, F.AIFF, F.AIF, F.WMA, F.OPUS],
    F.WAV: [F.MP3, F.OGG, F.M4A, F.FLAC, F.AAC, F.AIFF, F.AIF, F.WMA, F.OPUS, F.ALAC],
    F.OGG: [F.MP3, F.WAV, F.M4A, F.FLAC, F.AAC, F.AIFF, F.WMA, F.OPUS],
    F.M4A: [F.MP3, F.WAV, F.OGG, F.FLAC, F.AAC, F.AIFF, F.WMA, F.OPUS, F.ALAC],
    F.FLAC: [F.MP3, F.WAV, F.OGG, F.M4A, F.AAC, F.AIFF, F.AIF, F.WMA, F.OPUS, F.ALAC],
    F.AAC: [F.MP3, F.WAV, F.OGG, F.M4A, F.FLAC, F.AIFF, F.WMA, F.OPUS],
    F.AIFF: [F.MP3, F.WAV, F.OGG, F.M4A, F.FLAC, F.AAC, F.AIF, F.WMA, F.OPUS, F.ALAC],
    F.AIF: [F.MP3, F.WAV, F.OGG, F.M4A, F.FLAC, F.AAC, F.AIFF, F.WMA, F.OPUS, F.ALAC],
    F.WMA: [F.MP3, F.WAV, F.OGG, F.M4A, F.FLAC, F.AAC, F.AIFF, F.OPUS],
    F.OPUS: [F.MP3, F.WAV, F.OGG, F.M4A, F.FLAC, F.AAC, F.AIFF],
    F.AMR: [F.MP3, F.WAV, F.OGG, F.AAC],
    F.WV: [F.WAV, F.FLAC, F.MP3, F.OGG],
    F.ALAC: [F.FLAC, F.WAV, F.AIFF, F.MP3, F.M4A],
})

_VIDEO_GRAPH = _graph({
    F.MP4: [F.WEBM, F.MKV, F.AVI, F.MOV, F.FLV, F.WMV, F.MPEG, F.MPG, F.M4V, F.TS, F.THREE_GP, F.OGV],
    F.WEBM: [F.MP4, F.MKV, F.AVI, F.MOV, F.FLV, F.MPEG, F.MPG, F.OGV],
    F.MKV: [F.MP4, F.WEBM, F.AVI, F.MOV, F.FLV, F.WMV, F.MPEG, F.MPG, F.M4V],
    F.AVI: [F.MP4, F.WEBM, F.MKV, F.MOV, F.FLV, F.WMV, F.MPEG, F.MPG, F.M4V],
    F.MOV: [F.MP4, F.WEBM, F.MKV, F.AVI, F.FLV, F.WMV, F.MPEG, F.MPG, F.M4V],
    F.FLV: [F.MP4, F.WEBM, F.MKV, F.AVI, F.MOV, F.MPEG, F.MPG],
    F.WMV: [F.MP4, F.MKV, F.AVI, F.MOV, F.MPEG, F.MPG],
    F.MPEG: [F.MP4, F.WEBM, F.MKV, F.AVI, F.MOV, F.MPG, F.M4V],
    F.MPG: [F.MP4, F.WEBM, F.MKV, F.AVI, F.MOV, F.MPEG, F.M4V],
    F.M4V: [F.MP4, F.MKV, F.AVI, F.MOV, F.MPEG, F.MPG],
    F.VOB: [F.MP4, F.MKV, F.AVI, F.MPEG, F.MPG],
    F.TS: [F.MP4, F.MKV, F.WEBM, F.MPEG, F.MPG],
    F.THREE_GP: [F.MP4, F.AVI, F.MOV, F.WEBM],
    F.OGV: [F.MP4, F.WEBM, F.MKV, F.AVI],
})

_DOCUMENT_GRAPH = _graph({
    F.TXT: [F.HTML, F.MD],
    F.MD: [F.TXT],
    F.HTML: [F.TXT],
    F.XML: [F.JSON, F.YAML, F.TXT],
    F.JSON: [F.XML, F.YAML, F.CSV, F.TXT],
    F.YAML: [F.JSON, F.XML, F.TXT],
    F.CSV: [F.JSON, F.TXT],
})

_ARCHIVE_GRAPH = _graph({
    F.ZIP: [F.TAR, F.GZ, F.BZ2, F.XZ, F.SEVEN_Z, F.TGZ],
    F.RAR: [F.ZIP, F.TAR, F.SEVEN_Z],
    F.SEVEN_Z: [F.ZIP, F.TAR, F.GZ],
    F.TAR: [F.ZIP, F.GZ, F.BZ2, F.XZ, F.SEVEN_Z, F.TGZ],
    F.GZ: [F.ZIP, F.TAR, F.BZ2, F.XZ, F.TGZ],
    F.BZ2: [F.ZIP, F.TAR, F.GZ, F.XZ],
    F.XZ: [F.ZIP, F.TAR, F.GZ, F.BZ2],
    F.TGZ: [F.ZIP, F.TAR, F.GZ, F.BZ2],
    F.ZST: [F.ZIP, F.TAR, F.GZ],
})


def _category(category: FileCategory, label: str, graph: MappingProxyType, max_mb: int) -> CategoryConfig:
    formats = tuple(i.format for i in _FORMATS if i.category == category)
    return CategoryConfig(category=category, label=label, formats=formats, conversions=graph, max_size=max_mb * MB)


CATEGORIES: MappingProxyType = MappingProxyType({
    FileCategory.IMAGE: _category(FileCategory.IMAGE, "Image", _IMAGE_GRAPH, 100),
    FileCategory.AUDIO: _category(FileCategory.AUDIO, "Audio", _AUDIO_GRAPH, 100),
    FileCategory.VIDEO: _category(FileCategory.VIDEO, "Video", _VIDEO_GRAPH, 1024),
    FileCategory.DOCUMENT: _category(FileCategory.DOCUMENT, "Document", _DOCUMENT_GRAPH, 50),
    FileCategory.ARCHIVE: _category(FileCategory.ARCHIVE, "Archive", _ARCHIVE_GRAPH, 1024),
})


def parse_format(tag: FormatLike) -> FileFormat:
    """Turn a raw tag ("PNG", ".png", " png ") into a FileFormat. Raises UnknownFormatError."""
    if isinstance(tag, FileFormat):
        return tag
    if not isinstance(tag, str):
        raise UnknownFormatError(tag)
    cleaned = tag.strip().lower().lstrip(".")
    try:
        return FileFormat(cleaned)
    except ValueError:
        raise UnknownFormatError(tag) from None


def parse_category(tag: Union[FileCategory, str]) -> FileCategory:
    if isinstance(tag, FileCategory):
        return tag
    try:
        return FileCategory(str(tag).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown category: {tag}") from None


def info(fmt: FormatLike) -> FormatInfo:
    return FORMAT_INFO[parse_format(fmt)]


def category_of(fmt: FormatLike) -> FileCategory:
    return info(fmt).category


def list_categories() -> tuple[FileCategory, ...]:
    return tuple(CATEGORIES)


def category_config(category: Union[FileCategory, str]) -> CategoryConfig:
    return CATEGORIES[parse_category(category)]


def list_formats(category: Union[FileCategory, str]) -> tuple[FileFormat, ...]:
    """Formats selectable for a category, in display order."""
    return category_config(category).formats


def conversions_for(source: FormatLike) -> tuple[FileFormat, ...]:
    """Legal targets for a source format; empty when it has no outgoing edges."""
    fmt = parse_format(source)
    return CATEGORIES[FORMAT_INFO[fmt].category].conversions.get(fmt, ())


def is_supported(source: FormatLike, target: FormatLike) -> bool:
    try:
        src = parse_format(source)
        dst = parse_format(target)
    except UnknownFormatError:
        return False
    return dst in conversions_for(src)


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    i = 0
    while size >= 1024 ** (i + 1) and i < len(units) - 1:
        i += 1
    value = round(size / (1024 ** i), 2)
    if value == int(value):
        value = int(value)
    return f"{value} {units[i]}"


def check_registry_consistency() -> None:
    """Raise RuntimeError if the format table and the conversion graphs disagree."""
    listed: dict[FileFormat, FileCategory] = {}
    for category, config in CATEGORIES.items():
        for fmt in config.formats:
            if fmt in listed:
                raise RuntimeError(f"{fmt.value} is listed under both {listed[fmt].value} and {category.value}")
            listed[fmt] = category
            if FORMAT_INFO[fmt].category != category:
                raise RuntimeError(f"{fmt.value} is listed under {category.value} but registered as {FORMAT_INFO[fmt].category.value}")
        members = set(config.formats)
        for src, targets in config.conversions.items():
            stray = [t.value for t in (src, *targets) if t not in members]
            if stray:
                raise RuntimeError(f"{category.value} graph references formats outside the category: {', '.join(stray)}")
    missing = set(FileFormat) - set(listed)
    if missing:
        raise RuntimeError(f"Formats without a category: {', '.join(sorted(f.value for f in missing))}")


check_registry_consistency()
