"""Archive repacking: unpack the source into a directory tree, pack the tree as the target.

Single-stream compressors (gz, bz2, xz, zst) hold either a tarball or one
plain file; both shapes are handled when reading, and when writing a tree
with more than one entry is tarred before compressing.
"""
import bz2
import gzip
import logging
import lzma
import re
import shutil
import subprocess
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import Callable, Optional

import py7zr

from file_converter import config
from file_converter.conversion.errors import ConversionFailedError
from file_converter.conversion.models import FileCategory, FileFormat
from file_converter.converters.base import Converter

logger = logging.getLogger("file_converter.archive")

RAR_MESSAGE = (
    "RAR archives require the proprietary unrar tool and are not supported here. "
    "Use an external tool such as unrar or 7-Zip to extract the archive first."
)

_UUID_SUFFIX = re.compile(r"-[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")

_STREAM_OPENERS: dict[FileFormat, Callable] = {
    FileFormat.GZ: gzip.open,
    FileFormat.BZ2: bz2.open,
    FileFormat.XZ: lzma.open,
}

_TAR_WRITE_MODES = {
    FileFormat.TAR: "w",
    FileFormat.TGZ: "w:gz",
    FileFormat.GZ: "w:gz",
    FileFormat.BZ2: "w:bz2",
    FileFormat.XZ: "w:xz",
}


def original_stem(path: Path) -> str:
    """File stem without the unique suffix added when the upload was staged."""
    return _UUID_SUFFIX.sub("", path.stem) or "archive"


def _check_inside(root: Path, names: list[str]) -> None:
    resolved_root = root.resolve()
    for name in names:
        target = (root / name).resolve()
        if target != resolved_root and resolved_root not in target.parents:
            raise ConversionFailedError(f"Archive entry escapes the extraction directory: {name}")


# ---- unpacking -----------------------------------------------------------

def _extract_zip(src: Path, dest: Path) -> None:
    with zipfile.ZipFile(src, "r") as zf:
        _check_inside(dest, zf.namelist())
        zf.extractall(dest)


def _extract_tar(src: Path, dest: Path) -> None:
    with tarfile.open(src, "r:*") as tf:
        _check_inside(dest, tf.getnames())
        tf.extractall(dest, filter="data")


def _extract_7z(src: Path, dest: Path) -> None:
    with py7zr.SevenZipFile(src, "r") as archive:
        _check_inside(dest, archive.getnames())
        archive.extractall(path=dest)


def _decompressed_to(stream_file: Path, dest: Path, stem: str) -> None:
    """A decompressed stream is a tarball or a single file named after the archive."""
    if tarfile.is_tarfile(stream_file):
        _extract_tar(stream_file, dest)
    else:
        shutil.move(str(stream_file), str(dest / stem))


def _extract_stream(src: Path, dest: Path, fmt: FileFormat, scratch: Path) -> None:
    raw = scratch / "stream.bin"
    try:
        with _STREAM_OPENERS[fmt](src, "rb") as fin, open(raw, "wb") as fout:
            shutil.copyfileobj(fin, fout)
    except (OSError, EOFError, lzma.LZMAError) as e:
        raise ConversionFailedError(f"Corrupt {fmt.value} stream: {e}") from e
    _decompressed_to(raw, dest, original_stem(src))


def _extract_zst(src: Path, dest: Path, scratch: Path) -> None:
    raw = scratch / "stream.bin"
    cmd = [config.ZSTD_BINARY, "-d", "-q", "-f", str(src), "-o", str(raw)]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=config.ARCHIVE_TIMEOUT_SECONDS)
    except FileNotFoundError:
        raise ConversionFailedError("zstd not installed; install the zstd tool to read Zstandard archives") from None
    except subprocess.TimeoutExpired:
        raise ConversionFailedError(f"zstd timed out after {config.ARCHIVE_TIMEOUT_SECONDS} seconds") from None
    if result.returncode != 0:
        raise ConversionFailedError((result.stderr or "zstd failed").strip())
    _decompressed_to(raw, dest, original_stem(src))


def unpack(src: Path, fmt: FileFormat, dest: Path, scratch: Path) -> None:
    if fmt == FileFormat.RAR:
        raise ConversionFailedError(RAR_MESSAGE)
    if fmt == FileFormat.ZIP:
        _extract_zip(src, dest)
    elif fmt in (FileFormat.TAR, FileFormat.TGZ):
        _extract_tar(src, dest)
    elif fmt == FileFormat.SEVEN_Z:
        _extract_7z(src, dest)
    elif fmt in _STREAM_OPENERS:
        _extract_stream(src, dest, fmt, scratch)
    elif fmt == FileFormat.ZST:
        _extract_zst(src, dest, scratch)
    else:
        raise ConversionFailedError(f"Cannot read {fmt.value} archives")


# ---- packing -------------------------------------------------------------

def _entries(tree: Path) -> list[Path]:
    return sorted(tree.rglob("*"))


def _pack_zip(tree: Path, out: Path) -> None:
    with zipfile.ZipFile(out, "w", zipfile.ZIP_DEFLATED) as zf:
        for item in _entries(tree):
            zf.write(item, item.relative_to(tree).as_posix())


def _pack_tar(tree: Path, out: Path, mode: str) -> None:
    with tarfile.open(out, mode) as tf:
        for item in sorted(tree.iterdir()):
            tf.add(item, arcname=item.name)


def _pack_7z(tree: Path, out: Path) -> None:
    with py7zr.SevenZipFile(out, "w") as archive:
        for item in _entries(tree):
            if item.is_file():
                archive.write(item, item.relative_to(tree).as_posix())


def _single_file(tree: Path) -> Optional[Path]:
    entries = list(tree.iterdir())
    if len(entries) == 1 and entries[0].is_file():
        return entries[0]
    return None


def _pack_stream(tree: Path, out: Path, fmt: FileFormat) -> None:
    lone = _single_file(tree)
    if lone is None:
        _pack_tar(tree, out, _TAR_WRITE_MODES[fmt])
        return
    with open(lone, "rb") as fin, _STREAM_OPENERS[fmt](out, "wb") as fout:
        shutil.copyfileobj(fin, fout)


def pack(tree: Path, fmt: FileFormat, out: Path) -> None:
    if fmt == FileFormat.ZIP:
        _pack_zip(tree, out)
    elif fmt in (FileFormat.TAR, FileFormat.TGZ):
        _pack_tar(tree, out, _TAR_WRITE_MODES[fmt])
    elif fmt == FileFormat.SEVEN_Z:
        _pack_7z(tree, out)
    elif fmt in _STREAM_OPENERS:
        _pack_stream(tree, out, fmt)
    else:
        raise ConversionFailedError(f"Cannot write {fmt.value} archives")


class ArchiveConverter(Converter):
    category = FileCategory.ARCHIVE
    targets = frozenset({
        FileFormat.ZIP,
        FileFormat.TAR,
        FileFormat.TGZ,
        FileFormat.SEVEN_Z,
        FileFormat.GZ,
        FileFormat.BZ2,
        FileFormat.XZ,
    })

    def convert(self, input_path: Path, output_path: Path, source: FileFormat, target: FileFormat) -> None:
        if target not in self.targets:
            raise ConversionFailedError(f"Cannot write {target.value} archives")
        with tempfile.TemporaryDirectory(prefix="file-converter-") as tmp:
            tree = Path(tmp) / "tree"
            scratch = Path(tmp) / "scratch"
            tree.mkdir()
            scratch.mkdir()
            try:
                unpack(input_path, source, tree, scratch)
            except (zipfile.BadZipFile, tarfile.TarError, py7zr.Bad7zFile) as e:
                raise ConversionFailedError(f"Corrupt {source.value} archive: {e}") from e
            pack(tree, target, output_path)
        logger.info("Repacked %s (%s) -> %s (%s)", input_path.name, source.value, output_path.name, target.value)
