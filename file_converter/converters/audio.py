"""Audio transcoding via ffmpeg."""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from file_converter import config
from file_converter.conversion.errors import ConversionFailedError
from file_converter.conversion.models import FileCategory, FileFormat
from file_converter.converters.base import Converter
from file_converter.converters.ffmpeg import run_ffmpeg


@dataclass(frozen=True)
class AudioEncoding:
    codec: str
    container: str
    bitrate: Optional[str] = None  # None for lossless codecs; "default" uses AUDIO_BITRATE

    def output_args(self, default_bitrate: str) -> list[str]:
        args = ["-vn", "-c:a", self.codec]
        if self.bitrate:
            args += ["-b:a", default_bitrate if self.bitrate == "default" else self.bitrate]
        return args + ["-f", self.container]


AUDIO_ENCODINGS: dict[FileFormat, AudioEncoding] = {
    FileFormat.MP3: AudioEncoding("libmp3lame", "mp3", "default"),
    FileFormat.WAV: AudioEncoding("pcm_s16le", "wav"),
    FileFormat.OGG: AudioEncoding("libvorbis", "ogg", "default"),
    FileFormat.M4A: AudioEncoding("aac", "ipod", "default"),
    FileFormat.FLAC: AudioEncoding("flac", "flac"),
    FileFormat.AAC: AudioEncoding("aac", "adts", "default"),
    FileFormat.AIFF: AudioEncoding("pcm_s16be", "aiff"),
    FileFormat.AIF: AudioEncoding("pcm_s16be", "aiff"),
    FileFormat.WMA: AudioEncoding("wmav2", "asf", "default"),
    FileFormat.OPUS: AudioEncoding("libopus", "opus", "128k"),
    FileFormat.ALAC: AudioEncoding("alac", "ipod"),
}


class AudioConverter(Converter):
    category = FileCategory.AUDIO
    targets = frozenset(AUDIO_ENCODINGS)

    def __init__(self, bitrate: Optional[str] = None, timeout: Optional[int] = None):
        self.bitrate = bitrate or config.AUDIO_BITRATE
        self.timeout = timeout or config.AUDIO_TIMEOUT_SECONDS

    def convert(self, input_path: Path, output_path: Path, source: FileFormat, target: FileFormat) -> None:
        encoding = AUDIO_ENCODINGS.get(target)
        if encoding is None:
            raise ConversionFailedError(f"Unsupported audio format: {target.value}")
        run_ffmpeg(input_path, output_path, encoding.output_args(self.bitrate), self.timeout)
