"""Video transcoding via ffmpeg."""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from file_converter import config
from file_converter.conversion.errors import ConversionFailedError
from file_converter.conversion.models import FileCategory, FileFormat
from file_converter.converters.base import Converter
from file_converter.converters.ffmpeg import run_ffmpeg

_H264 = ("-preset", "medium", "-crf", "23", "-pix_fmt", "yuv420p")
_FASTSTART = ("-movflags", "+faststart")


@dataclass(frozen=True)
class VideoEncoding:
    video_codec: str
    audio_codec: str
    container: str
    extra: tuple[str, ...] = ()

    def output_args(self) -> list[str]:
        return ["-c:v", self.video_codec, "-c:a", self.audio_codec, *self.extra, "-f", self.container]


VIDEO_ENCODINGS: dict[FileFormat, VideoEncoding] = {
    FileFormat.MP4: VideoEncoding("libx264", "aac", "mp4", _H264 + _FASTSTART),
    FileFormat.WEBM: VideoEncoding("libvpx-vp9", "libopus", "webm", ("-crf", "30", "-b:v", "0")),
    FileFormat.MKV: VideoEncoding("libx264", "aac", "matroska", _H264),
    FileFormat.AVI: VideoEncoding("mpeg4", "libmp3lame", "avi", ("-q:v", "5")),
    FileFormat.MOV: VideoEncoding("libx264", "aac", "mov", _H264 + _FASTSTART),
    FileFormat.FLV: VideoEncoding("libx264", "aac", "flv", _H264 + ("-ar", "44100")),
    FileFormat.WMV: VideoEncoding("wmv2", "wmav2", "asf", ("-q:v", "5")),
    FileFormat.MPEG: VideoEncoding("mpeg2video", "mp2", "mpeg", ("-q:v", "5")),
    FileFormat.MPG: VideoEncoding("mpeg2video", "mp2", "mpeg", ("-q:v", "5")),
    FileFormat.M4V: VideoEncoding("libx264", "aac", "ipod", _H264 + _FASTSTART),
    FileFormat.TS: VideoEncoding("libx264", "aac", "mpegts", _H264),
    FileFormat.THREE_GP: VideoEncoding("libx264", "aac", "3gp", _H264 + ("-ac", "1", "-ar", "16000")),
    FileFormat.OGV: VideoEncoding("libtheora", "libvorbis", "ogg", ("-q:v", "7")),
}


class VideoConverter(Converter):
    category = FileCategory.VIDEO
    targets = frozenset(VIDEO_ENCODINGS)

    def __init__(self, timeout: Optional[int] = None):
        self.timeout = timeout or config.VIDEO_TIMEOUT_SECONDS

    def convert(self, input_path: Path, output_path: Path, source: FileFormat, target: FileFormat) -> None:
        encoding = VIDEO_ENCODINGS.get(target)
        if encoding is None:
            raise ConversionFailedError(f"Unsupported video format: {target.value}")
        run_ffmpeg(input_path, output_path, encoding.output_args(), self.timeout)
