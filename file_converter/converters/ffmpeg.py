"""Runs the ffmpeg binary for audio and video conversions."""
import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from file_converter import config
from file_converter.conversion.errors import ConversionFailedError

logger = logging.getLogger("file_converter.ffmpeg")

# Lines of ffmpeg stderr kept in the error message
STDERR_TAIL_LINES = 5


def build_command(
    input_path: Path,
    output_path: Path,
    output_args: Sequence[str],
    binary: Optional[str] = None,
) -> list[str]:
    return [
        binary or config.FFMPEG_BINARY,
        "-y", "-hide_banner", "-loglevel", "error",
        "-i", str(input_path),
        *output_args,
        str(output_path),
    ]


def _tail(text: str) -> str:
    lines = [line for line in (text or "").strip().splitlines() if line.strip()]
    return "\n".join(lines[-STDERR_TAIL_LINES:])


def run_ffmpeg(
    input_path: Path,
    output_path: Path,
    output_args: Sequence[str],
    timeout: int,
    binary: Optional[str] = None,
) -> None:
    """Transcode ``input_path`` into ``output_path``. Raises ConversionFailedError."""
    cmd = build_command(input_path, output_path, output_args, binary)
    logger.debug("Running %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        logger.error("ffmpeg not found. Install ffmpeg for audio and video conversion.")
        raise ConversionFailedError("ffmpeg not installed") from None
    except subprocess.TimeoutExpired:
        raise ConversionFailedError(f"ffmpeg timed out after {timeout} seconds") from None
    if result.returncode != 0:
        raise ConversionFailedError(_tail(result.stderr) or _tail(result.stdout) or "ffmpeg failed")
    logger.info("Transcoded %s -> %s", input_path.name, output_path.name)
