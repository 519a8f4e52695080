"""Application configuration. Loads from environment and .env file."""
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
# Load .env from cwd, then project root .env
load_dotenv()
load_dotenv(BASE_DIR / ".env")

# Temp artifact directories (override with env)
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", str(BASE_DIR / "tmp" / "uploads")))
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", str(BASE_DIR / "tmp" / "outputs")))

# Retention: files older than RETENTION_HOURS are removed by the sweeper.
# SWEEP_INTERVAL_MINUTES=0 disables the background sweep.
RETENTION_HOURS = float(os.getenv("RETENTION_HOURS", "24"))
SWEEP_INTERVAL_MINUTES = float(os.getenv("SWEEP_INTERVAL_MINUTES", "60"))

# Encoder options
IMAGE_QUALITY = int(os.getenv("IMAGE_QUALITY", "90"))
AUDIO_BITRATE = os.getenv("AUDIO_BITRATE", "192k")

# External tools
FFMPEG_BINARY = os.getenv("FFMPEG_BINARY", "ffmpeg")
ZSTD_BINARY = os.getenv("ZSTD_BINARY", "zstd")
AUDIO_TIMEOUT_SECONDS = int(os.getenv("AUDIO_TIMEOUT_SECONDS", "300"))
VIDEO_TIMEOUT_SECONDS = int(os.getenv("VIDEO_TIMEOUT_SECONDS", "1800"))
ARCHIVE_TIMEOUT_SECONDS = int(os.getenv("ARCHIVE_TIMEOUT_SECONDS", "300"))

# Server (for uvicorn)
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
# CORS: comma-separated origins, e.g. "http://localhost:3000,http://127.0.0.1:3000"
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",") if o.strip()]

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("file_converter")
