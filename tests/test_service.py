"""End-to-end request handling in ConversionService."""
import base64
import io
import zipfile

import pytest
from PIL import Image

from file_converter.conversion.errors import ConversionFailedError
from file_converter.conversion.service import ConversionService


class ExplodingRouter:
    """Writes a partial output, then fails."""

    def __init__(self, error):
        self.error = error
        self.seen = []

    def convert(self, input_path, output_path, category, source, target):
        self.seen.append((input_path, output_path))
        output_path.write_bytes(b"partial")
        raise self.error


def _decode_data_uri(uri):
    header, payload = uri.split(",", 1)
    return header, base64.b64decode(payload)


def test_png_to_jpg(service, storage, make_request, png_bytes, files_in):
    result = service.convert(make_request(png_bytes, "photo.png", "png", "jpg", "image/png"))

    assert result.success, result.error
    assert result.file_name.endswith(".jpg")
    assert result.file_name.startswith("photo-")
    header, payload = _decode_data_uri(result.file_path)
    assert header == "data:image/jpeg;base64"
    assert result.file_size == len(payload) > 0
    with Image.open(io.BytesIO(payload)) as img:
        assert img.format == "JPEG"
        assert img.size == (64, 48)
    assert files_in(storage.upload_dir) == []
    assert files_in(storage.output_dir) == []


def test_result_dict_shape(service, make_request, png_bytes):
    body = service.convert(make_request(png_bytes, "photo.png", "png", "webp")).to_dict()
    assert set(body) == {"success", "fileName", "filePath", "fileSize"}
    assert body["filePath"].startswith("data:image/webp;base64,")


def test_unsupported_pair_is_rejected_before_staging(service, storage, make_request, png_bytes, files_in):
    result = service.convert(make_request(png_bytes, "photo.png", "png", "mp3"))
    assert not result.success
    assert result.error == "Conversion from png to mp3 is not supported"
    assert result.status_code == 400
    assert files_in(storage.upload_dir) == []


@pytest.mark.parametrize(
    "data, source, target",
    [
        (None, "png", "jpg"),
        (b"", "png", "jpg"),
        (b"abc", None, "jpg"),
        (b"abc", "png", ""),
    ],
)
def test_missing_parameters(service, make_request, data, source, target):
    result = service.convert(make_request(data, "photo.png", source, target))
    assert not result.success
    assert result.error == "Missing required parameters"
    assert result.to_dict() == {"success": False, "error": "Missing required parameters"}


def test_unknown_format(service, make_request):
    result = service.convert(make_request(b"abc", "a.exe", "exe", "png"))
    assert result.error == "Unknown format: exe"


def test_type_mismatch(service, storage, make_request, files_in):
    result = service.convert(make_request(b"not audio", "notes.txt", "mp3", "wav", "text/plain"))
    assert not result.success
    assert result.error == "Invalid file type. Expected MP3 file"
    assert files_in(storage.upload_dir) == []


def test_generic_content_type_falls_back_to_extension(service, make_request):
    result = service.convert(
        make_request(b'{"a": 1}', "data.json", "json", "yaml", "application/octet-stream")
    )
    assert result.success, result.error
    _, payload = _decode_data_uri(result.file_path)
    assert payload == b"a: 1\n"


def test_oversize_upload(service, make_request):
    big = b"x" * (20 * 1024 * 1024 + 1)
    result = service.convert(make_request(big, "big.txt", "txt", "html", "text/plain"))
    assert result.error == "File size exceeds maximum allowed size of 20 MB"
    assert result.status_code == 413


def test_rar_is_refused_with_a_hint(service, storage, make_request, files_in):
    result = service.convert(
        make_request(b"Rar!\x1a\x07\x00fake", "bundle.rar", "rar", "zip", "application/vnd.rar")
    )
    assert not result.success
    assert "external tool" in result.error
    assert result.status_code == 422
    assert files_in(storage.upload_dir) == []
    assert files_in(storage.output_dir) == []


def test_corrupt_input_reports_failure(service, storage, make_request, files_in):
    result = service.convert(make_request(b"definitely not a png", "photo.png", "png", "jpg", "image/png"))
    assert not result.success
    assert result.error.startswith("Image conversion failed:")
    assert files_in(storage.upload_dir) == []
    assert files_in(storage.output_dir) == []


def test_artifacts_removed_when_conversion_fails(storage, make_request, png_bytes, files_in):
    router = ExplodingRouter(ConversionFailedError("Image conversion failed: boom"))
    svc = ConversionService(storage=storage, router=router)

    result = svc.convert(make_request(png_bytes, "photo.png", "png", "jpg"))

    assert result.error == "Image conversion failed: boom"
    assert result.status_code == 422
    (input_path, output_path), = router.seen
    assert not input_path.exists()
    assert not output_path.exists()
    assert files_in(storage.upload_dir) == []
    assert files_in(storage.output_dir) == []


def test_unexpected_errors_are_masked(storage, make_request, png_bytes, files_in):
    svc = ConversionService(storage=storage, router=ExplodingRouter(RuntimeError("internal detail")))
    result = svc.convert(make_request(png_bytes, "photo.png", "png", "jpg"))
    assert result.error == "Conversion failed"
    assert result.status_code == 500
    assert files_in(storage.upload_dir) == []


def test_archive_round_trip_through_service(service, make_request):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr("docs/readme.txt", "hello")
    result = service.convert(make_request(buf.getvalue(), "bundle.zip", "zip", "tgz", "application/zip"))
    assert result.success, result.error
    assert result.file_name.endswith(".tgz")


def test_unnamed_upload_takes_the_source_extension(storage, make_request, png_bytes):
    router = ExplodingRouter(ConversionFailedError("Image conversion failed: stop"))
    svc = ConversionService(storage=storage, router=router)
    svc.convert(make_request(png_bytes, None, "png", "tiff"))
    (input_path, output_path), = router.seen
    assert input_path.name.startswith("upload-") and input_path.suffix == ".png"
    assert output_path.suffix == ".tiff"
