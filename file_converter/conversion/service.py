"""Single-request conversion: validate, stage, route, collect, clean up."""
import base64
import logging
from pathlib import Path
from typing import Optional

from file_converter.conversion.errors import (
    ConversionError,
    MissingParametersError,
    UnsupportedConversionError,
)
from file_converter.conversion.models import ConversionRequest, ConversionResult
from file_converter.conversion.registry import info, is_supported, parse_format
from file_converter.conversion.router import ConversionRouter
from file_converter.conversion.validation import validate_upload
from file_converter.storage import StorageContext, allocate_output_path, read_artifact, remove, stage_upload

logger = logging.getLogger("file_converter.service")


class ConversionService:
    """Runs one conversion request end to end.

    The request either fully succeeds, returning the output bytes as a data
    URI, or fails with one error string. Every artifact staged for the request
    is deleted before ``convert`` returns, whichever way it ends.
    """

    def __init__(self, storage: Optional[StorageContext] = None, router: Optional[ConversionRouter] = None):
        self.storage = storage or StorageContext.from_config()
        self.router = router or ConversionRouter()
        logger.info(
            "ConversionService initialized (uploads=%s, outputs=%s)",
            self.storage.upload_dir, self.storage.output_dir,
        )

    def convert(self, request: ConversionRequest) -> ConversionResult:
        """Never raises; failures come back as ``ConversionResult(success=False)``."""
        try:
            return self._run(request)
        except ConversionError as e:
            logger.info("Conversion rejected: %s", e)
            return ConversionResult.failure(str(e), e.status_code)
        except Exception as e:
            logger.exception("Conversion failed: %s", e)
            return ConversionResult.failure("Conversion failed", 500)

    def _run(self, request: ConversionRequest) -> ConversionResult:
        if not request.data or not request.source_format or not request.target_format:
            raise MissingParametersError()
        source = parse_format(request.source_format)
        target = parse_format(request.target_format)
        if not is_supported(source, target):
            raise UnsupportedConversionError(source.value, target.value)
        source_info = info(source)
        target_info = info(target)
        validate_upload(source_info, len(request.data), request.filename, request.content_type)

        input_path = stage_upload(self.storage, request.data, request.filename or f"upload.{source_info.extension}")
        output_path: Optional[Path] = None
        try:
            output_path = allocate_output_path(self.storage, input_path, target_info.extension)
            self.router.convert(input_path, output_path, source_info.category, source, target)
            output = read_artifact(output_path)
        finally:
            remove(input_path)
            remove(output_path)

        mime = target_info.mime_types[0]
        logger.info("Converted %s (%s -> %s, %s bytes)", request.filename, source.value, target.value, len(output))
        return ConversionResult(
            success=True,
            file_name=output_path.name,
            file_path=f"data:{mime};base64,{base64.b64encode(output).decode('ascii')}",
            file_size=len(output),
        )


# Singleton
_conversion_service: Optional[ConversionService] = None


def get_conversion_service() -> ConversionService:
    global _conversion_service
    if _conversion_service is None:
        _conversion_service = ConversionService()
    return _conversion_service
