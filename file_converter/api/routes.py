"""API routes for conversion, format discovery and maintenance."""
import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse

from file_converter.conversion.errors import UnknownFormatError
from file_converter.conversion.models import ConversionRequest
from file_converter.conversion.registry import (
    category_config,
    conversions_for,
    format_file_size,
    info,
    list_categories,
    list_formats,
    parse_category,
)
from file_converter.conversion.service import get_conversion_service
from file_converter.retention import sweep

logger = logging.getLogger("file_converter.api")
router = APIRouter(prefix="/api", tags=["converter"])


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/categories")
def get_categories():
    return {
        "categories": [
            {
                "category": cfg.category.value,
                "label": cfg.label,
                "formats": [f.value for f in cfg.formats],
                "maxSize": cfg.max_size,
            }
            for cfg in map(category_config, list_categories())
        ]
    }


@router.get("/formats")
def get_formats(category: Optional[str] = Query(None, description="image | audio | video | document | archive")):
    """Every registered format, optionally limited to one category."""
    if category:
        try:
            formats = list_formats(category)
        except ValueError as e:
            raise HTTPException(404, str(e))
    else:
        formats = [f for category in list_categories() for f in list_formats(category)]
    return {"formats": [info(f).to_dict() for f in formats]}


@router.get("/formats/{fmt}")
def get_format(fmt: str):
    try:
        format_info = info(fmt)
    except UnknownFormatError as e:
        raise HTTPException(404, str(e))
    out = format_info.to_dict()
    out["maxSizeLabel"] = format_file_size(format_info.max_size)
    out["conversions"] = [t.value for t in conversions_for(format_info.format)]
    return out


@router.get("/conversions/{source}")
def get_conversions(source: str):
    """Legal target formats for a source format."""
    try:
        targets = conversions_for(source)
    except UnknownFormatError as e:
        raise HTTPException(404, str(e))
    return {"source": source.lower(), "targets": [t.value for t in targets]}


@router.get("/categories/{category}/formats")
def get_category_formats(category: str):
    try:
        cat = parse_category(category)
    except ValueError as e:
        raise HTTPException(404, str(e))
    return {"category": cat.value, "formats": [f.value for f in list_formats(cat)]}


@router.post("/convert")
async def convert_file(
    file: Optional[UploadFile] = File(None),
    sourceFormat: Optional[str] = Form(None),
    targetFormat: Optional[str] = Form(None),
):
    """Convert one uploaded file. Body is the conversion result; status reflects success or the error kind."""
    data = await file.read() if file is not None else None
    request = ConversionRequest(
        data=data,
        filename=file.filename if file is not None else None,
        content_type=file.content_type if file is not None else None,
        source_format=sourceFormat,
        target_format=targetFormat,
    )
    svc = get_conversion_service()
    result = await asyncio.to_thread(svc.convert, request)
    return JSONResponse(result.to_dict(), status_code=result.status_code)


def _run_cleanup(max_age_hours: float) -> JSONResponse:
    svc = get_conversion_service()
    try:
        report = sweep(svc.storage, max_age_hours)
    except Exception as e:
        logger.exception("Cleanup failed: %s", e)
        return JSONResponse({"success": False, "error": "Cleanup failed"}, status_code=500)
    return JSONResponse({
        "success": True,
        "message": "Cleanup completed",
        "deleted": report.deleted,
        "failed": report.failed,
    })


@router.post("/cleanup")
def cleanup_recent(max_age_hours: float = Query(1, gt=0)):
    """Sweep temp files older than an hour (or ``max_age_hours``)."""
    return _run_cleanup(max_age_hours)


@router.get("/cleanup")
def cleanup_stale(max_age_hours: float = Query(24, gt=0)):
    """Sweep temp files older than a day (or ``max_age_hours``)."""
    return _run_cleanup(max_age_hours)
