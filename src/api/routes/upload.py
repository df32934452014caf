"""
Image upload routes (multipart).
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, File, Form, UploadFile

from api.context import AppContext, get_context
from core.responses import format_response
from media.service import IncomingFile


router = APIRouter(prefix="/api/upload", tags=["Upload"])


def _incoming(upload: UploadFile) -> IncomingFile:
    return IncomingFile(
        filename=upload.filename or "upload",
        content_type=(upload.content_type or "").lower(),
        data=upload.file.read(),
    )


@router.post("")
def upload_image(
    file: UploadFile = File(...),
    quality: str = Form("medium"),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    return format_response(ctx.uploads.upload(_incoming(file), quality), message="Image uploaded")


@router.post("/remove-background")
def remove_background(
    image: UploadFile = File(...),
    quality: str = Form("medium"),
    optimize_for_mobile: bool = Form(True, alias="optimizeForMobile"),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    """Store a background-removed PNG and the original; processing errors fall back to the original."""
    result = ctx.uploads.remove_background(_incoming(image), quality, optimize_for_mobile)
    return format_response(result, message="Background removed")


@router.post("/batch")
def upload_batch(
    files: List[UploadFile] = File(...),
    quality: str = Form("medium"),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    results, summary = ctx.uploads.batch([_incoming(f) for f in files], quality)
    body = format_response(results, summary=summary)
    body["success"] = summary["success"] > 0
    return body


@router.get("/stats")
def upload_stats(ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
    return format_response(ctx.uploads.capabilities())
