"""
Leaf analysis API endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from kawogo_api.config import Settings, get_settings
from kawogo_api.dependencies import get_analysis_service
from kawogo_api.exceptions import AnalysisError, ClassificationUpstreamError
from kawogo_api.models.analysis import (
    AnalysisResponse,
    DiseaseInfo,
    ErrorResponse,
    UploadedImage,
)
from kawogo_api.services.analysis_service import AnalysisService
from kawogo_api.services.disease_service import list_known_diseases
from src.utils.logger import get_logger


router = APIRouter()
logger = get_logger()


async def read_upload(image: Optional[UploadFile], max_bytes: int) -> Optional[UploadedImage]:
    """
    Read an uploaded file into memory.

    At most ``max_bytes + 1`` bytes are read, enough to tell that a file is
    over the limit without buffering all of it.

    Args:
        image: Uploaded file object
        max_bytes: Configured size limit

    Returns:
        UploadedImage, or None if no file was sent
    """
    if image is None or not image.filename:
        return None

    content = await image.read(max_bytes + 1)
    return UploadedImage(
        content=content,
        content_type=image.content_type,
        filename=image.filename,
    )


def error_response(error: AnalysisError, settings: Settings) -> JSONResponse:
    """Render an analysis error as the API's JSON error body."""
    body = {"error": error.public_message}

    if isinstance(error, ClassificationUpstreamError) and error.exposes_details and not settings.is_production:
        body["details"] = error.message

    return JSONResponse(status_code=error.status_code, content=body)


@router.post(
    "/analyze",
    response_model=AnalysisResponse,
    summary="Analyze a cassava leaf image",
    description="Upload a leaf photo to detect cassava diseases and get treatment advice.",
    responses={
        200: {"description": "Successful analysis"},
        400: {"description": "Missing, invalid or oversized image", "model": ErrorResponse},
        429: {"description": "Upstream rate limit", "model": ErrorResponse},
        500: {"description": "Analysis failed", "model": ErrorResponse},
        503: {"description": "Upstream service unavailable", "model": ErrorResponse},
    }
)
async def analyze_image(
    image: Optional[UploadFile] = File(None, description="Leaf image (JPG, PNG, ...)"),
    settings: Settings = Depends(get_settings),
    service: AnalysisService = Depends(get_analysis_service),
):
    """
    Analyze an uploaded leaf image.

    Process:
    1. Read and validate the upload
    2. Classify it with Roboflow
    3. Get advice from Gemini, or from the fallback table if that fails
    """
    logger.info("Received analyze request")

    try:
        uploaded = await read_upload(image, settings.max_upload_bytes)
        return await service.analyze(uploaded)

    except AnalysisError as e:
        upstream_status = getattr(e, "upstream_status", None)
        if upstream_status is not None:
            logger.error(f"Analysis error ({e.status_code}, upstream {upstream_status}): {e.message}")
        else:
            logger.error(f"Analysis error ({e.status_code}): {e.message}")
        return error_response(e, settings)

    except Exception as e:
        logger.exception(f"Analysis error: {e}")
        body = {"error": "Analysis failed"}
        if not settings.is_production:
            body["details"] = str(e)
        return JSONResponse(status_code=500, content=body)


@router.get(
    "/diseases",
    response_model=List[DiseaseInfo],
    summary="List known cassava diseases",
    description="Returns the disease codes the classifier emits with their full names and fallback advice.",
)
async def get_diseases():
    """Get list of known disease codes."""
    return list_known_diseases()
