"""
Health check endpoint for monitoring API status.
"""
from fastapi import APIRouter, Depends, status

from kawogo_api.config import Settings, get_settings
from kawogo_api.models.analysis import HealthResponse, ServiceStatus

router = APIRouter()


@router.get("/health", status_code=status.HTTP_200_OK, response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)):
    """
    Health check endpoint to verify API status.

    Returns:
        dict: Server status and which upstream services are configured
    """
    return HealthResponse(
        status="OK",
        message="Kawogo Care Server is running",
        env=ServiceStatus(
            roboflow=settings.roboflow_configured,
            gemini=settings.gemini_configured,
        ),
    )
