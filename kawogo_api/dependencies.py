"""
Dependency injection for FastAPI.
Builds the outbound service clients from settings; the app keeps one of each.
"""
from fastapi import Depends, Request

from kawogo_api.config import Settings, get_settings
from kawogo_api.services.advice_service import AdviceService
from kawogo_api.services.analysis_service import AnalysisService
from kawogo_api.services.classification_service import ClassificationService


def build_classification_service(settings: Settings) -> ClassificationService:
    """Classification client configured from ROBOFLOW_API."""
    return ClassificationService(
        endpoint=settings.roboflow_api,
        timeout=settings.classification_timeout,
    )


def build_advice_service(settings: Settings) -> AdviceService:
    """Gemini client configured from GEMINI_API_KEY."""
    return AdviceService(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        base_url=settings.gemini_base_url,
        timeout=settings.advice_timeout,
    )


def get_classification_service(request: Request) -> ClassificationService:
    return request.app.state.classification_service


def get_advice_service(request: Request) -> AdviceService:
    return request.app.state.advice_service


def get_analysis_service(
    settings: Settings = Depends(get_settings),
    classifier=Depends(get_classification_service),
    advisor=Depends(get_advice_service),
) -> AnalysisService:
    """
    Analysis orchestrator for one request.

    The clients are resolved as dependencies so tests can override them
    with fakes.
    """
    return AnalysisService(
        classifier=classifier,
        advisor=advisor,
        max_upload_bytes=settings.max_upload_bytes,
    )
