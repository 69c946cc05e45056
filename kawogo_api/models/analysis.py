"""
Pydantic models for the analysis API.
"""
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field


CONFIDENCE_UNAVAILABLE = "N/A"

Confidence = Union[int, Literal["N/A"]]


class UploadedImage(BaseModel):
    """Image received from the caller, held in memory for one request."""
    content: bytes = Field(..., repr=False, description="Raw image bytes")
    content_type: Optional[str] = Field(None, description="Declared MIME type")
    filename: Optional[str] = Field(None, description="Original filename")

    @property
    def size(self) -> int:
        return len(self.content)


class ClassificationResult(BaseModel):
    """Top prediction of the classification service."""
    disease: str = Field(..., min_length=1, description="Disease code, e.g. CMD or Healthy")
    confidence: Confidence = Field(..., description="Confidence percentage (0-100) or N/A")


class AnalysisResponse(BaseModel):
    """Response model for a completed analysis."""
    disease: str = Field(..., description="Disease code")
    confidence: Confidence = Field(..., description="Confidence percentage (0-100) or N/A")
    advice: str = Field(..., min_length=1, description="Treatment advice for farmers")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "disease": "CMD",
                    "confidence": 87,
                    "advice": "Cassava Mosaic Disease: Uproot infected plants and use clean "
                              "cuttings from resistant varieties."
                }
            ]
        }
    }


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    details: Optional[str] = Field(None, description="Failure detail (non-production only)")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"error": "No image uploaded"}
            ]
        }
    }


class ServiceStatus(BaseModel):
    """Which upstream services are configured."""
    roboflow: bool
    gemini: bool


class HealthResponse(BaseModel):
    status: str = "OK"
    message: str
    env: Optional[ServiceStatus] = None


class DiseaseInfo(BaseModel):
    """Known disease code with its full name and fallback advice."""
    code: str
    name: str
    advice: str
