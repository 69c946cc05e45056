"""
Analysis orchestration: validate upload, classify, advise.
"""
from typing import Optional

from kawogo_api.exceptions import (
    AdviceUpstreamError,
    ClientInputError,
    ConfigurationError,
)
from kawogo_api.models.analysis import AnalysisResponse, UploadedImage
from kawogo_api.services.disease_service import HEALTHY_ADVICE, HEALTHY_LABEL, lookup
from src.utils.helpers import format_file_size
from src.utils.logger import get_logger


GENERIC_CONTENT_TYPES = {"application/octet-stream", "binary/octet-stream"}


class AnalysisService:
    """
    Runs one leaf analysis.

    Classification failures abort the request. Advice failures never do:
    the fallback table answers instead.
    """

    def __init__(
        self,
        classifier,
        advisor,
        max_upload_bytes: int = 10 * 1024 * 1024,
        logger=None
    ):
        """
        Initialize analysis service.

        Args:
            classifier: Object with ``configured`` and async ``classify(bytes)``
            advisor: Object with async ``get_advice(code)``
            max_upload_bytes: Largest accepted image in bytes
            logger: Logger instance
        """
        self.classifier = classifier
        self.advisor = advisor
        self.max_upload_bytes = max_upload_bytes
        self.logger = logger or get_logger()

    def validate_upload(self, image: Optional[UploadedImage]) -> UploadedImage:
        """
        Check an upload before any network call is made.

        Raises:
            ClientInputError: If the image is missing, empty, not an image,
                or larger than the configured limit
        """
        if image is None or not image.content:
            self.logger.info("No file uploaded")
            raise ClientInputError("No image uploaded")

        if image.size > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes / (1024 * 1024)
            self.logger.info(f"Rejected upload of {format_file_size(image.size)}")
            raise ClientInputError(f"File too large. Maximum size is {limit_mb:g}MB.")

        content_type = (image.content_type or "").split(";")[0].strip().lower()
        if content_type and not content_type.startswith("image/") and content_type not in GENERIC_CONTENT_TYPES:
            self.logger.info(f"Rejected upload with content type {content_type}")
            raise ClientInputError("Uploaded file is not an image")

        return image

    async def analyze(self, image: Optional[UploadedImage]) -> AnalysisResponse:
        """
        Analyze a leaf image.

        Process:
        1. Validate the upload
        2. Check the classifier is configured
        3. Classify the image
        4. Fetch advice for non-healthy results, falling back to the static table

        Args:
            image: Uploaded image, or None when the form had no file

        Returns:
            AnalysisResponse with disease, confidence and advice

        Raises:
            ClientInputError: Invalid upload
            ConfigurationError: Classifier endpoint missing
            ClassificationUpstreamError: Classification call failed
        """
        image = self.validate_upload(image)
        self.logger.info(f"File received: {image.filename} ({format_file_size(image.size)})")

        if not self.classifier.configured:
            self.logger.error("ROBOFLOW_API environment variable not set")
            raise ConfigurationError("Roboflow API not configured")

        self.logger.info("Sending to Roboflow...")
        result = await self.classifier.classify(image.content)
        self.logger.info(f"Disease detected: {result.disease} Confidence: {result.confidence}")

        advice = await self.resolve_advice(result.disease)

        return AnalysisResponse(
            disease=result.disease,
            confidence=result.confidence,
            advice=advice
        )

    async def resolve_advice(self, disease_code: str) -> str:
        """
        Get advice for a disease code. Never raises.

        Args:
            disease_code: Disease abbreviation

        Returns:
            Generated, looked-up, or healthy-plant advice
        """
        if disease_code == HEALTHY_LABEL:
            self.logger.info("Using healthy plant message")
            return HEALTHY_ADVICE

        try:
            advice = await self.advisor.get_advice(disease_code)
        except AdviceUpstreamError as e:
            self.logger.warning(f"Advice request failed: {e}. Falling back to predefined advice")
            return lookup(disease_code)
        except Exception as e:
            self.logger.warning(f"Unexpected advice failure: {e}. Falling back to predefined advice")
            return lookup(disease_code)

        if not advice or not str(advice).strip():
            self.logger.warning("Advice service returned empty text. Falling back to predefined advice")
            return lookup(disease_code)

        self.logger.info("Advice generated by Gemini")
        return advice
