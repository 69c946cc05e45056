"""
Async client for the hosted image-classification model (Roboflow).
"""
import asyncio
import base64
import math
from typing import Any, Dict, Optional

import httpx

from kawogo_api.exceptions import ClassificationUpstreamError, ConfigurationError
from kawogo_api.models.analysis import (
    CONFIDENCE_UNAVAILABLE,
    ClassificationResult,
)
from kawogo_api.services.disease_service import HEALTHY_LABEL
from src.utils.helpers import round_half_up
from src.utils.logger import get_logger


class ClassificationService:
    """
    Sends leaf images to the classification endpoint and reads back the
    top prediction. No retries: a failed call fails the request.
    """

    def __init__(
        self,
        endpoint: Optional[str],
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger=None
    ):
        """
        Initialize classification service.

        Args:
            endpoint: Full model URL, including the api_key query parameter
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
            logger: Logger instance
        """
        self.endpoint = endpoint
        self.timeout = timeout
        self.transport = transport
        self.logger = logger or get_logger()

    @property
    def configured(self) -> bool:
        return bool(self.endpoint)

    async def classify(self, image_bytes: bytes) -> ClassificationResult:
        """
        Classify a leaf image.

        Args:
            image_bytes: Raw image bytes

        Returns:
            ClassificationResult with disease code and confidence percentage

        Raises:
            ConfigurationError: If no endpoint is configured
            ClassificationUpstreamError: If the call fails or the body is unusable
        """
        if not self.configured:
            raise ConfigurationError("Roboflow API not configured")

        payload = base64.b64encode(image_bytes).decode("ascii")
        headers = {"Content-Type": "application/x-www-form-urlencoded"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                # httpx timeouts apply per read; wait_for bounds the whole call
                response = await asyncio.wait_for(
                    client.post(self.endpoint, content=payload, headers=headers),
                    timeout=self.timeout
                )

        except (httpx.TimeoutException, asyncio.TimeoutError):
            self.logger.error(f"Classification request timed out after {self.timeout}s")
            raise ClassificationUpstreamError(
                f"Classification request timed out after {self.timeout}s",
                kind="timeout"
            )

        except httpx.ConnectError as e:
            self.logger.error(f"Classification service unreachable: {e}")
            raise ClassificationUpstreamError(
                f"Connection failed: {str(e)}",
                kind="unavailable"
            )

        except httpx.HTTPError as e:
            self.logger.error(f"Classification request failed: {e}")
            raise ClassificationUpstreamError(f"Request failed: {str(e)}", kind="http_error")

        if response.status_code == 429:
            self.logger.warning("Classification service rate limit exceeded (429)")
            raise ClassificationUpstreamError(
                "Rate limit exceeded", kind="rate_limited", upstream_status=429
            )

        if response.status_code in (401, 403):
            self.logger.error(f"Classification service rejected credentials ({response.status_code})")
            raise ClassificationUpstreamError(
                f"Authentication failed: {response.status_code}",
                kind="auth",
                upstream_status=response.status_code
            )

        if not response.is_success:
            self.logger.error(f"Classification API error: {response.status_code} - {response.text[:200]}")
            raise ClassificationUpstreamError(
                f"API request failed: {response.status_code}",
                kind="http_error",
                upstream_status=response.status_code
            )

        try:
            data = response.json()
        except ValueError:
            raise ClassificationUpstreamError("Response is not valid JSON", kind="malformed")

        self.logger.debug(f"Classification response: {data}")
        return self.parse_response(data)

    @staticmethod
    def parse_response(data: Any) -> ClassificationResult:
        """
        Read the top prediction from a classification response.

        A missing or empty prediction list means nothing was detected and
        is reported as healthy with unknown confidence.

        Args:
            data: Decoded JSON response

        Returns:
            ClassificationResult

        Raises:
            ClassificationUpstreamError: If the response has an unexpected shape
        """
        if not isinstance(data, dict):
            raise ClassificationUpstreamError("Response is not a JSON object", kind="malformed")

        predictions = data.get("predictions")
        if predictions is None:
            predictions = []
        if not isinstance(predictions, list):
            raise ClassificationUpstreamError("Predictions field is not a list", kind="malformed")

        top: Dict[str, Any] = predictions[0] if predictions else {}
        if not isinstance(top, dict):
            raise ClassificationUpstreamError("Prediction entry is not an object", kind="malformed")

        disease = top.get("class") or HEALTHY_LABEL
        confidence = _to_percentage(top.get("confidence"))

        return ClassificationResult(disease=str(disease), confidence=confidence)


def _to_percentage(value):
    """Convert a 0-1 confidence fraction to a rounded percentage, or N/A."""
    if value is None or isinstance(value, bool):
        return CONFIDENCE_UNAVAILABLE
    try:
        fraction = float(value)
    except (TypeError, ValueError):
        return CONFIDENCE_UNAVAILABLE
    if not math.isfinite(fraction):
        return CONFIDENCE_UNAVAILABLE
    return min(100, max(0, round_half_up(fraction * 100)))
