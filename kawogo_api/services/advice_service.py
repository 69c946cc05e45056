"""
Async client for Gemini treatment advice.
"""
import asyncio
from typing import Any, Dict, Optional

import httpx

from kawogo_api.exceptions import AdviceUpstreamError
from kawogo_api.services.disease_service import DISEASE_NAMES
from src.utils.logger import get_logger


PROMPT_TEMPLATE = """You are an agricultural assistant focusing on cassava.
Always interpret abbreviations as cassava-related diseases only:

{abbreviations}

Now, explain the disease {code} in simple language for farmers in 2-3 sentences:
1) Symptoms
2) Treatment or management practices"""


def build_prompt(disease_code: str) -> str:
    """Build the farmer-facing advice prompt for a disease code."""
    abbreviations = "\n".join(
        f"- {code} = {name}" for code, name in DISEASE_NAMES.items()
    )
    return PROMPT_TEMPLATE.format(abbreviations=abbreviations, code=disease_code)


class AdviceService:
    """
    Asks the text-generation model for treatment advice.

    Every failure raises AdviceUpstreamError; callers decide what to
    substitute.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-1.5-flash-latest",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger=None
    ):
        """
        Initialize advice service.

        Args:
            api_key: Gemini API key
            model: Gemini model name
            base_url: Generative Language API base URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
            logger: Logger instance
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.logger = logger or get_logger()

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def get_advice(self, disease_code: str) -> str:
        """
        Generate advice for a disease code.

        Args:
            disease_code: Disease abbreviation from the classifier

        Returns:
            Advice text (never empty)

        Raises:
            AdviceUpstreamError: On missing key, transport failure, non-2xx
                status or an unexpected response shape
        """
        if not self.configured:
            raise AdviceUpstreamError("Gemini API key not set")

        body = {"contents": [{"parts": [{"text": build_prompt(disease_code)}]}]}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                # httpx timeouts apply per read; wait_for bounds the whole call
                response = await asyncio.wait_for(
                    client.post(
                        self.endpoint,
                        params={"key": self.api_key},
                        json=body,
                        headers={"Content-Type": "application/json"},
                    ),
                    timeout=self.timeout
                )

        except (httpx.TimeoutException, asyncio.TimeoutError):
            raise AdviceUpstreamError(f"Gemini request timed out after {self.timeout}s")

        except httpx.HTTPError as e:
            raise AdviceUpstreamError(f"Gemini request failed: {str(e)}")

        if not response.is_success:
            raise AdviceUpstreamError(
                f"Gemini API error: {response.status_code} - {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError:
            raise AdviceUpstreamError("Gemini response is not valid JSON")

        return self.parse_response(data)

    @staticmethod
    def parse_response(data: Dict[str, Any]) -> str:
        """
        Extract the first candidate's text.

        Args:
            data: Decoded generateContent response

        Returns:
            Advice text as generated

        Raises:
            AdviceUpstreamError: If the text is missing or empty
        """
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise AdviceUpstreamError("Unexpected Gemini response format")

        if not isinstance(text, str) or not text.strip():
            raise AdviceUpstreamError("Gemini returned empty advice")

        return text
