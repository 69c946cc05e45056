"""
Kawogo Care API Client
Uploads leaf images to the analysis endpoint and reads back the result
"""

import mimetypes
import os
from typing import Any, Dict, Optional

import requests

from src.utils.logger import get_logger


DEFAULT_BASE_URL = "http://localhost:5000"


class AnalysisRequestError(Exception):
    """Raised when the server answers with an error or cannot be reached"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class KawogoClient:
    """
    Client for the Kawogo Care server
    Sends one multipart upload per analysis
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 60, session=None, logger=None):
        """
        Initialize API client

        Args:
            base_url: Server base URL
            timeout: Request timeout in seconds (covers both upstream calls)
            session: Optional requests.Session
            logger: Logger instance
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logger or get_logger()

    def analyze(self, image_path: str) -> Dict[str, Any]:
        """
        Upload an image for analysis

        Args:
            image_path: Path to the image file

        Returns:
            Dictionary with disease, confidence and advice

        Raises:
            AnalysisRequestError: If the server returns an error
        """
        filename = os.path.basename(image_path)
        content_type = mimetypes.guess_type(filename)[0] or 'application/octet-stream'

        with open(image_path, 'rb') as f:
            files = {'image': (filename, f, content_type)}
            self.logger.debug(f"Uploading {filename} ({content_type}) to {self.base_url}/api/analyze")
            response = self._request('post', '/api/analyze', files=files)

        return response

    def health(self) -> Dict[str, Any]:
        """
        Fetch server health

        Returns:
            Health payload
        """
        return self._request('get', '/api/health')

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        """
        Make a request and decode the JSON body

        Raises:
            AnalysisRequestError: On connection failure, timeout or error status
        """
        url = f"{self.base_url}{path}"

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)

        except requests.exceptions.Timeout:
            raise AnalysisRequestError(f"Request to {url} timed out")

        except requests.exceptions.ConnectionError as e:
            raise AnalysisRequestError(f"Could not connect to {self.base_url}: {e}")

        if not response.ok:
            raise AnalysisRequestError(self._error_message(response), response.status_code)

        try:
            return response.json()
        except ValueError:
            raise AnalysisRequestError("Server returned an invalid response", response.status_code)

    @staticmethod
    def _error_message(response) -> str:
        """Extract the server's error text, falling back to the raw body"""
        try:
            data = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"

        if isinstance(data, dict) and data.get('error'):
            message = data['error']
            if data.get('details'):
                message = f"{message}: {data['details']}"
            return message

        return response.text or f"HTTP {response.status_code}"


def format_result(result: Dict[str, Any]) -> str:
    """
    Render an analysis result for display

    Args:
        result: Analysis response

    Returns:
        Two-line summary: detection and advice
    """
    confidence = result.get('confidence')
    if isinstance(confidence, (int, float)):
        confidence_text = f"{confidence}%"
    else:
        confidence_text = str(confidence)

    return (
        f"{result.get('disease')} detected with {confidence_text} confidence.\n"
        f"{result.get('advice')}"
    )
