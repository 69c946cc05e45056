"""
Shared fixtures: settings, fake upstream services and a test client.
"""
import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from kawogo_api.config import Settings
from kawogo_api.dependencies import get_advice_service, get_classification_service
from kawogo_api.exceptions import AdviceUpstreamError
from kawogo_api.main import create_app
from kawogo_api.models.analysis import ClassificationResult


class FakeClassifier:
    """Stands in for ClassificationService; records every call."""

    def __init__(self, disease="CMD", confidence=87, error=None, configured=True):
        self.disease = disease
        self.confidence = confidence
        self.error = error
        self.configured = configured
        self.calls = []

    async def classify(self, image_bytes):
        self.calls.append(image_bytes)
        if self.error is not None:
            raise self.error
        return ClassificationResult(disease=self.disease, confidence=self.confidence)


class FakeAdvisor:
    """Stands in for AdviceService; records every call."""

    def __init__(self, advice="Generated advice.", error=None):
        self.advice = advice
        self.error = error
        self.calls = []

    async def get_advice(self, disease_code):
        self.calls.append(disease_code)
        if self.error is not None:
            raise self.error
        return self.advice


@pytest.fixture
def settings():
    return Settings(
        roboflow_api="https://classify.example.test/cassava/1?api_key=test",
        gemini_api_key="gemini-test-key",
        environment="production",
    )


@pytest.fixture
def classifier():
    return FakeClassifier()


@pytest.fixture
def advisor():
    return FakeAdvisor()


@pytest.fixture
def failing_advisor():
    return FakeAdvisor(error=AdviceUpstreamError("Gemini API error: 500"))


@pytest.fixture
def make_client(settings, classifier, advisor):
    """Build a TestClient whose upstream services are the given fakes."""

    def _make(settings=settings, classifier=classifier, advisor=advisor, overrides=None,
              raise_server_exceptions=True):
        app = create_app(settings)
        app.dependency_overrides[get_classification_service] = lambda: classifier
        app.dependency_overrides[get_advice_service] = lambda: advisor
        app.dependency_overrides.update(overrides or {})
        return TestClient(app, raise_server_exceptions=raise_server_exceptions)

    return _make


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def leaf_image():
    return ("leaf.jpg", b"\xff\xd8\xff\xe0fake-jpeg-bytes", "image/jpeg")


@pytest.fixture
async def trickling_server():
    """
    Start local HTTP servers that send a JSON body a few bytes at a time.

    Each chunk arrives well inside httpx's per-read timeout, so only a
    bound on the whole call can stop the request.
    """
    servers = []
    handlers = set()

    async def start(payload, chunk_size=10, delay=0.3):
        body = json.dumps(payload).encode("utf-8")

        async def handle(reader, writer):
            handlers.add(asyncio.current_task())
            try:
                await reader.readuntil(b"\r\n\r\n")
                writer.write(
                    b"HTTP/1.1 200 OK\r\n"
                    b"Content-Type: application/json\r\n"
                    + f"Content-Length: {len(body)}\r\n\r\n".encode("ascii")
                )
                for start_at in range(0, len(body), chunk_size):
                    writer.write(body[start_at:start_at + chunk_size])
                    await writer.drain()
                    await asyncio.sleep(delay)
            except (ConnectionError, asyncio.IncompleteReadError):
                pass
            finally:
                writer.close()

        server = await asyncio.start_server(handle, "127.0.0.1", 0)
        servers.append(server)
        port = server.sockets[0].getsockname()[1]
        return f"http://127.0.0.1:{port}"

    yield start

    for task in handlers:
        task.cancel()
    await asyncio.gather(*handlers, return_exceptions=True)
    for server in servers:
        server.close()
