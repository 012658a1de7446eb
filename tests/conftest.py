import os
import sys

import httpx
import pytest

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from src.config.app_config import get_app_config  # noqa: E402
from src.config.service_config import ServiceConfig, get_service_config  # noqa: E402
from src.services.inference_client import InferenceClient  # noqa: E402

CONFIG_ENV_VARS = (
    "WATSONX_APIKEY",
    "WATSONX_URL",
    "WATSONX_PROJECT_ID",
    "WATSONX_MODEL_ID",
    "WATSONX_IAM_URL",
    "WATSONX_API_VERSION",
    "WATSONX_TIMEOUT",
    "CORS_ALLOW_ORIGINS",
    "APP_ENV",
    "APP_DEBUG",
    "APP_HOST",
    "APP_PORT",
    "LOG_LEVEL",
    "LOG_FILE",
)

TOKEN_PATH = "/identity/token"
GENERATION_PATH = "/ml/v1/text/generation"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch):
    """Isolate every test from the developer's shell and cached settings."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_service_config.cache_clear()
    get_app_config.cache_clear()
    yield
    get_service_config.cache_clear()
    get_app_config.cache_clear()


@pytest.fixture
def service_config() -> ServiceConfig:
    return ServiceConfig(api_key="test-key", project_id="test-project", _env_file=None)


class UpstreamStub:
    """Fake token and generation endpoints behind an ``httpx.MockTransport``."""

    def __init__(self, generation_handler=None, token_response=None):
        self.generation_handler = generation_handler or (
            lambda request: httpx.Response(200, json={"results": [{"generated_text": "ok"}]})
        )
        self.token_response = token_response or (
            lambda request: httpx.Response(200, json={"access_token": "tok-1", "expires_in": 3600})
        )
        self.token_requests: list[httpx.Request] = []
        self.generation_requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == TOKEN_PATH:
            self.token_requests.append(request)
            return self.token_response(request)
        self.generation_requests.append(request)
        response = self.generation_handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    def client_for(self, config: ServiceConfig) -> InferenceClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(self))
        return InferenceClient(config, http_client=http_client)


@pytest.fixture
def upstream() -> UpstreamStub:
    return UpstreamStub()
