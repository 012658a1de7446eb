"""Settings for the upstream text-generation service.

``ServiceConfig`` is read once from the environment (or a ``.env``
file) when the application is created.  The API key and the project
identifier have no defaults: a missing or blank value raises a
``ValidationError`` so the process never reaches a servable state
without credentials.
"""

from __future__ import annotations

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

DEFAULT_BASE_URL = "https://us-south.ml.cloud.ibm.com"
DEFAULT_IAM_URL = "https://iam.cloud.ibm.com/identity/token"
DEFAULT_MODEL_ID = "ibm/granite-13b-chat-v2"
DEFAULT_API_VERSION = "2023-05-29"


class ServiceConfig(BaseSettings):
    """Credentials, endpoint and project scope for inference calls."""

    api_key: SecretStr = Field(..., alias="WATSONX_APIKEY")
    base_url: str = Field(DEFAULT_BASE_URL, alias="WATSONX_URL")
    project_id: str = Field(..., alias="WATSONX_PROJECT_ID")
    model_id: str = Field(DEFAULT_MODEL_ID, alias="WATSONX_MODEL_ID")
    iam_url: str = Field(DEFAULT_IAM_URL, alias="WATSONX_IAM_URL")
    api_version: str = Field(DEFAULT_API_VERSION, alias="WATSONX_API_VERSION")
    request_timeout: float = Field(30.0, alias="WATSONX_TIMEOUT")
    cors_allow_origins: str = Field("*", alias="CORS_ALLOW_ORIGINS")

    @field_validator("project_id")
    @classmethod
    def validate_required(cls, value: str, info: ValidationInfo) -> str:
        value = value.strip()
        if not value:
            raise ValueError(f"{info.field_name} must not be empty")
        return value

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, value: SecretStr) -> SecretStr:
        secret = value.get_secret_value().strip()
        if not secret:
            raise ValueError("api_key must not be empty")
        return SecretStr(secret)

    @field_validator("base_url", "iam_url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError("Service URLs must start with http:// or https://")
        return value

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("WATSONX_TIMEOUT must be positive")
        return value

    @property
    def allowed_origins(self) -> list[str]:
        """Return the configured CORS origins as a list."""

        origins = [part.strip() for part in self.cors_allow_origins.split(",") if part.strip()]
        return origins or ["*"]

    @property
    def generation_url(self) -> str:
        return f"{self.base_url}/ml/v1/text/generation"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )


@lru_cache()
def get_service_config() -> ServiceConfig:
    """Return the cached service configuration for this process."""

    return ServiceConfig()  # type: ignore[call-arg]
