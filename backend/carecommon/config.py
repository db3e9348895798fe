"""Process settings via environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings loaded from environment variables (and .env)."""

    # Server
    DEBUG: bool = False
    LOG_LEVEL: str = "info"

    # Public API client
    PUBLIC_BASE_URI: str = ""
    HTTP_TIMEOUT_SECONDS: float = 30.0
    HTTP_MAX_CONNECTIONS: int = 10
    REQUEST_ID_HEADER: str = "X-Vela-Request-Id"

    # Landing/program configuration source
    CONFIG_SOURCE: Literal["json", "param_store", "none"] = "none"
    CONFIG_JSON_PATH: str = "./config.json"
    PARAM_STORE_PATH: str = "/carecommon/"
    AWS_REGION: str = "us-east-1"

    # Static assets
    STATIC_ROOT: str = ""
    STATIC_PATH_PREFIX: str = ""
    STATIC_INDEX_PAGE: str = "index.html"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
