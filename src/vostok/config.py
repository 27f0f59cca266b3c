"""Configuration using pydantic-settings."""

from typing import Literal

from pydantic_settings import BaseSettings


class BrowserSettings(BaseSettings):
    """Browser configuration."""

    default_port: int = 1965
    max_redirects: int = 32
    timeout: float = 30.0
    trust_policy: Literal["pinned", "accept-all"] = "pinned"
    markup_mimetype: str = "text/gemini"
    log_level: str = "WARNING"

    model_config = {"env_prefix": "VOSTOK_"}


settings = BrowserSettings()
