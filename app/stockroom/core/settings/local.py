from typing import Literal

from .base import Settings as BaseSettings


class Settings(BaseSettings):
    """Settings to use on a developer machine."""

    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DATABASE_ECHO: bool = False
