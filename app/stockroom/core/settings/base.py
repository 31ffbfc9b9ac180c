import warnings
from pathlib import Path
from typing import Annotated, Any, Literal, Self

from dotenv import load_dotenv
from pydantic import AnyUrl, BeforeValidator, PostgresDsn, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


def parse_cors(v: Any) -> list[str]:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list):
        return v
    elif isinstance(v, str):
        return [v]
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    BASE_DIR: str = str(Path(__file__).resolve().parent.parent.parent.parent)

    APP_NAME: str = "Stockroom"
    APP_DESCRIPTION: str = "Stock room inventory and supply request API"
    APP_VERSION: str = "0.1.0"
    DOMAIN: str = "localhost"
    PORT: str = "8000"
    V1_STR: str = "v1"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SERVER_URL(self) -> str:
        if self.ENVIRONMENT == "local":
            return f"http://{self.DOMAIN}:{self.PORT}"
        return f"https://{self.DOMAIN}"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def API_V1_STR(self) -> str:
        return f"/api/{self.V1_STR}"

    BACKEND_CORS_ORIGINS: Annotated[list[AnyUrl] | str, BeforeValidator(parse_cors)] = []

    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "stockroom"
    POSTGRES_PASSWORD: str = "changethis"
    POSTGRES_DB: str = "stockroom"

    # NOTE: Takes precedence over the POSTGRES_* settings when present
    DATABASE_URL: str | None = None
    DATABASE_ECHO: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL

        return str(
            PostgresDsn.build(
                scheme="postgresql+psycopg",
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD,
                host=self.POSTGRES_HOST,
                port=self.POSTGRES_PORT,
                path=self.POSTGRES_DB,
            )
        )

    TRANSACTION_MAX_ATTEMPTS: int = 5
    TRANSACTION_TIMEOUT_SECONDS: float = 10.0

    LIVE_QUERY_PROVIDER: Literal["memory"] = "memory"

    ACTOR_HEADER: str = "X-Stockroom-Actor"

    def _check_default_secret(self, var_name: str, value: str | None) -> None:
        if value == "changethis":
            message = (
                f'The value of {var_name} is "changethis", ' "for security, please change it, at least for deployments."
            )
            if self.ENVIRONMENT in ["local", "staging"]:
                warnings.warn(message, stacklevel=1)
            else:
                raise ValueError(message)

    @model_validator(mode="after")
    def _enforce_non_default_secrets(self) -> Self:
        if not self.DATABASE_URL:
            self._check_default_secret("POSTGRES_PASSWORD", self.POSTGRES_PASSWORD)

        return self

    @model_validator(mode="after")
    def _enforce_transaction_config(self) -> Self:
        if self.TRANSACTION_MAX_ATTEMPTS < 1:
            raise ValueError("TRANSACTION_MAX_ATTEMPTS must be at least 1")

        if self.TRANSACTION_TIMEOUT_SECONDS <= 0:
            raise ValueError("TRANSACTION_TIMEOUT_SECONDS must be positive")

        return self
