import logging
from enum import Enum
from functools import lru_cache

from pydantic import Field, PostgresDsn, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)


class JwtAlgorithm(str, Enum):
    """Signing algorithms accepted for bearer tokens.

    Only the HMAC family is allowed because the verifier is configured with a
    shared secret, not a key pair. The unsigned "none" algorithm is never accepted.
    """

    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        jwt_secret (str): Shared secret used to verify bearer tokens. Required.
        jwt_algorithm (JwtAlgorithm): Signing algorithm tokens must use. Required,
            and must be one of the `JwtAlgorithm` members.
        db_host, db_port, db_user, db_password, db_name: PostgreSQL connection parts.
        pool_size (int): Maximum number of pooled database connections.
        pool_timeout (float): Seconds to wait for a free pooled connection.
        query_timeout (float): Seconds a single statement may take, including the
            wait for a connection. Zero disables the limit.
        host (str): Interface the HTTP server binds to.
        port (int): Port the HTTP server listens on.
        powered_by (str): Value of the X-Powered-By header on every response.
        log_level (str): Root logging level used by the entry points.

    """

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    # Security settings
    jwt_secret: str = Field(min_length=1, validation_alias="API_JWT_SECRET")
    jwt_algorithm: JwtAlgorithm = Field(validation_alias="API_JWT_ALGORITHM")

    # Database settings
    db_host: str = Field(default="localhost", validation_alias="DATABASE_HOST")
    db_port: int = Field(default=5432, validation_alias="DATABASE_PORT")
    db_name: str = Field(default="resumes", validation_alias="DATABASE_NAME")
    db_user: str = Field(default="postgres", validation_alias="DATABASE_USERNAME")
    db_password: str = Field(default="", validation_alias="DATABASE_PASSWORD")

    pool_size: int = Field(default=5, ge=1, validation_alias="POOL_CONNECTIONS")
    pool_timeout: float = Field(default=30.0, gt=0, validation_alias="POOL_TIMEOUT")
    query_timeout: float = Field(default=30.0, ge=0, validation_alias="QUERY_TIMEOUT")

    @computed_field
    @property
    def database_url(self) -> PostgresDsn:
        """
        Assembled asyncpg database URL from components.

        Returns:
            PostgresDsn: The PostgreSQL connection URL using the asyncpg driver.

        Notes:
            1. The scheme is "postgresql+asyncpg" so SQLAlchemy builds an asyncio engine.
            2. An empty password is left out of the URL.

        """
        return PostgresDsn.build(
            scheme="postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            path=self.db_name,
        )

    # Server settings
    host: str = Field(default="0.0.0.0", validation_alias="SERVER_HOST")
    port: int = Field(default=8080, validation_alias="SERVER_PORT")
    powered_by: str = Field(default="resume-api", validation_alias="POWERED_BY")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


@lru_cache
def get_settings() -> Settings:
    """
    Get the global settings instance.

    Returns:
        Settings: The cached settings instance.

    Raises:
        ValidationError: If the JWT secret or algorithm is unset, the algorithm is
            not allow-listed, or any other value fails validation.

    Notes:
        1. Reads configuration from environment variables and the .env file.
        2. The instance is cached so the environment is parsed once per process.
        3. Startup fails on a validation error instead of falling back to an
           unsigned token mode.

    """
    _msg = "Loading application settings"
    log.debug(_msg)
    return Settings()
