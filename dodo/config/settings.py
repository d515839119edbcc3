from pathlib import Path
from typing import Literal, Optional
from urllib.parse import quote_plus

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_ROOT = Path(__file__).resolve().parents[1]


def _is_blank(secret: SecretStr | None) -> bool:
    return secret is None or not secret.get_secret_value().strip()


class DatabaseConfig(BaseSettings):
    """Database configuration"""

    host: str = "localhost"
    port: int = 5432
    username: str = "postgres"
    password: SecretStr = Field(default=SecretStr("postgres"))
    database: str = "dodo"
    dsn: Optional[str] = Field(
        default=None,
        description="Full SQLAlchemy URL; overrides the host/port/credentials fields.",
    )
    serverless: bool = Field(
        default=True,
        description="If true, disable connection pooling so serverless DBs can pause.",
    )

    @property
    def url(self) -> str:
        """Get database URL"""
        if self.dsn:
            return self.dsn
        username = quote_plus(self.username)
        password = quote_plus(self.password.get_secret_value())
        return (
            "postgresql+asyncpg://"
            f"{username}:{password}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class S3Config(BaseSettings):
    """S3 configuration"""

    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: str = "us-east-1"
    bucket_name: Optional[str] = None
    endpoint_url: Optional[str] = None
    public_base_url: Optional[str] = None
    signed_url_ttl_seconds: int = Field(default=3600 * 24 * 7, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class ElevenLabsConfig(BaseSettings):
    """Voice cloning and speech synthesis provider configuration."""

    api_key: SecretStr | None = None
    base_url: str = "https://api.elevenlabs.io/v1"
    model_id: str = "eleven_multilingual_v2"
    stability: float = Field(default=0.5, ge=0.0, le=1.0)
    similarity_boost: float = Field(default=0.75, ge=0.0, le=1.0)
    clone_timeout_seconds: float = Field(default=120.0, gt=0)
    request_timeout_seconds: float = Field(default=60.0, gt=0)
    voice_name_prefix: str = "DODO Voice"
    reuse_voice_id: Optional[str] = Field(
        default=None,
        description="Assign this existing voice identity instead of cloning a new one.",
    )

    model_config = SettingsConfigDict(
        env_prefix="ELEVENLABS_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class SunoConfig(BaseSettings):
    """Music generation provider configuration."""

    api_key: SecretStr | None = None
    base_url: str = "https://api.sunoapi.org"
    model: str = "V4_5ALL"
    callback_url: str = "https://api.example.com/callback"
    generate_path: str = "/api/v1/generate"
    status_paths: list[str] = [
        "/api/v1/generate/record-info?taskId={job_id}",
        "/api/v1/get/{job_id}",
        "/api/v1/task/{job_id}",
        "/api/v1/status/{job_id}",
        "/api/v1/music/{job_id}",
        "/get/{job_id}",
    ]
    cover_paths: list[str] = [
        "/api/v1/generate/upload-cover",
        "/api/v1/upload-cover",
        "/api/v1/cover",
        "/api/v1/generate/upload-and-cover",
    ]
    submit_timeout_seconds: float = Field(default=30.0, gt=0)
    status_timeout_seconds: float = Field(default=10.0, gt=0)
    upload_timeout_seconds: float = Field(default=60.0, gt=0)
    download_timeout_seconds: float = Field(default=60.0, gt=0)
    max_duration_minutes: float = Field(default=8.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="SUNO_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class GenerationConfig(BaseSettings):
    """Background lullaby generation tuning."""

    mode: Literal["cover", "persona"] = "cover"
    poll_interval_seconds: float = Field(default=5.0, ge=0)
    poll_max_attempts: int = Field(default=60, ge=1)
    poll_max_consecutive_errors: int = Field(default=10, ge=1)
    poll_rounds: int = Field(
        default=2,
        ge=1,
        description="Polling rounds allowed while a provider job reports still pending.",
    )
    resume_on_startup: bool = True
    shutdown_grace_seconds: float = Field(
        default=30.0,
        ge=0,
        description="How long shutdown waits for running pipelines before cancelling them.",
    )

    model_config = SettingsConfigDict(
        env_prefix="GENERATION_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class FallbackConfig(BaseSettings):
    """Deterministic fallback audio source."""

    asset_path: str = str(_PACKAGE_ROOT / "resources" / "sample-lullaby.wav")
    url: Optional[str] = None
    timeout_seconds: float = Field(default=30.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="FALLBACK_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "DODO Lullaby Backend"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 4000
    log_file: str = "logs/app.log"
    generation_log_file: str = "logs/generation.log"

    # Database
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    # S3
    s3: S3Config = Field(default_factory=S3Config)

    # Providers
    elevenlabs: ElevenLabsConfig = Field(default_factory=ElevenLabsConfig)
    suno: SunoConfig = Field(default_factory=SunoConfig)

    # Generation pipeline
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    fallback: FallbackConfig = Field(default_factory=FallbackConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    def missing_required(self) -> list[str]:
        """Return the environment variables that must be set before startup."""

        missing: list[str] = []
        if _is_blank(self.elevenlabs.api_key):
            missing.append("ELEVENLABS_API_KEY")
        if _is_blank(self.suno.api_key):
            missing.append("SUNO_API_KEY")
        if not (self.s3.bucket_name or "").strip():
            missing.append("S3_BUCKET_NAME")
        return missing


# Global settings instance
settings = Settings()
