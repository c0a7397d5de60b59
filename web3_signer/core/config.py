"""
Configuration management for the web3 signer service
Uses pydantic-settings for environment variable loading and validation
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_name: str = Field(default="web3-signer-service")
    version: str = Field(default="1.0.0")
    environment: str = Field(default="development")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)

    # API
    api_prefix: str = Field(default="/api/v1")
    frontend_url: str = Field(
        default="http://localhost:5173",
        description="Comma-separated list of origins allowed by CORS",
    )

    # MFA / TOTP
    mfa_issuer: str = Field(default="Web3 Signer", description="Issuer name shown in authenticator apps")
    mfa_valid_window: int = Field(
        default=2,
        description="Accept codes from this many 30s steps before/after the current one",
    )
    mfa_interval_seconds: int = Field(default=30)
    mfa_digits: int = Field(default=6)

    # MFA storage
    mfa_store_backend: str = Field(default="memory", description="memory | redis")
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_key_prefix: str = Field(default="mfa:")

    # Rate limiting
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_default: str = Field(default="100/minute")
    rate_limit_mfa_verify: str = Field(default="10/minute")

    # Logging
    log_level: str = Field(default="INFO")
    log_dir: Optional[str] = Field(default=None, description="Enables a rotating file sink when set")

    # Security headers (on in production unless set explicitly)
    security_headers_enabled: Optional[bool] = Field(default=None)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        env = v.strip().lower()
        allowed = ("development", "test", "staging", "production")
        if env not in allowed:
            raise ValueError(f"environment must be one of {allowed}, got '{v}'")
        return env

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()

    @field_validator("mfa_store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        backend = v.strip().lower()
        if backend not in ("memory", "redis"):
            raise ValueError(f"mfa_store_backend must be 'memory' or 'redis', got '{v}'")
        return backend

    @field_validator("mfa_valid_window")
    @classmethod
    def validate_window(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"mfa_valid_window must not be negative, got {v}")
        return v

    @field_validator("mfa_interval_seconds", "port")
    @classmethod
    def validate_positive_integers(cls, v: int, info) -> int:
        """Ensure positive integer values"""
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive, got {v}")
        return v

    @field_validator("mfa_digits")
    @classmethod
    def validate_digits(cls, v: int) -> int:
        if not (6 <= v <= 8):
            raise ValueError(f"mfa_digits must be between 6 and 8, got {v}")
        return v

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: str) -> str:
        """Ensure Redis URL uses a redis scheme"""
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError(f"redis_url must start with 'redis://', 'rediss://' or 'unix://', got '{v}'")
        return v

    @property
    def cors_origins(self) -> List[str]:
        """Parse comma-separated frontend_url to list"""
        return [origin.strip() for origin in self.frontend_url.split(",") if origin.strip()]

    @property
    def security_headers_active(self) -> bool:
        if self.security_headers_enabled is not None:
            return self.security_headers_enabled
        return self.environment == "production"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    return Settings()
