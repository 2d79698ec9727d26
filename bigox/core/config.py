"""
Configuration settings for BigOX
"""
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings"""

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_JSON: bool = Field(default=False)

    # Container lifetimes
    DEFAULT_HANDLER_LIFETIME: str = Field(default="transient")
    INFRASTRUCTURE_LIFETIME: str = Field(default="transient")

    # Transactions
    TRANSACTION_ISOLATION_LEVEL: str = Field(default="read_committed")
    TRANSACTION_TIMEOUT_SECONDS: float = Field(default=0.0)  # 0 = maximum timeout

    # Authorization
    AUTHORIZATION_NO_RULES_BEHAVIOR: str = Field(default="error")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("DEFAULT_HANDLER_LIFETIME", "INFRASTRUCTURE_LIFETIME")
    @classmethod
    def validate_lifetime(cls, v: str) -> str:
        lifetime = v.lower()
        if lifetime not in {"singleton", "scoped", "transient"}:
            raise ValueError(f"Unknown lifetime: {v}")
        return lifetime

    @field_validator("TRANSACTION_ISOLATION_LEVEL")
    @classmethod
    def validate_isolation_level(cls, v: str) -> str:
        level = v.lower()
        allowed = {
            "serializable",
            "repeatable_read",
            "read_committed",
            "read_uncommitted",
            "snapshot",
            "chaos",
            "unspecified",
        }
        if level not in allowed:
            raise ValueError(f"Unknown isolation level: {v}")
        return level

    @field_validator("TRANSACTION_TIMEOUT_SECONDS")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v < 0:
            raise ValueError("TRANSACTION_TIMEOUT_SECONDS cannot be negative")
        return v

    @field_validator("AUTHORIZATION_NO_RULES_BEHAVIOR")
    @classmethod
    def validate_no_rules_behavior(cls, v: str) -> str:
        behavior = v.lower()
        if behavior not in {"allow", "deny", "error"}:
            raise ValueError(f"Unknown no-rules behavior: {v}")
        return behavior

    model_config = SettingsConfigDict(
        env_prefix="BIGOX_",
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
