"""
Configuration Management for tracker-core

Settings are read from the environment (and an optional `.env` file) through
pydantic-settings.
"""

from functools import lru_cache
from typing import Any, Dict

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..exceptions import ConfigurationError

STACK_KINDS = ("context", "memory")


class BaseTrackerSettings(BaseSettings):
    """Base class of every tracker-core settings group"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_assignment=True,
        extra="ignore",
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.validate_configuration()

    def validate_configuration(self) -> None:
        """Cross-field validation hook"""
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Settings as a dictionary"""
        return self.model_dump()


class LoggingSettings(BaseTrackerSettings):
    """Logging settings"""

    model_config = SettingsConfigDict(env_prefix="TRACKER_LOG_")

    level: str = Field(
        default="INFO",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Log level of the tracker_core logger tree",
    )
    format: str = Field(
        default="text",
        pattern=r"^(json|text)$",
        description="Log format (json or text)",
    )
    include_trace: bool = Field(
        default=False, description="Include tracebacks in structured records"
    )
    logger_name: str = Field(
        default="tracker_core", description="Root logger configured by configure_logging"
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class TrackerSettings(BaseTrackerSettings):
    """Invocation and promise tracking defaults"""

    model_config = SettingsConfigDict(env_prefix="TRACKER_")

    stack: str = Field(
        default="context",
        description="Default invocation stack: 'context' (contextvars) or 'memory'",
    )
    forget_on_rejection: bool = Field(
        default=False,
        description="Default eviction policy of promise vaults for rejected promises",
    )

    @field_validator("stack", mode="before")
    @classmethod
    def normalize_stack(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    def validate_configuration(self) -> None:
        if self.stack not in STACK_KINDS:
            raise ConfigurationError(
                "stack",
                expected_type=" or ".join(repr(kind) for kind in STACK_KINDS),
                actual_value=self.stack,
            )


class Settings(BaseTrackerSettings):
    """All tracker-core settings"""

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    tracker: TrackerSettings = Field(default_factory=TrackerSettings)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance"""
    return Settings()
