"""Settings model for session trace aggregation.

Contract:
- Inputs: Environment variables, YAML files
- Outputs: Validated settings objects
- Side Effects: None (read-only)
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class TraceSettings(BaseSettings):
    """Configuration for session trace aggregation.

    Attributes:
        log_level: Logging level for the CLI (default: info)
        max_output_length: Truncate call outputs beyond this length (None disables)
        input_summary_length: Maximum length of call input summaries (default: 40)
        max_steps_per_agent: Render at most this many recent steps per agent (None = all)

    Example:
        >>> settings = TraceSettings()
        >>> assert settings.input_summary_length == 40
        >>> assert settings.max_steps_per_agent is None
    """

    model_config = SettingsConfigDict(
        env_prefix="SESSION_TRACE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = "info"
    max_output_length: int | None = 10_000
    input_summary_length: int = 40
    max_steps_per_agent: int | None = None

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.lower()

    @field_validator("max_output_length", "max_steps_per_agent")
    @classmethod
    def non_negative_limit(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            raise ValueError("limits must be non-negative")
        return v

    @field_validator("input_summary_length")
    @classmethod
    def positive_summary_length(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("input_summary_length must be positive")
        return v
