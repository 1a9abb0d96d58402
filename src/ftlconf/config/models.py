"""Settings of the ftlconf tool itself (not of the FTL engine)."""

from dataclasses import dataclass
from pathlib import Path

VALID_LEVELS = ("debug", "info", "warning", "error")
VALID_FORMATS = ("text", "json")


@dataclass
class LoggingConfig:
    """Configuration for the tool's own log output."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.level.lower() not in VALID_LEVELS:
            raise ValueError(f"level must be one of {VALID_LEVELS}, got {self.level}")
        if self.format.lower() not in VALID_FORMATS:
            raise ValueError(
                f"format must be one of {VALID_FORMATS}, got {self.format}"
            )
