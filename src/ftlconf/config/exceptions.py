"""Exception hierarchy for configuration loading and validation."""


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class ConfigValueError(ConfigError, ValueError):
    """A value does not match the kind or bounds of its config item."""

    def __init__(self, key: str, value: object, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"{key}: invalid value {value!r} ({reason})")


class TomlParseError(ConfigError):
    """The structured document could not be parsed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class ConfigLoadError(ConfigError):
    """No configuration document could be applied when one was required."""

    pass


class ScannerClosedError(ConfigError):
    """A lookup was attempted on a legacy scanner that has been closed."""

    pass
