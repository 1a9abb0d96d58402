"""Configuration item descriptor."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from ftlconf.config.exceptions import ConfigValueError
from ftlconf.config.types import ConfType, check_value

# Deepest nesting of a config item (e.g. dns.reply.host.IPv4)
MAX_PATH_DEPTH = 4


@dataclass
class ConfigItem:
    """One schema-described, typed configuration entry.

    The value always matches ``conf_type``. A freshly constructed item holds
    its default; ``set()`` refuses values of the wrong kind or outside
    ``bounds``.
    """

    path: tuple[str, ...]
    """Location in the structured document, e.g. ("dns", "blockingmode")."""

    conf_type: ConfType
    """Kind tag deciding the Python type of default and value."""

    default: Any
    """Value used whenever the item is absent or fails to parse."""

    help: str
    """Description of accepted values, repeated in warnings."""

    legacy_key: str | None = None
    """Key of the flat legacy document, if the item has one."""

    bounds: tuple[int, int] | None = None
    """Inclusive numeric range accepted by set()."""

    allowed: Callable[[Any], bool] | None = field(
        default=None, compare=False, repr=False
    )
    """Extra rule a value must pass, for ranges with holes."""

    value: Any = field(default=None, compare=False)

    def __post_init__(self) -> None:
        """Validate the declaration and initialize the value."""
        self.path = tuple(self.path)
        if not 1 <= len(self.path) <= MAX_PATH_DEPTH:
            raise ValueError(
                f"path depth of {'.'.join(self.path)} must be 1..{MAX_PATH_DEPTH}"
            )
        self._validate(self.default)
        self.value = self.default

    @property
    def key(self) -> str:
        """Dotted path of the item."""
        return ".".join(self.path)

    @property
    def leaf(self) -> str:
        """Last path segment (the key inside its table)."""
        return self.path[-1]

    @property
    def is_default(self) -> bool:
        return self.value == self.default

    def _validate(self, value: Any) -> None:
        if not check_value(self.conf_type, value):
            raise ConfigValueError(
                self.key, value, f"expected {self.conf_type.value}"
            )
        if self.bounds is not None:
            low, high = self.bounds
            if not low <= value <= high:
                raise ConfigValueError(
                    self.key, value, f"outside range [{low}, {high}]"
                )
        if self.allowed is not None and not self.allowed(value):
            raise ConfigValueError(self.key, value, "not an allowed value")

    def accepts(self, value: Any) -> bool:
        """Return True if ``set(value)`` would succeed."""
        try:
            self._validate(value)
        except ConfigValueError:
            return False
        return True

    def set(self, value: Any) -> None:
        """Replace the current value.

        Raises:
            ConfigValueError: If the value does not match the item's kind
                or bounds. The current value is left unchanged.
        """
        self._validate(value)
        self.value = value

    def reset(self) -> None:
        """Restore the default value."""
        self.value = self.default
