"""Unit tests for ConfigItem."""

import pytest

from ftlconf.config.exceptions import ConfigValueError
from ftlconf.config.items import ConfigItem
from ftlconf.config.types import BlockingMode, ConfType


def _item(**kwargs) -> ConfigItem:
    defaults = {
        "path": ("misc", "check", "shmem"),
        "conf_type": ConfType.UINT,
        "default": 90,
        "help": "Limit in percent",
        "bounds": (0, 100),
    }
    defaults.update(kwargs)
    return ConfigItem(**defaults)


class TestConfigItem:
    """Tests for ConfigItem construction and mutation."""

    def test_value_starts_at_default(self) -> None:
        """Should hold its default after construction."""
        item = _item()
        assert item.value == 90
        assert item.is_default

    def test_key_and_leaf(self) -> None:
        """Should expose dotted key and leaf name."""
        item = _item()
        assert item.key == "misc.check.shmem"
        assert item.leaf == "shmem"

    def test_list_path_is_normalized(self) -> None:
        """Should store the path as a tuple."""
        item = _item(
            path=["misc", "nice"], conf_type=ConfType.INT, default=-10, bounds=None
        )
        assert item.path == ("misc", "nice")

    def test_path_too_deep(self) -> None:
        """Should reject paths deeper than four segments."""
        with pytest.raises(ValueError, match="path depth"):
            _item(path=("a", "b", "c", "d", "e"))

    def test_empty_path(self) -> None:
        """Should reject an empty path."""
        with pytest.raises(ValueError, match="path depth"):
            _item(path=())

    def test_default_of_wrong_kind(self) -> None:
        """Should reject a default that does not match the kind."""
        with pytest.raises(ConfigValueError):
            _item(default="90")

    def test_default_out_of_bounds(self) -> None:
        """Should reject a default outside the bounds."""
        with pytest.raises(ConfigValueError, match="outside range"):
            _item(default=101)

    def test_set_valid(self) -> None:
        """Should replace the value."""
        item = _item()
        item.set(50)
        assert item.value == 50
        assert not item.is_default

    def test_set_invalid_keeps_value(self) -> None:
        """Should raise and leave the value unchanged."""
        item = _item()
        item.set(50)
        with pytest.raises(ConfigValueError) as exc_info:
            item.set(150)
        assert item.value == 50
        assert exc_info.value.key == "misc.check.shmem"
        assert exc_info.value.value == 150

    def test_set_wrong_type(self) -> None:
        """Should refuse values of another kind."""
        item = _item(
            path=("dns", "blockingmode"),
            conf_type=ConfType.ENUM_BLOCKING_MODE,
            default=BlockingMode.IP,
            bounds=None,
        )
        with pytest.raises(ConfigValueError):
            item.set("NX")
        item.set(BlockingMode.NX)
        assert item.value is BlockingMode.NX

    def test_accepts(self) -> None:
        """Should report whether set() would succeed."""
        item = _item()
        assert item.accepts(0)
        assert item.accepts(100)
        assert not item.accepts(-1)
        assert not item.accepts(True)

    def test_reset(self) -> None:
        """Should restore the default."""
        item = _item()
        item.set(10)
        item.reset()
        assert item.value == 90

    def test_config_value_error_is_value_error(self) -> None:
        """Should be catchable as ValueError."""
        item = _item()
        with pytest.raises(ValueError):
            item.set(-5)

    def test_allowed_rule(self) -> None:
        """Should apply the extra rule on top of the type check."""
        item = _item(
            path=("misc", "nice"),
            conf_type=ConfType.INT,
            default=-10,
            bounds=None,
            allowed=lambda v: -20 <= v <= 19 or v == -999,
        )
        assert item.accepts(-999)
        assert not item.accepts(-500)
        with pytest.raises(ConfigValueError):
            item.set(-21)
        assert item.value == -10
