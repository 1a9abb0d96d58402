"""Tests for the privacy level ratchet."""

from ftlconf.config.precedence import apply_privacy_ratchet
from ftlconf.config.registry import Registry
from ftlconf.config.types import PrivacyLevel


class TestPrivacyRatchet:
    """Tests for apply_privacy_ratchet()."""

    def test_lower_level_ignored(self, registry: Registry) -> None:
        """Should keep a higher current level."""
        item = registry.get_by_path("misc.privacylevel")
        item.set(PrivacyLevel(2))
        assert not apply_privacy_ratchet(item, 1)
        assert item.value == 2

    def test_equal_level_ignored(self, registry: Registry) -> None:
        """Should report no change for an equal level."""
        item = registry.get_by_path("misc.privacylevel")
        item.set(PrivacyLevel(2))
        assert not apply_privacy_ratchet(item, 2)

    def test_higher_level_applied(self, registry: Registry) -> None:
        """Should raise to a higher level."""
        item = registry.get_by_path("misc.privacylevel")
        item.set(PrivacyLevel(2))
        assert apply_privacy_ratchet(item, 3)
        assert item.value is PrivacyLevel.MAXIMUM
