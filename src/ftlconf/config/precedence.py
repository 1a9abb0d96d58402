"""Precedence rules between the structured and the legacy format.

The structured document is authoritative. Legacy values override on
presence when the legacy document seeds the registry, with one exception:
the privacy level only ever moves towards more privacy when it comes from a
lower-precedence source.
"""

from __future__ import annotations

import logging

from ftlconf.config.items import ConfigItem
from ftlconf.config.types import PrivacyLevel

logger = logging.getLogger(__name__)


def apply_privacy_ratchet(item: ConfigItem, level: int) -> bool:
    """Raise the privacy level, never lower it.

    Args:
        item: The ``misc.privacylevel`` item.
        level: Level read from a lower-precedence source.

    Returns:
        True if the item was changed.
    """
    if level <= item.value:
        logger.debug(
            "Keeping %s = %d (lower-precedence source has %d)",
            item.key,
            item.value,
            level,
        )
        return False
    item.set(PrivacyLevel(level))
    logger.info("Raised %s to %d", item.key, level)
    return True
