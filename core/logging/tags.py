"""Standard logging tags for consistent log filtering.

Usage:
    from core.logging.tags import TAG_WATCHDOG
    logger.warning("%s Deadline missed, resyncing", TAG_WATCHDOG)
"""

TAG_ROTATION = "[ROTATION]"
"""Controller state transitions (start, navigation, deactivation)."""

TAG_WATCHDOG = "[WATCHDOG]"
"""Forced resyncs after a missed automatic advance. Highlighted on console."""

TAG_CHANNEL = "[CHANNEL]"
"""Sync channel delivery and subscription bookkeeping."""

TAG_HOST = "[HOST]"
"""Display surface host commands, progress and liveness probes."""
