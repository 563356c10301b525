"""Timing constants for the kiosk rotator.

All timing values are in milliseconds unless otherwise noted. Settings
keys in core.settings override most of these at runtime.
"""

# =============================================================================
# Controller Timing
# =============================================================================

CLOCK_TICK_INTERVAL_MS = 16
"""Display refresh tick for the countdown (~60 updates per second)."""

WATCHDOG_INTERVAL_MS = 100
"""How often the watchdog checks that the deadline was honored."""

WATCHDOG_GRACE_MS = 1000
"""Time past the deadline before the watchdog forces a resync."""

DEFAULT_ROTATION_INTERVAL_S = 30
"""Page interval used by the bootstrap when none is given."""

# =============================================================================
# Display Surface Host Timing
# =============================================================================

HOST_PROGRESS_POLL_MS = 100
"""Polling period of the surface-side page progress tracker."""

HOST_LIVENESS_INTERVAL_MS = 5000
"""Period between liveness probes of the display surface."""

HOST_LIVENESS_TIMEOUT_MS = 5000
"""Time the surface has to answer a liveness probe."""

PROGRESS_COMPLETE_PERCENT = 100
"""Progress value at which the surface requests the next page."""

__all__ = [
    "CLOCK_TICK_INTERVAL_MS",
    "WATCHDOG_INTERVAL_MS",
    "WATCHDOG_GRACE_MS",
    "DEFAULT_ROTATION_INTERVAL_S",
    "HOST_PROGRESS_POLL_MS",
    "HOST_LIVENESS_INTERVAL_MS",
    "HOST_LIVENESS_TIMEOUT_MS",
    "PROGRESS_COMPLETE_PERCENT",
]
