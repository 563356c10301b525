"""Page rotation: state machine, countdown, watchdog and surface sync."""

from .controller import RotationController
from .display_host import DisplayHost, DisplaySurface
from .session_storage import SessionStorage
from .state import INACTIVE, RotationState, filter_blank_entries
from .sync_channel import ChannelEvent, HostCommand, SyncChannel, SyncEvent
from .watchdog import RotationWatchdog

__all__ = [
    'RotationController',
    'DisplayHost',
    'DisplaySurface',
    'SessionStorage',
    'INACTIVE',
    'RotationState',
    'filter_blank_entries',
    'ChannelEvent',
    'HostCommand',
    'SyncChannel',
    'SyncEvent',
    'RotationWatchdog',
]
