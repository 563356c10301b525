"""
Settings manager for the kiosk rotator.

QSettings-backed store for the timing knobs of the controller, the watchdog
and the display host. The rotation list itself never lands here; see
rotation.session_storage.
"""
from typing import Any, Callable, Dict, List
import threading
from PySide6.QtCore import QSettings, QObject, Signal
from core.constants import timing
from core.logging.logger import get_logger, is_verbose_logging

logger = get_logger('SettingsManager')


DEFAULT_SETTINGS: Dict[str, Any] = {
    # Controller
    'timing.clock_tick_ms': timing.CLOCK_TICK_INTERVAL_MS,
    'timing.watchdog_interval_ms': timing.WATCHDOG_INTERVAL_MS,
    'timing.watchdog_grace_ms': timing.WATCHDOG_GRACE_MS,

    # Display surface host
    'host.progress_poll_ms': timing.HOST_PROGRESS_POLL_MS,
    'host.liveness_interval_ms': timing.HOST_LIVENESS_INTERVAL_MS,
    'host.liveness_timeout_ms': timing.HOST_LIVENESS_TIMEOUT_MS,

    # Bootstrap
    'rotation.interval_s': timing.DEFAULT_ROTATION_INTERVAL_S,
}


class SettingsManager(QObject):
    """
    Dotted-key settings scoped by organization/application.

    Missing keys are seeded from DEFAULT_SETTINGS on construction; values the
    user already has are left alone. Writers are serialized with a lock and
    every write is announced through ``settings_changed`` and any handlers
    registered with ``on_changed``.
    """

    settings_changed = Signal(str, object)  # key, new_value

    def __init__(self, organization: str = "KioskRotator",
                 application: str = "Rotator"):
        super().__init__()
        self._settings = QSettings(organization, application)
        self._organization = organization
        self._application = application
        self._lock = threading.RLock()
        self._change_handlers: Dict[str, List[Callable]] = {}

        self._seed_defaults()
        logger.info("SettingsManager initialized (%s/%s)", organization, application)

    def _seed_defaults(self) -> None:
        with self._lock:
            for key, value in DEFAULT_SETTINGS.items():
                if not self._settings.contains(key):
                    self._settings.setValue(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        """Raw stored value for ``key`` (may be a string on INI backends)."""
        with self._lock:
            return self._settings.value(key, default)

    @staticmethod
    def to_int(value: Any, default: int = 0, minimum: int | None = None) -> int:
        """Normalize a stored value to int.

        QSettings hands back strings on some backends, so every numeric
        setting passes through here. Unparseable values and values below
        ``minimum`` yield ``default``.
        """
        if isinstance(value, bool):
            return default
        try:
            result = int(float(value))
        except (TypeError, ValueError):
            return default
        if minimum is not None and result < minimum:
            return default
        return result

    def get_int(self, key: str, default: int = 0, minimum: int | None = 0) -> int:
        return self.to_int(self.get(key, default), default, minimum)

    def get_application_name(self) -> str:
        return self._application

    def get_organization_name(self) -> str:
        return self._organization

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` and notify listeners with (new, old)."""
        with self._lock:
            old_value = self._settings.value(key)
            self._settings.setValue(key, value)

            self.settings_changed.emit(key, value)

            for handler in self._change_handlers.get(key, []):
                try:
                    handler(value, old_value)
                except Exception as e:
                    logger.error(f"Error in change handler for {key}: {e}", exc_info=True)

        if is_verbose_logging():
            logger.debug("Setting changed: %s: %r -> %r", key, old_value, value)
        else:
            logger.debug("Setting changed: %s", key)

    def on_changed(self, key: str, handler: Callable[[Any, Any], None]) -> None:
        """Call ``handler(new_value, old_value)`` whenever ``key`` is set."""
        with self._lock:
            self._change_handlers.setdefault(key, []).append(handler)

        logger.debug(f"Registered change handler for {key}")

    def reset_to_defaults(self) -> None:
        """Drop every stored value and re-seed the defaults."""
        with self._lock:
            self._settings.clear()
            for key, value in DEFAULT_SETTINGS.items():
                self._settings.setValue(key, value)
            self._settings.sync()

        logger.info("Settings reset to defaults")
        self.settings_changed.emit('*', None)

    def get_all_keys(self) -> List[str]:
        with self._lock:
            return self._settings.allKeys()

    def contains(self, key: str) -> bool:
        with self._lock:
            return self._settings.contains(key)

    def remove(self, key: str) -> None:
        with self._lock:
            self._settings.remove(key)
        logger.debug(f"Removed setting: {key}")

    def clear(self) -> None:
        """Remove every key, defaults included."""
        with self._lock:
            self._settings.clear()
        logger.warning("All settings cleared")
