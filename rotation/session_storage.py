"""
Session-scoped key/value storage.

Values live in an INI file unique to the running process and are removed on
``clear()``, so nothing survives the session. The rotation core only writes
here; reading back is left to whoever pre-fills the operator form.
"""
from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional

from PySide6.QtCore import QSettings

from core.logging.logger import get_logger

logger = get_logger(__name__)

URLS_KEY = "urls"


class SessionStorage:
    """Opaque string values keyed by name, scoped to one session."""

    def __init__(self, path: Optional[Path] = None):
        if path is None:
            path = Path(tempfile.gettempdir()) / f"kiosk-rotator-session-{os.getpid()}.ini"
        self._path = Path(path)
        self._settings = QSettings(str(self._path), QSettings.Format.IniFormat)

    @property
    def path(self) -> Path:
        return self._path

    def set_item(self, key: str, value: str) -> None:
        self._settings.setValue(key, value)
        self._settings.sync()

    def get_item(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._settings.value(key, default)
        return None if value is None else str(value)

    def snapshot_list(self, key: str, entries: Iterable[str]) -> bool:
        """Store ``entries`` as a JSON array. Failures are logged, not raised."""
        try:
            self.set_item(key, json.dumps(list(entries)))
        except (TypeError, ValueError) as e:
            logger.warning("Session snapshot of %s failed: %s", key, e)
            return False
        return True

    def clear(self) -> None:
        self._settings.clear()
        self._settings.sync()
        try:
            self._path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.debug("Could not remove session file %s: %s", self._path, e)
