"""Stable, anonymous per-device identifier."""

import logging
import threading
import time
from pathlib import Path
from uuid import uuid4

from ..config import DEVICE_ID_PATH

logger = logging.getLogger(__name__)

UNKNOWN_DEVICE_ID = "unknown_device"

# How long to wait for a concurrent writer to fill in a new id file
EXISTING_ID_POLLS = 20
EXISTING_ID_POLL_INTERVAL = 0.01


class DeviceIdProvider:
    """Resolves the device identifier once and reuses it.

    The identifier is a random UUID kept in a small file so it survives
    restarts. It only scopes a user's own history on this device. Any
    failure to read or create the file yields ``UNKNOWN_DEVICE_ID``.
    """

    def __init__(self, path: Path | None = None, device_id: str | None = None) -> None:
        """Initialize the provider.

        Args:
            path: File holding the identifier (defaults to config)
            device_id: Fixed identifier to use instead of the file

        """
        self.path = path or DEVICE_ID_PATH
        self._device_id = device_id or None
        self._lock = threading.Lock()

    @property
    def device_id(self) -> str:
        """The identifier, resolved on first access from any thread."""
        if self._device_id is None:
            with self._lock:
                if self._device_id is None:
                    self._device_id = self._resolve()
        return self._device_id

    def _resolve(self) -> str:
        try:
            return self._read_or_create()
        except OSError as e:
            logger.warning(f"Device id unavailable ({e}), using {UNKNOWN_DEVICE_ID}")
            return UNKNOWN_DEVICE_ID

    def _read(self) -> str:
        if not self.path.exists():
            return ""
        return self.path.read_text(encoding="utf-8").strip()

    def _wait_for_existing(self) -> str:
        for _ in range(EXISTING_ID_POLLS):
            stored = self._read()
            if stored:
                return stored
            time.sleep(EXISTING_ID_POLL_INTERVAL)
        return ""

    def _read_or_create(self) -> str:
        stored = self._read()
        if stored:
            return stored

        new_id = str(uuid4())
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            # Exclusive create: another process may be creating the file too
            with open(self.path, "x", encoding="utf-8") as f:
                f.write(new_id)
        except FileExistsError:
            stored = self._wait_for_existing()
            if stored:
                return stored
            # Left empty by a writer that died
            self.path.write_text(new_id, encoding="utf-8")

        self.path.chmod(0o600)
        logger.info(f"Created device id at {self.path}")
        return new_id
