import asyncio
import json
import logging
import os
import tempfile
from typing import Any, Callable, Dict, Optional

from . import config

logger = logging.getLogger(__name__)

SAVED = "saved"
SAVING = "saving"
ERROR = "error"


class PersistenceStore:
    """
    One named durable slot holding the whole workspace state.

    notify() flips the indicator to "saving" and schedules a single write
    after a fixed delay; notifications arriving while a write is pending are
    folded into it. The pending write always serializes the latest state.
    """

    def __init__(
        self,
        slot_dir: str = config.STATE_DIR,
        key: str = config.STORAGE_KEY,
        save_delay: float = config.SAVE_DELAY,
    ):
        self.slot_dir = slot_dir
        self.key = key
        self.save_delay = save_delay
        self.status = SAVED
        self.write_count = 0
        self._pending: Optional[asyncio.Task] = None
        self._state_getter: Optional[Callable[[], Dict[str, Any]]] = None

    @property
    def path(self) -> str:
        return os.path.join(self.slot_dir, f"{self.key}.json")

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load(self) -> Optional[Dict[str, Any]]:
        """Returns the stored state, or None if the slot is absent or unreadable"""
        if not self.exists():
            return None
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Discarding unreadable workspace slot {self.path}: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"Discarding malformed workspace slot {self.path}")
            return None
        return data

    def save(self, state: Dict[str, Any]):
        """Write the state atomically (temp file + replace)"""
        os.makedirs(self.slot_dir, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.slot_dir, prefix=f".{self.key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(state, f)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        self.write_count += 1

    def notify(self, state_getter: Callable[[], Dict[str, Any]]):
        """Record that the workspace changed; the write follows after save_delay"""
        self._state_getter = state_getter
        self.status = SAVING
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._flush()
            return
        if self._pending is None or self._pending.done():
            self._pending = loop.create_task(self._delayed_flush())

    def mark_error(self):
        self.status = ERROR

    async def _delayed_flush(self):
        await asyncio.sleep(self.save_delay)
        self._flush()

    def _flush(self):
        if self._state_getter is None:
            return
        try:
            self.save(self._state_getter())
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to persist workspace to {self.path}: {e}")
            self.status = ERROR
            return
        if self.status == SAVING:
            self.status = SAVED

    async def wait_idle(self):
        """Wait for a pending write, if any"""
        if self._pending is not None and not self._pending.done():
            await self._pending
