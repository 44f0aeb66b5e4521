"""Handles persistent data storage for Pathly.

Stores goals, rewards, the lifetime points counter, and the unlocked
achievement ids in a single JSON file so state survives restarts. The
engines never touch storage; callers load, compute, and persist results.

File layout::

    {
        "meta": {"storage_version": 1, "last_saved": <epoch ms>},
        "goals": [...],
        "rewards": [...],
        "lifetime_points": "1250",
        "achievements_unlocked": ["first_goal"]
    }
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

from . import const
from .exceptions import StorageError
from .utils.dt_utils import dt_now_ms

if TYPE_CHECKING:
    from .type_defs import GoalData, RewardData, StorageData


class PathlyStore:
    """Handles persistent storage operations for Pathly data.

    Thin wrapper around a JSON file with an in-memory cache. Every save
    rewrites the whole file through a temporary file and ``os.replace``.
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize the store.

        Args:
            path: Location of the JSON storage file.
        """
        self._path = Path(path)
        self._data: StorageData = PathlyStore.get_default_structure()

    @staticmethod
    def get_default_structure() -> StorageData:
        """Return canonical empty data structure for fresh installations.

        This is the SINGLE SOURCE OF TRUTH for the Pathly storage schema.
        """
        return {
            const.STORAGE_KEY_META: {
                const.DATA_META_STORAGE_VERSION: const.STORAGE_VERSION,
                const.DATA_META_LAST_SAVED: None,
            },
            const.STORAGE_KEY_GOALS: [],
            const.STORAGE_KEY_REWARDS: [],
            const.STORAGE_KEY_LIFETIME_POINTS: "0",
            const.STORAGE_KEY_ACHIEVEMENTS_UNLOCKED: [],
        }

    @property
    def path(self) -> Path:
        """The storage file path."""
        return self._path

    @property
    def data(self) -> StorageData:
        """Retrieve the in-memory data cache."""
        return self._data

    # -------------------------------------------------------------------------------------
    # Load
    # -------------------------------------------------------------------------------------

    def initialize(self) -> None:
        """Load data from disk during startup.

        A missing file starts a fresh default structure. A corrupt or
        malformed file is logged and replaced in memory by the default
        structure; the file itself is left untouched until the next save.
        """
        const.LOGGER.debug("DEBUG: PathlyStore: Loading data from %s", self._path)

        if not self._path.exists():
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            self._data = PathlyStore.get_default_structure()
            return

        try:
            loaded = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as err:
            const.LOGGER.warning(
                "WARNING: Failed to read storage file %s: %s. Starting with empty data",
                self._path,
                err,
            )
            self._data = PathlyStore.get_default_structure()
            return

        if not isinstance(loaded, dict):
            const.LOGGER.warning(
                "WARNING: Storage file %s does not contain an object. "
                "Starting with empty data",
                self._path,
            )
            self._data = PathlyStore.get_default_structure()
            return

        data = PathlyStore.get_default_structure()
        data.update(loaded)
        self._data = data
        const.LOGGER.debug(
            "DEBUG: Loaded existing data from storage: %s",
            {
                "goals": len(self._data.get(const.STORAGE_KEY_GOALS) or []),
                "rewards": len(self._data.get(const.STORAGE_KEY_REWARDS) or []),
                "lifetime_points": self._data.get(const.STORAGE_KEY_LIFETIME_POINTS),
            },
        )

    def _load_list(self, key: str) -> list[dict[str, Any]]:
        value = self._data.get(key)
        if not isinstance(value, list):
            const.LOGGER.warning(
                "WARNING: Storage key '%s' is not a list; treating as empty", key
            )
            return []
        return [dict(item) for item in value if isinstance(item, dict)]

    def load_goals(self) -> list[GoalData]:
        """Return copies of the stored goal records."""
        return self._load_list(const.STORAGE_KEY_GOALS)  # type: ignore[return-value]

    def load_rewards(self) -> list[RewardData]:
        """Return copies of the stored reward records."""
        return self._load_list(const.STORAGE_KEY_REWARDS)  # type: ignore[return-value]

    def load_lifetime_points(self) -> int:
        """Return the lifetime points counter (stored as a stringified integer)."""
        raw = self._data.get(const.STORAGE_KEY_LIFETIME_POINTS, "0")
        try:
            return round(float(raw))
        except (TypeError, ValueError, OverflowError):
            const.LOGGER.warning(
                "WARNING: Invalid lifetime points value %r; using 0", raw
            )
            return const.DEFAULT_ZERO

    def load_achievements_unlocked(self) -> list[str]:
        """Return the persisted unlocked achievement ids."""
        value = self._data.get(const.STORAGE_KEY_ACHIEVEMENTS_UNLOCKED)
        if not isinstance(value, list):
            return []
        return [str(item) for item in value]

    # -------------------------------------------------------------------------------------
    # Save
    # -------------------------------------------------------------------------------------

    def save_goals(self, goals: list[GoalData]) -> None:
        """Persist the full goal list."""
        self._data[const.STORAGE_KEY_GOALS] = [dict(goal) for goal in goals]
        self.save()

    def save_rewards(self, rewards: list[RewardData]) -> None:
        """Persist the full reward list."""
        self._data[const.STORAGE_KEY_REWARDS] = [dict(reward) for reward in rewards]
        self.save()

    def save_lifetime_points(self, points: float) -> None:
        """Persist the lifetime points counter as a stringified integer.

        Fractional values are rounded, not truncated.
        """
        self._data[const.STORAGE_KEY_LIFETIME_POINTS] = str(round(points))
        self.save()

    def save_achievements_unlocked(self, achievement_ids: list[str]) -> None:
        """Persist the unlocked achievement ids."""
        self._data[const.STORAGE_KEY_ACHIEVEMENTS_UNLOCKED] = list(achievement_ids)
        self.save()

    def save(self) -> None:
        """Write the in-memory data to disk.

        Raises:
            StorageError: the file could not be written (OSError) or the data
                is not JSON serializable (TypeError, ValueError).
        """
        self._data[const.STORAGE_KEY_META] = {
            const.DATA_META_STORAGE_VERSION: const.STORAGE_VERSION,
            const.DATA_META_LAST_SAVED: dt_now_ms(),
        }
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        try:
            content = json.dumps(self._data, indent=2)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(content, encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._path,
            )
            raise StorageError("save", str(err)) from err
        except (TypeError, ValueError) as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s",
                err,
            )
            raise StorageError("save", str(err)) from err

        const.LOGGER.debug("DEBUG: Data saved successfully to %s", self._path)

    def clear_data(self) -> None:
        """Reset to the default structure and persist it."""
        const.LOGGER.warning("WARNING: Clearing all Pathly data and resetting storage")
        self._data = PathlyStore.get_default_structure()
        self.save()
