"""Storage - Persistence for food logs, exercise, weight, profile and settings.

This module handles all storage I/O. All I/O is contained here; business
logic is in the core module.

Each concern lives under its own key as one JSON document, e.g.

    daily_logs:        { "YYYY-MM-DD": { date, entries: [...] }, ... }
    exercise_entries:  { "YYYY-MM-DD": [ {...}, ... ], ... }
    weight_entries:    { "YYYY-MM-DD": { date, weight, timestamp }, ... }
    custom_foods:      [ {...}, ... ]
    app_settings:      { daily_calorie_goal, ... }
    user_data:         { height, current_weight, ... }

Reads that fail are logged and return an empty/default value. Writes that
fail raise StorageError. A write never replaces data it could not read, so
other dates are never lost.
"""

import asyncio
import json
import logging
import os
import tempfile
from datetime import date
from pathlib import Path
from typing import Any, Protocol

from google.cloud import firestore
from pydantic import TypeAdapter

from ..core.calories import add_entry, remove_entry, update_entry_quantity, EntryNotFoundError
from ..core.models import (
    AppSettings,
    DailyLog,
    ExerciseEntry,
    FoodItem,
    FoodLogEntry,
    UserData,
    WeightEntry,
)
from .config import AppConfig, FirestoreConfig


logger = logging.getLogger(__name__)


KEYS = {
    "DAILY_LOGS": "daily_logs",
    "CUSTOM_FOODS": "custom_foods",
    "SETTINGS": "app_settings",
    "WEIGHT_ENTRIES": "weight_entries",
    "EXERCISE_ENTRIES": "exercise_entries",
    "USER_DATA": "user_data",
}

_daily_logs_adapter = TypeAdapter(dict[date, DailyLog])
_weight_entries_adapter = TypeAdapter(dict[date, WeightEntry])
_exercise_entries_adapter = TypeAdapter(dict[date, list[ExerciseEntry]])
_custom_foods_adapter = TypeAdapter(list[FoodItem])


class StorageError(Exception):
    """Raised when data cannot be written, or read back before a write."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


# ==================== Backends ====================


class KeyValueBackend(Protocol):
    """Minimal async string key-value store."""

    async def get_item(self, key: str) -> str | None: ...

    async def set_item(self, key: str, value: str) -> None: ...

    async def remove_item(self, key: str) -> None: ...


class MemoryBackend:
    """In-process backend. Data is lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> str | None:
        return self.data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self.data[key] = value

    async def remove_item(self, key: str) -> None:
        self.data.pop(key, None)


class FileBackend:
    """One JSON file per key under a data directory."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def _read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write(self, key: str, value: str) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        # Write to a temp file and rename so a crash never leaves half a file
        fd, tmp = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, self._path(key))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def _remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    async def get_item(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read, key)

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self._remove, key)


class FirestoreBackend:
    """Firestore backend: one document per key holding the JSON string.

    Document structure:
        {collection}/{key}: { value: "<json>", updated_at }
    """

    def __init__(self, config: FirestoreConfig | None = None) -> None:
        """Initialize Firestore backend.

        Args:
            config: Firestore configuration
        """
        self.config = config or FirestoreConfig()
        self._client: firestore.AsyncClient | None = None

    @property
    def client(self) -> firestore.AsyncClient:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs: dict[str, Any] = {}
            if self.config.project_id:
                kwargs["project"] = self.config.project_id
            if self.config.database:
                kwargs["database"] = self.config.database
            self._client = firestore.AsyncClient(**kwargs)
        return self._client

    def _doc_ref(self, key: str) -> firestore.AsyncDocumentReference:
        return self.client.collection(self.config.collection).document(key)

    async def get_item(self, key: str) -> str | None:
        doc = await self._doc_ref(key).get()
        if not doc.exists:
            return None
        return (doc.to_dict() or {}).get("value")

    async def set_item(self, key: str, value: str) -> None:
        await self._doc_ref(key).set({"value": value, "updated_at": firestore.SERVER_TIMESTAMP})

    async def remove_item(self, key: str) -> None:
        await self._doc_ref(key).delete()


def create_backend(config: AppConfig) -> KeyValueBackend:
    """Create the backend named in the configuration.

    Raises:
        ValueError: If the backend name is unknown
    """
    if config.storage == "memory":
        return MemoryBackend()
    if config.storage == "file":
        return FileBackend(config.data_dir)
    if config.storage == "firestore":
        return FirestoreBackend(config.firestore)
    raise ValueError(f"Unknown storage backend: {config.storage}")


# ==================== Store ====================


class CalorieStore:
    """Typed access to all persisted records on top of a key-value backend."""

    def __init__(self, backend: KeyValueBackend) -> None:
        self.backend = backend

    async def _load(self, key: str, adapter: TypeAdapter, default: Any) -> Any:
        """Read and parse a key. Raises StorageError if unreadable."""
        try:
            raw = await self.backend.get_item(key)
            if raw is None:
                return default
            return adapter.validate_json(raw)
        except Exception as e:
            raise StorageError(f"Failed to read {key}: {e}", key=key) from e

    async def _load_or_default(self, key: str, adapter: TypeAdapter, default: Any) -> Any:
        """Read and parse a key, falling back to the default on any failure."""
        try:
            return await self._load(key, adapter, default)
        except StorageError as e:
            logger.error("%s", str(e))
            return default

    async def _save(self, key: str, adapter: TypeAdapter, value: Any) -> None:
        try:
            await self.backend.set_item(key, adapter.dump_json(value).decode("utf-8"))
        except Exception as e:
            logger.error("Failed to save %s: %s", key, str(e))
            raise StorageError(f"Failed to save {key}: {e}", key=key) from e

    # ==================== Daily Log Operations ====================

    async def get_all_daily_logs(self) -> dict[date, DailyLog]:
        """Fetch every daily log, keyed by date."""
        logger.debug("Fetching all daily logs")
        return await self._load_or_default(KEYS["DAILY_LOGS"], _daily_logs_adapter, {})

    async def get_daily_log(self, log_date: date) -> DailyLog | None:
        """Fetch a daily log.

        Args:
            log_date: Date of the log

        Returns:
            DailyLog if found, None otherwise
        """
        logger.debug("Fetching log for %s", log_date)
        logs = await self.get_all_daily_logs()
        return logs.get(log_date)

    async def save_daily_log(self, log: DailyLog) -> None:
        """Insert or replace the log for its date, keeping every other date.

        Raises:
            StorageError: If the write fails
        """
        logger.info("Saving log for %s", log.date)
        logs = await self._load(KEYS["DAILY_LOGS"], _daily_logs_adapter, {})
        logs[log.date] = log
        await self._save(KEYS["DAILY_LOGS"], _daily_logs_adapter, logs)

    async def add_food_entry(self, log_date: date, entry: FoodLogEntry) -> DailyLog:
        """Add a food entry to a day's log, creating the log if needed.

        Returns:
            The updated DailyLog
        """
        log = await self.get_daily_log(log_date)
        if log is None:
            log = DailyLog(date=log_date, entries=[])

        log = add_entry(log, entry)
        await self.save_daily_log(log)
        return log

    async def update_food_entry(self, log_date: date, entry_id: str, quantity: float) -> DailyLog:
        """Change the quantity of a logged food.

        Raises:
            EntryNotFoundError: If the day has no such entry
            StorageError: If the stored logs cannot be read
        """
        logs = await self._load(KEYS["DAILY_LOGS"], _daily_logs_adapter, {})
        log = logs.get(log_date)
        if log is None:
            logger.warning("No log on %s for entry %s", log_date, entry_id)
            raise EntryNotFoundError(entry_id)

        log = update_entry_quantity(log, entry_id, quantity)
        await self.save_daily_log(log)
        return log

    async def remove_food_entry(self, log_date: date, entry_id: str) -> DailyLog:
        """Remove a logged food.

        Raises:
            EntryNotFoundError: If the day has no such entry
            StorageError: If the stored logs cannot be read
        """
        logs = await self._load(KEYS["DAILY_LOGS"], _daily_logs_adapter, {})
        log = logs.get(log_date)
        if log is None:
            logger.warning("No log on %s for entry %s", log_date, entry_id)
            raise EntryNotFoundError(entry_id)

        log = remove_entry(log, entry_id)
        await self.save_daily_log(log)
        return log

    # ==================== Custom Food Operations ====================

    async def get_custom_foods(self) -> list[FoodItem]:
        logger.debug("Fetching custom foods")
        return await self._load_or_default(KEYS["CUSTOM_FOODS"], _custom_foods_adapter, [])

    async def save_custom_food(self, food: FoodItem) -> None:
        """Add a custom food, replacing one with the same id."""
        logger.info("Saving custom food: %s", food.name)
        foods = await self._load(KEYS["CUSTOM_FOODS"], _custom_foods_adapter, [])
        foods = [f for f in foods if f.id != food.id]
        foods.append(food)
        await self._save(KEYS["CUSTOM_FOODS"], _custom_foods_adapter, foods)

    async def delete_custom_food(self, food_id: str) -> None:
        logger.info("Deleting custom food: %s", food_id)
        foods = await self._load(KEYS["CUSTOM_FOODS"], _custom_foods_adapter, [])
        await self._save(
            KEYS["CUSTOM_FOODS"], _custom_foods_adapter, [f for f in foods if f.id != food_id]
        )

    # ==================== Settings Operations ====================

    async def get_settings(self) -> AppSettings:
        """Fetch settings, with defaults filled in for any missing keys."""
        logger.debug("Fetching settings")
        defaults = AppSettings()
        try:
            raw = await self.backend.get_item(KEYS["SETTINGS"])
            if raw is None:
                return defaults
            stored = json.loads(raw)
            return AppSettings.model_validate({**defaults.model_dump(), **stored})
        except Exception as e:
            logger.error("Failed to fetch settings: %s", str(e))
            return defaults

    async def save_settings(self, settings: AppSettings) -> None:
        logger.info("Saving settings")
        await self._save(KEYS["SETTINGS"], TypeAdapter(AppSettings), settings)

    # ==================== User Data Operations ====================

    async def get_user_data(self) -> UserData:
        """Fetch the user profile; an empty profile if none is stored."""
        logger.debug("Fetching user data")
        return await self._load_or_default(KEYS["USER_DATA"], TypeAdapter(UserData), UserData())

    async def save_user_data(self, user_data: UserData) -> None:
        logger.info("Saving user data")
        await self._save(KEYS["USER_DATA"], TypeAdapter(UserData), user_data)

    # ==================== Weight Operations ====================

    async def get_all_weight_entries(self) -> dict[date, WeightEntry]:
        logger.debug("Fetching all weight entries")
        return await self._load_or_default(KEYS["WEIGHT_ENTRIES"], _weight_entries_adapter, {})

    async def get_weight_entry(self, entry_date: date) -> WeightEntry | None:
        entries = await self.get_all_weight_entries()
        return entries.get(entry_date)

    async def save_weight_entry(self, entry: WeightEntry) -> None:
        """Insert or replace the weight for its date."""
        logger.info("Saving weight for %s", entry.date)
        entries = await self._load(KEYS["WEIGHT_ENTRIES"], _weight_entries_adapter, {})
        entries[entry.date] = entry
        await self._save(KEYS["WEIGHT_ENTRIES"], _weight_entries_adapter, entries)

    async def delete_weight_entry(self, entry_date: date) -> None:
        logger.info("Deleting weight for %s", entry_date)
        entries = await self._load(KEYS["WEIGHT_ENTRIES"], _weight_entries_adapter, {})
        entries.pop(entry_date, None)
        await self._save(KEYS["WEIGHT_ENTRIES"], _weight_entries_adapter, entries)

    # ==================== Exercise Operations ====================

    async def get_all_exercise_entries(self) -> dict[date, list[ExerciseEntry]]:
        logger.debug("Fetching all exercise entries")
        return await self._load_or_default(KEYS["EXERCISE_ENTRIES"], _exercise_entries_adapter, {})

    async def get_exercise_entries(self, entry_date: date) -> list[ExerciseEntry]:
        entries = await self.get_all_exercise_entries()
        return entries.get(entry_date, [])

    async def save_exercise_entry(self, entry: ExerciseEntry) -> None:
        """Add an exercise entry to its day, or replace the one with the same id."""
        logger.info("Saving exercise %s for %s", entry.id, entry.date)
        all_entries = await self._load(KEYS["EXERCISE_ENTRIES"], _exercise_entries_adapter, {})
        day = all_entries.setdefault(entry.date, [])

        for i, existing in enumerate(day):
            if existing.id == entry.id:
                day[i] = entry
                break
        else:
            day.append(entry)

        await self._save(KEYS["EXERCISE_ENTRIES"], _exercise_entries_adapter, all_entries)

    async def delete_exercise_entry(self, entry_date: date, entry_id: str) -> None:
        """Remove an exercise entry. A day left with no entries is dropped."""
        logger.info("Deleting exercise %s for %s", entry_id, entry_date)
        all_entries = await self._load(KEYS["EXERCISE_ENTRIES"], _exercise_entries_adapter, {})
        if entry_date not in all_entries:
            return

        remaining = [e for e in all_entries[entry_date] if e.id != entry_id]
        if remaining:
            all_entries[entry_date] = remaining
        else:
            del all_entries[entry_date]

        await self._save(KEYS["EXERCISE_ENTRIES"], _exercise_entries_adapter, all_entries)
