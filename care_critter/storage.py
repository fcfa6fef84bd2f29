"""Persistence collaborator: one JSON blob under a fixed key.

Nothing here raises on bad data. Corrupt or foreign saves are logged and
replaced by a fresh pet; failed reads and writes are logged and treated as
an empty store or a dropped write.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from care_critter.clock import elapsed_minutes
from care_critter.constants import STORAGE_KEY
from care_critter.decay import apply_elapsed_time
from care_critter.lifecycle import new_pet
from care_critter.randomness import RandomSource
from care_critter.schema import from_dict, to_dict
from care_critter.types import Millis, PetState, SchemaError

logger = logging.getLogger(__name__)


@runtime_checkable
class StorageAdapter(Protocol):
    """Key-value string store, e.g. a browser's localStorage or a directory."""

    def get_item(self, key: str) -> str | None:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...


class MemoryStorage:
    """In-process store. Conforms to ``StorageAdapter``."""

    def __init__(self, items: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class JsonFileStorage:
    """One ``<key>.json`` file per key inside *directory*.

    Writes go to a temporary file in the same directory and are swapped in
    with ``os.replace`` so a crash never leaves a half-written save.
    """

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)

    @property
    def directory(self) -> Path:
        return self._dir

    def path_for(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not read save {path}: {e}")
            return None

    def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self._dir, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(value)
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.warning(f"Could not write save {path}: {e}")


def export_state(state: PetState) -> str:
    return json.dumps(to_dict(state), indent=2)


def import_state(text: str, now_ts: Millis, rng: RandomSource) -> PetState | None:
    """Parse and normalise an exported save.

    Returns None when *text* is not JSON or not a JSON object.
    """
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"Import rejected, not valid JSON: {e}")
        return None
    if not isinstance(parsed, dict):
        logger.warning("Import rejected, save must be a JSON object")
        return None
    try:
        return from_dict(parsed, now_ts, rng)
    except SchemaError as e:
        logger.warning(f"Import rejected: {e}")
        return None


def save_state(state: PetState, adapter: StorageAdapter, key: str = STORAGE_KEY) -> None:
    adapter.set_item(key, json.dumps(to_dict(state)))


def load_state(
    adapter: StorageAdapter,
    now_ts: Millis,
    rng: RandomSource,
    key: str = STORAGE_KEY,
) -> PetState:
    """Load the stored pet, or a fresh egg when nothing usable is stored."""
    raw = adapter.get_item(key)
    if not raw:
        return new_pet(now_ts, rng)
    state = import_state(raw, now_ts, rng)
    if state is None:
        logger.warning(f"Discarding unreadable save under {key!r}, starting a new pet")
        return new_pet(now_ts, rng)
    return state


def resume(
    adapter: StorageAdapter,
    now_ts: Millis,
    rng: RandomSource,
    key: str = STORAGE_KEY,
) -> PetState:
    """Load, catch the pet up on the time it spent closed, and save it back."""
    loaded = load_state(adapter, now_ts, rng, key)
    hydrated = apply_elapsed_time(
        loaded, elapsed_minutes(loaded.last_update_ts, now_ts), now_ts, rng
    )
    save_state(hydrated, adapter, key)
    return hydrated
