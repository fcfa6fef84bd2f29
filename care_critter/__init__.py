"""care-critter - A deterministic virtual-pet simulation engine."""
from __future__ import annotations

from care_critter.clock import (
    age_in_days,
    calendar_day_key,
    can_sleep_now,
    elapsed_minutes,
    is_within_sleep_window,
    minutes_of_day,
)
from care_critter.decay import apply_elapsed_time
from care_critter.dispatcher import (
    Dispatcher,
    ImportState,
    PerformAction,
    RecordMirrorSuccess,
    SelectCosmetic,
    Tick,
    UpdateSettings,
)
from care_critter.lifecycle import advance_stage, new_pet
from care_critter.randomness import FixedRandom, RandomSource
from care_critter.rewards import apply_action
from care_critter.schema import SCHEMA_VERSION, from_dict, to_dict
from care_critter.storage import (
    JsonFileStorage,
    MemoryStorage,
    StorageAdapter,
    export_state,
    import_state,
    load_state,
    resume,
    save_state,
)
from care_critter.types import (
    Action,
    ActionOutcome,
    AttentionDemand,
    CareSample,
    ParentSettings,
    PetState,
    PromptEntry,
    SchemaError,
    SleepWindow,
)

__all__ = [
    # State
    "PetState",
    "ParentSettings",
    "SleepWindow",
    "PromptEntry",
    "AttentionDemand",
    "CareSample",
    "Action",
    "ActionOutcome",
    "SchemaError",
    # Engine
    "new_pet",
    "apply_elapsed_time",
    "apply_action",
    "advance_stage",
    # Commands
    "Dispatcher",
    "Tick",
    "PerformAction",
    "UpdateSettings",
    "SelectCosmetic",
    "ImportState",
    "RecordMirrorSuccess",
    # Time
    "calendar_day_key",
    "minutes_of_day",
    "is_within_sleep_window",
    "can_sleep_now",
    "age_in_days",
    "elapsed_minutes",
    # Randomness
    "RandomSource",
    "FixedRandom",
    # Persistence
    "StorageAdapter",
    "MemoryStorage",
    "JsonFileStorage",
    "save_state",
    "load_state",
    "resume",
    "export_state",
    "import_state",
    "to_dict",
    "from_dict",
    "SCHEMA_VERSION",
]
