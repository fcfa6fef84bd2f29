"""State aggregate, value objects and exceptions shared by the engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from care_critter.clock import is_valid_clock
from care_critter.constants import (
    ATTENTION_REASONS,
    CONFIRM_MODES,
    CONFIRM_TIMER,
    DEFAULT_PROMPTS,
    DEFAULT_SLEEP_WINDOW,
    EGG_HATCH,
    PROMPT_ICONS,
)

# Epoch milliseconds, as stored in exported saves.
Millis = float


class SchemaError(Exception):
    """Raised when a stored blob cannot be migrated (e.g. a newer version)."""


class Action(Enum):
    """Discrete player actions understood by the reward engine."""

    FEED_MEAL = "feed_meal"
    FEED_SNACK = "feed_snack"
    PLAY_WIN = "play_win"
    PLAY_LOSS = "play_loss"
    LEARN_CORRECT = "learn_correct"
    LEARN_WRONG = "learn_wrong"
    SLEEP = "sleep"
    WAKE = "wake"
    CLEAN = "clean"
    MEDICINE = "medicine"
    PRAISE = "praise"
    SCOLD = "scold"
    HATCH_EARLY = "hatch_early"
    RESTART = "restart"


@dataclass(frozen=True)
class ActionOutcome:
    """Optional hints supplied alongside an action.

    Attributes:
        allow_sleep: Overrides the sleep-window check when not None.
        preserve_settings_on_restart: Carry the current settings into the
            fresh pet created by ``Action.RESTART``.
    """

    allow_sleep: bool | None = None
    preserve_settings_on_restart: bool = False


@dataclass(frozen=True)
class SleepWindow:
    start: str = DEFAULT_SLEEP_WINDOW[0]
    end: str = DEFAULT_SLEEP_WINDOW[1]

    def __post_init__(self) -> None:
        for bound in (self.start, self.end):
            if not is_valid_clock(bound):
                raise ValueError(f"Sleep window bounds must be HH:MM, got {bound!r}")


@dataclass(frozen=True)
class PromptEntry:
    prompt_text: str
    prompt_icon: str

    def __post_init__(self) -> None:
        if self.prompt_icon not in PROMPT_ICONS:
            raise ValueError(f"Unknown prompt icon {self.prompt_icon!r}")


def _default_prompts() -> dict[str, PromptEntry]:
    return {key: PromptEntry(text, icon) for key, (text, icon) in DEFAULT_PROMPTS.items()}


@dataclass(frozen=True)
class ParentSettings:
    """Player/parent configuration.

    The engine reads ``pause_decay``, ``sleep_window``,
    ``parent_override_sleep`` and ``egg_hatch_seconds``; everything else is
    carried for the presentation layer.
    """

    mirror_enabled: bool = True
    hatch_sound_enabled: bool = False
    confirm_mode: str = "parent"
    timer_seconds: int = CONFIRM_TIMER.default_seconds
    egg_hatch_seconds: int = EGG_HATCH.default_seconds
    per_action_prompts: dict[str, PromptEntry] = field(default_factory=_default_prompts)
    pause_decay: bool = False
    sleep_window: SleepWindow = field(default_factory=SleepWindow)
    parent_override_sleep: bool = False

    def __post_init__(self) -> None:
        if self.confirm_mode not in CONFIRM_MODES:
            raise ValueError(f"confirm_mode must be one of {CONFIRM_MODES}, got {self.confirm_mode!r}")
        if not CONFIRM_TIMER.min_seconds <= self.timer_seconds <= CONFIRM_TIMER.max_seconds:
            raise ValueError(f"timer_seconds out of range, got {self.timer_seconds}")
        if not EGG_HATCH.min_seconds <= self.egg_hatch_seconds <= EGG_HATCH.max_seconds:
            raise ValueError(f"egg_hatch_seconds out of range, got {self.egg_hatch_seconds}")


@dataclass(frozen=True)
class AttentionDemand:
    active: bool = False
    reason: str | None = None
    ts: Millis = 0

    def __post_init__(self) -> None:
        if self.reason is not None and self.reason not in ATTENTION_REASONS:
            raise ValueError(f"Unknown attention reason {self.reason!r}")


@dataclass(frozen=True)
class CareSample:
    ts: Millis
    score: float


@dataclass(frozen=True)
class PetState:
    """The single persisted aggregate. Replace, never mutate."""

    hunger: float
    happiness: float
    training: float
    weight: int
    stage: str
    age_days: int
    asleep: bool
    sickness: bool
    dead: bool
    poop_count: int
    poop_progress_minutes: float
    next_poop_in_minutes: int
    snack_count_today: int
    last_snack_reset_date: str
    sick_minutes: float
    critical_minutes: float
    medicine_steps_remaining: int
    attention_demand: AttentionDemand
    care_score_history: tuple[CareSample, ...]
    egg_style: str | None
    critter_variant: str | None
    adult_variant: str
    settings: ParentSettings
    stage_started_ts: Millis
    created_ts: Millis
    last_update_ts: Millis
    last_care_snapshot_ts: Millis
    stars_today: int = 0
    total_stars: int = 0
    successful_mirrors_today: int = 0
    best_day_record: int = 0
