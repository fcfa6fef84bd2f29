"""Game-balance configuration.

Every tunable number the engine uses lives here, grouped into frozen
dataclasses. The values set the pacing of the game; none of the engine's
invariants depend on them.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

STORAGE_KEY = "care-critter-state-v1"

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

# --- Stages and cosmetics ---

STAGE_ORDER: tuple[str, ...] = ("egg", "baby", "child", "teen", "adult")

EGG_STYLES: tuple[str, ...] = ("speckled", "striped", "star", "leaf")
CRITTER_VARIANTS: tuple[str, ...] = ("sunny", "stripe", "astro", "forest")
ADULT_VARIANTS: tuple[str, ...] = ("A", "B", "C")

EGG_TO_VARIANT: dict[str, str] = {
    "speckled": "sunny",
    "striped": "stripe",
    "star": "astro",
    "leaf": "forest",
}
DEFAULT_CRITTER_VARIANT = "sunny"

ATTENTION_REASONS: tuple[str, ...] = ("bored", "random")

# --- Parent settings ---

CONFIRM_MODES: tuple[str, ...] = ("parent", "timer")
PROMPT_KEYS: tuple[str, ...] = ("feed_meal", "feed_snack", "play", "learn", "sleep")
PROMPT_ICONS: tuple[str, ...] = ("meal", "snack", "play", "learn", "sleep")

DEFAULT_PROMPTS: dict[str, tuple[str, str]] = {
    "feed_meal": ("Take one bite at the table.", "meal"),
    "feed_snack": ("Choose a healthy snack and take one bite.", "snack"),
    "play": ("Move your body for 10 seconds.", "play"),
    "learn": ("Say the letter out loud.", "learn"),
    "sleep": ("Time for bedtime routine.", "sleep"),
}


@dataclass(frozen=True)
class TimerRange:
    default_seconds: int
    min_seconds: int
    max_seconds: int

    def clamp(self, seconds: float) -> int:
        return int(max(self.min_seconds, min(self.max_seconds, round(seconds))))


CONFIRM_TIMER = TimerRange(default_seconds=10, min_seconds=3, max_seconds=60)
EGG_HATCH = TimerRange(default_seconds=5 * 60, min_seconds=15, max_seconds=60 * 60)

DEFAULT_SLEEP_WINDOW = ("19:00", "07:00")

# --- Decay and events ---


@dataclass(frozen=True)
class DecayRates:
    """Per-minute meter losses. Sleep dampens the base rates only."""

    hunger_per_minute: float = 0.4
    happiness_per_minute: float = 0.15
    training_per_minute: float = 0.02
    asleep_multiplier: float = 0.4
    poop_happiness_penalty_per_minute: float = 0.07
    sick_hunger_penalty_per_minute: float = 0.08
    sick_happiness_penalty_per_minute: float = 0.05


@dataclass(frozen=True)
class SicknessRules:
    poop_risk_per_minute: float = 0.004
    low_needs_risk_per_minute: float = 0.005
    low_needs_threshold: float = 20
    critical_threshold: float = 5
    critical_minutes_to_death: float = 180
    max_untreated_minutes: float = 900
    critical_recovery_rate: float = 0.5
    medicine_steps: tuple[int, int] = (1, 2)
    medicine_fallback_cure_chance: float = 0.55


@dataclass(frozen=True)
class PoopRules:
    min_minutes: int = 60
    max_minutes: int = 120


@dataclass(frozen=True)
class AttentionRules:
    random_demand_chance_per_minute: float = 0.01
    boredom_threshold: float = 40


@dataclass(frozen=True)
class Caps:
    snack_per_day: int = 3
    stars_per_day: int = 5
    max_meter: float = 100
    min_meter: float = 0
    min_weight: int = 1


@dataclass(frozen=True)
class GameLoop:
    """Cadences suggested to the caller. The engine never schedules itself."""

    tick_seconds: int = 25
    autosave_seconds: int = 20
    care_snapshot_minutes: int = 10


DECAY = DecayRates()
SICKNESS = SicknessRules()
POOP = PoopRules()
ATTENTION = AttentionRules()
CAPS = Caps()
GAME_LOOP = GameLoop()

CARE_HISTORY_WINDOW_MS = DAY_MS

# Egg duration comes from ParentSettings.egg_hatch_seconds.
STAGE_DURATIONS_MS: dict[str, float] = {
    "baby": 1 * DAY_MS,
    "child": 2 * DAY_MS,
    "teen": 2 * DAY_MS,
    "adult": math.inf,
}

ADULT_VARIANT_THRESHOLDS: tuple[tuple[str, float], ...] = (("A", 75), ("B", 50))
DEFAULT_CARE_SCORE = 50.0

# --- Rewards ---


@dataclass(frozen=True)
class Reward:
    hunger: float = 0
    happiness: float = 0
    training: float = 0
    weight: int = 0


REWARDS: dict[str, Reward] = {
    "feed_meal": Reward(hunger=25, happiness=2, weight=1),
    "feed_snack": Reward(hunger=8, happiness=10, weight=2),
    "play_win": Reward(happiness=10, training=1),
    "play_loss": Reward(happiness=5, training=1),
    "learn_correct": Reward(happiness=2, training=10),
    "learn_wrong": Reward(happiness=2, training=5),
    "praise": Reward(happiness=3, training=3),
}

SCOLD_DESERVED = Reward(training=5, happiness=-2)
SCOLD_UNDESERVED = Reward(happiness=-5)

SICK_GAIN_SCALE = 0.7

# --- New pet ---


@dataclass(frozen=True)
class Newborn:
    hunger: float = 70
    happiness: float = 70
    training: float = 30
    weight: int = 8
    care_score: float = 56.67


NEWBORN = Newborn()
