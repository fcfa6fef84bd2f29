"""Pet creation, care-score history and life-stage progression."""
from __future__ import annotations

import logging
import math
from dataclasses import replace

from care_critter.clock import calendar_day_key
from care_critter.constants import (
    ADULT_VARIANT_THRESHOLDS,
    ADULT_VARIANTS,
    CARE_HISTORY_WINDOW_MS,
    DEFAULT_CARE_SCORE,
    DEFAULT_CRITTER_VARIANT,
    EGG_TO_VARIANT,
    GAME_LOOP,
    MINUTE_MS,
    NEWBORN,
    POOP,
    STAGE_DURATIONS_MS,
    STAGE_ORDER,
)
from care_critter.randomness import RandomSource, random_between
from care_critter.types import AttentionDemand, CareSample, Millis, ParentSettings, PetState

logger = logging.getLogger(__name__)


def new_pet(now_ts: Millis, rng: RandomSource, settings: ParentSettings | None = None) -> PetState:
    """Fresh unselected egg. Only the first waste interval is randomised."""
    return PetState(
        hunger=NEWBORN.hunger,
        happiness=NEWBORN.happiness,
        training=NEWBORN.training,
        weight=NEWBORN.weight,
        stage=STAGE_ORDER[0],
        age_days=0,
        asleep=False,
        sickness=False,
        dead=False,
        poop_count=0,
        poop_progress_minutes=0.0,
        next_poop_in_minutes=random_between(POOP.min_minutes, POOP.max_minutes, rng),
        snack_count_today=0,
        last_snack_reset_date=calendar_day_key(now_ts),
        sick_minutes=0.0,
        critical_minutes=0.0,
        medicine_steps_remaining=0,
        attention_demand=AttentionDemand(active=False, reason=None, ts=now_ts),
        care_score_history=(CareSample(ts=now_ts, score=NEWBORN.care_score),),
        egg_style=None,
        critter_variant=None,
        adult_variant=ADULT_VARIANTS[-1],
        settings=settings if settings is not None else ParentSettings(),
        stage_started_ts=now_ts,
        created_ts=now_ts,
        last_update_ts=now_ts,
        last_care_snapshot_ts=now_ts,
    )


# --- Care score ---


def care_score(state: PetState) -> float:
    return (state.hunger + state.happiness + state.training) / 3


def prune_history(history: tuple[CareSample, ...], now_ts: Millis) -> tuple[CareSample, ...]:
    cutoff = now_ts - CARE_HISTORY_WINDOW_MS
    return tuple(sample for sample in history if sample.ts >= cutoff)


def average_care_score(history: tuple[CareSample, ...]) -> float:
    if not history:
        return DEFAULT_CARE_SCORE
    return sum(sample.score for sample in history) / len(history)


def take_care_snapshot(state: PetState, now_ts: Millis) -> PetState:
    """Append a care sample once the sampling interval has passed."""
    if now_ts - state.last_care_snapshot_ts < GAME_LOOP.care_snapshot_minutes * MINUTE_MS:
        return state
    history = prune_history(
        state.care_score_history + (CareSample(ts=now_ts, score=care_score(state)),),
        now_ts,
    )
    return replace(state, care_score_history=history, last_care_snapshot_ts=now_ts)


# --- Variants ---


def resolve_adult_variant(score: float) -> str:
    for variant, threshold in ADULT_VARIANT_THRESHOLDS:
        if score >= threshold:
            return variant
    return ADULT_VARIANTS[-1]


def resolve_critter_variant(state: PetState) -> str:
    if state.critter_variant:
        return state.critter_variant
    if state.egg_style:
        return EGG_TO_VARIANT[state.egg_style]
    return DEFAULT_CRITTER_VARIANT


# --- Stages ---


def next_stage(stage: str) -> str | None:
    index = STAGE_ORDER.index(stage)
    if index >= len(STAGE_ORDER) - 1:
        return None
    return STAGE_ORDER[index + 1]


def stage_duration_ms(stage: str, settings: ParentSettings) -> float:
    if stage == STAGE_ORDER[0]:
        return settings.egg_hatch_seconds * 1000
    return STAGE_DURATIONS_MS.get(stage, math.inf)


def enter_stage(state: PetState, stage: str, started_ts: Millis, now_ts: Millis) -> PetState:
    """Move to *stage* and resolve whatever cosmetic the stage fixes.

    Hatching fixes the critter variant from the egg style; reaching adult
    fixes the tier from the last 24 hours of care.
    """
    logger.debug(f"Stage {state.stage} -> {stage}")
    nxt = replace(state, stage=stage, stage_started_ts=started_ts)
    if stage == STAGE_ORDER[1]:
        nxt = replace(nxt, critter_variant=resolve_critter_variant(nxt))
    if stage == STAGE_ORDER[-1]:
        score = average_care_score(prune_history(nxt.care_score_history, now_ts))
        nxt = replace(nxt, adult_variant=resolve_adult_variant(score))
    return nxt


def advance_stage(state: PetState, now_ts: Millis) -> PetState:
    """Advance through every stage whose duration has fully elapsed.

    Leftover time carries forward: ``stage_started_ts`` moves by exactly the
    finished stage's duration, so one large jump can pass several stages.
    """
    nxt = state
    while True:
        duration = stage_duration_ms(nxt.stage, nxt.settings)
        if math.isinf(duration) or now_ts - nxt.stage_started_ts < duration:
            break
        upcoming = next_stage(nxt.stage)
        if upcoming is None:
            break
        nxt = enter_stage(nxt, upcoming, nxt.stage_started_ts + duration, now_ts)
    return nxt
