"""Decay & event engine: fast-forward a pet through elapsed real time."""
from __future__ import annotations

from dataclasses import replace

from care_critter.clock import age_in_days, calendar_day_key, is_within_sleep_window
from care_critter.constants import ATTENTION, CAPS, DECAY, POOP
from care_critter.lifecycle import advance_stage, prune_history, take_care_snapshot
from care_critter.randomness import RandomSource, random_between, roll_chance
from care_critter.sickness import update_sickness
from care_critter.types import AttentionDemand, Millis, PetState


def clamp_meter(value: float) -> float:
    return min(CAPS.max_meter, max(CAPS.min_meter, value))


def apply_daily_resets(state: PetState, now_ts: Millis) -> PetState:
    """Zero the day-scoped counters the first time a new local day is seen."""
    today = calendar_day_key(now_ts)
    if state.last_snack_reset_date == today:
        return state
    return replace(
        state,
        snack_count_today=0,
        stars_today=0,
        successful_mirrors_today=0,
        last_snack_reset_date=today,
    )


def decay_meters(state: PetState, minutes: float) -> PetState:
    multiplier = DECAY.asleep_multiplier if state.asleep else 1.0

    hunger_loss = DECAY.hunger_per_minute * minutes * multiplier
    happiness_loss = DECAY.happiness_per_minute * minutes * multiplier
    training_loss = DECAY.training_per_minute * minutes * multiplier

    if state.poop_count > 0:
        happiness_loss += DECAY.poop_happiness_penalty_per_minute * minutes
    if state.sickness:
        hunger_loss += DECAY.sick_hunger_penalty_per_minute * minutes
        happiness_loss += DECAY.sick_happiness_penalty_per_minute * minutes

    return replace(
        state,
        hunger=clamp_meter(state.hunger - hunger_loss),
        happiness=clamp_meter(state.happiness - happiness_loss),
        training=clamp_meter(state.training - training_loss),
    )


def accumulate_waste(state: PetState, minutes: float, rng: RandomSource) -> PetState:
    """Add waste for every threshold crossed while awake.

    Loops so that a jump of several days produces every dropping, each
    followed by a freshly drawn interval.
    """
    if state.dead or state.asleep or minutes <= 0:
        return state

    progress = state.poop_progress_minutes + minutes
    count = state.poop_count
    threshold = state.next_poop_in_minutes
    while progress >= threshold:
        count += 1
        progress -= threshold
        threshold = random_between(POOP.min_minutes, POOP.max_minutes, rng)

    return replace(
        state,
        poop_count=count,
        poop_progress_minutes=progress,
        next_poop_in_minutes=threshold,
    )


def wake_outside_window(state: PetState, now_ts: Millis) -> PetState:
    if state.asleep and not is_within_sleep_window(now_ts, state.settings.sleep_window):
        return replace(state, asleep=False)
    return state


def roll_attention(state: PetState, minutes: float, now_ts: Millis, rng: RandomSource) -> PetState:
    if state.dead or state.attention_demand.active or minutes <= 0:
        return state

    bored = state.happiness < ATTENTION.boredom_threshold
    if not bored and not roll_chance(ATTENTION.random_demand_chance_per_minute * minutes, rng):
        return state

    return replace(
        state,
        attention_demand=AttentionDemand(
            active=True,
            reason="bored" if bored else "random",
            ts=now_ts,
        ),
    )


def finish(state: PetState, now_ts: Millis) -> PetState:
    """Bookkeeping shared by every engine entry point."""
    return replace(
        state,
        age_days=age_in_days(state.created_ts, now_ts),
        care_score_history=prune_history(state.care_score_history, now_ts),
        last_update_ts=now_ts,
    )


def apply_elapsed_time(
    state: PetState,
    elapsed_minutes: float,
    now_ts: Millis,
    rng: RandomSource,
) -> PetState:
    """Return *state* brought forward by *elapsed_minutes* ending at *now_ts*.

    A dead pet, a paused pet and a zero delta only get their age and
    timestamp refreshed.
    """
    minutes = max(0.0, elapsed_minutes)
    nxt = apply_daily_resets(state, now_ts)

    if minutes <= 0 or nxt.dead or nxt.settings.pause_decay:
        return replace(
            nxt,
            age_days=age_in_days(nxt.created_ts, now_ts),
            last_update_ts=now_ts,
        )

    nxt = decay_meters(nxt, minutes)
    nxt = accumulate_waste(nxt, minutes, rng)
    nxt = wake_outside_window(nxt, now_ts)
    nxt = update_sickness(nxt, minutes, now_ts, rng)
    nxt = roll_attention(nxt, minutes, now_ts, rng)
    nxt = take_care_snapshot(nxt, now_ts)
    nxt = advance_stage(nxt, now_ts)
    return finish(nxt, now_ts)
