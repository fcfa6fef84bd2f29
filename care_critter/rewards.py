"""Action reward engine: instantaneous effects of discrete player actions.

Each ``Action`` maps to one pure handler. Rejected actions (snack over the
daily cap, medicine while healthy, sleep outside the window, hatching an
unselected egg) return the state untouched in the relevant fields.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from care_critter.clock import can_sleep_now
from care_critter.constants import (
    CAPS,
    REWARDS,
    SCOLD_DESERVED,
    SCOLD_UNDESERVED,
    SICK_GAIN_SCALE,
    SICKNESS,
    STAGE_ORDER,
    Reward,
)
from care_critter.decay import apply_daily_resets, clamp_meter, finish
from care_critter.lifecycle import advance_stage, enter_stage, new_pet, next_stage, take_care_snapshot
from care_critter.randomness import RandomSource, roll_chance
from care_critter.sickness import cure
from care_critter.types import Action, ActionOutcome, AttentionDemand, Millis, PetState

logger = logging.getLogger(__name__)

Handler = Callable[[PetState, ActionOutcome, Millis, RandomSource], PetState]


def scaled_gain(amount: float, sick: bool) -> float:
    """A sick pet gets 70% of any gain; losses are never scaled."""
    if amount <= 0:
        return amount
    return amount * SICK_GAIN_SCALE if sick else amount


def apply_reward(state: PetState, reward: Reward) -> PetState:
    sick = state.sickness
    return replace(
        state,
        hunger=clamp_meter(state.hunger + scaled_gain(reward.hunger, sick)),
        happiness=clamp_meter(state.happiness + scaled_gain(reward.happiness, sick)),
        training=clamp_meter(state.training + scaled_gain(reward.training, sick)),
        weight=max(CAPS.min_weight, state.weight + reward.weight),
    )


def _resolved(now_ts: Millis) -> AttentionDemand:
    return AttentionDemand(active=False, reason=None, ts=now_ts)


def _caring(action: Action) -> Handler:
    """Reward that also settles a pending attention demand."""
    reward = REWARDS[action.value]

    def handler(state: PetState, outcome: ActionOutcome, now_ts: Millis, rng: RandomSource) -> PetState:
        return replace(apply_reward(state, reward), attention_demand=_resolved(now_ts))

    return handler


def _lesson(action: Action) -> Handler:
    reward = REWARDS[action.value]

    def handler(state: PetState, outcome: ActionOutcome, now_ts: Millis, rng: RandomSource) -> PetState:
        return apply_reward(state, reward)

    return handler


def _feed_snack(state: PetState, outcome: ActionOutcome, now_ts: Millis, rng: RandomSource) -> PetState:
    if state.snack_count_today >= CAPS.snack_per_day:
        logger.debug("Snack rejected: daily cap reached")
        return state
    fed = apply_reward(state, REWARDS[Action.FEED_SNACK.value])
    return replace(
        fed,
        snack_count_today=fed.snack_count_today + 1,
        attention_demand=_resolved(now_ts),
    )


def _sleep(state: PetState, outcome: ActionOutcome, now_ts: Millis, rng: RandomSource) -> PetState:
    allowed = outcome.allow_sleep
    if allowed is None:
        allowed = can_sleep_now(
            now_ts, state.settings.sleep_window, state.settings.parent_override_sleep
        )
    if not allowed:
        logger.debug("Sleep rejected: outside sleep window")
        return state
    return replace(state, asleep=True)


def _wake(state: PetState, outcome: ActionOutcome, now_ts: Millis, rng: RandomSource) -> PetState:
    return replace(state, asleep=False)


def _clean(state: PetState, outcome: ActionOutcome, now_ts: Millis, rng: RandomSource) -> PetState:
    return replace(state, poop_count=0)


def _medicine(state: PetState, outcome: ActionOutcome, now_ts: Millis, rng: RandomSource) -> PetState:
    if not state.sickness:
        logger.debug("Medicine rejected: pet is healthy")
        return state
    steps = state.medicine_steps_remaining
    if steps > 1:
        return replace(state, medicine_steps_remaining=steps - 1)
    # Saves from before medicine steps existed carry 0 steps; those get a chance.
    if steps == 1 or roll_chance(SICKNESS.medicine_fallback_cure_chance, rng):
        return cure(state)
    return state


def _scold(state: PetState, outcome: ActionOutcome, now_ts: Millis, rng: RandomSource) -> PetState:
    if state.attention_demand.active:
        return replace(
            state,
            training=clamp_meter(state.training + SCOLD_DESERVED.training),
            happiness=clamp_meter(state.happiness + SCOLD_DESERVED.happiness),
            attention_demand=_resolved(now_ts),
        )
    return replace(state, happiness=clamp_meter(state.happiness + SCOLD_UNDESERVED.happiness))


def _hatch_early(state: PetState, outcome: ActionOutcome, now_ts: Millis, rng: RandomSource) -> PetState:
    if state.stage == STAGE_ORDER[0] and state.egg_style is None:
        logger.debug("Hatch rejected: no egg selected")
        return state
    upcoming = next_stage(state.stage)
    if upcoming is None:
        return state
    return enter_stage(state, upcoming, now_ts, now_ts)


HANDLERS: dict[Action, Handler] = {
    Action.FEED_MEAL: _caring(Action.FEED_MEAL),
    Action.FEED_SNACK: _feed_snack,
    Action.PLAY_WIN: _caring(Action.PLAY_WIN),
    Action.PLAY_LOSS: _caring(Action.PLAY_LOSS),
    Action.LEARN_CORRECT: _lesson(Action.LEARN_CORRECT),
    Action.LEARN_WRONG: _lesson(Action.LEARN_WRONG),
    Action.SLEEP: _sleep,
    Action.WAKE: _wake,
    Action.CLEAN: _clean,
    Action.MEDICINE: _medicine,
    Action.PRAISE: _caring(Action.PRAISE),
    Action.SCOLD: _scold,
    Action.HATCH_EARLY: _hatch_early,
}


def apply_action(
    state: PetState,
    action: Action,
    outcome: ActionOutcome | None,
    now_ts: Millis,
    rng: RandomSource,
) -> PetState:
    """Apply *action* to a state already decayed to *now_ts*.

    ``Action.RESTART`` is the only action a dead pet responds to; it
    returns a brand-new egg.
    """
    outcome = outcome if outcome is not None else ActionOutcome()
    ready = apply_daily_resets(state, now_ts)

    if action is Action.RESTART:
        settings = ready.settings if outcome.preserve_settings_on_restart else None
        return new_pet(now_ts, rng, settings)

    if ready.dead:
        return replace(ready, last_update_ts=now_ts)

    nxt = HANDLERS[action](ready, outcome, now_ts, rng)
    nxt = take_care_snapshot(nxt, now_ts)
    nxt = advance_stage(nxt, now_ts)
    return finish(nxt, now_ts)
