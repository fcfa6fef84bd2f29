"""Sickness state machine: healthy -> sick -> dead.

Onset is rolled from the supplied random source; recovery only happens
through medicine (see ``cure``). Death is terminal until restart.
"""
from __future__ import annotations

import logging
from dataclasses import replace

from care_critter.constants import SICKNESS
from care_critter.randomness import RandomSource, random_between, roll_chance
from care_critter.types import AttentionDemand, Millis, PetState

logger = logging.getLogger(__name__)

HEALTHY = "healthy"
SICK = "sick"
DEAD = "dead"


def health_status(state: PetState) -> str:
    if state.dead:
        return DEAD
    if state.sickness:
        return SICK
    return HEALTHY


def has_low_needs(state: PetState) -> bool:
    threshold = SICKNESS.low_needs_threshold
    return state.hunger <= threshold or state.happiness <= threshold


def is_critical(state: PetState) -> bool:
    threshold = SICKNESS.critical_threshold
    return state.hunger <= threshold or state.happiness <= threshold


def onset_chance(state: PetState, minutes: float) -> float:
    chance = 0.0
    if state.poop_count > 0:
        chance += SICKNESS.poop_risk_per_minute * minutes
    if has_low_needs(state):
        chance += SICKNESS.low_needs_risk_per_minute * minutes
    return chance


def update_sickness(state: PetState, minutes: float, now_ts: Millis, rng: RandomSource) -> PetState:
    if state.dead or minutes <= 0:
        return state

    nxt = state
    if not nxt.sickness and roll_chance(onset_chance(nxt, minutes), rng):
        lo, hi = SICKNESS.medicine_steps
        nxt = replace(
            nxt,
            sickness=True,
            sick_minutes=0.0,
            medicine_steps_remaining=random_between(lo, hi, rng),
        )
        logger.debug(f"Pet fell ill, {nxt.medicine_steps_remaining} medicine step(s) needed")

    if nxt.sickness:
        nxt = replace(nxt, sick_minutes=nxt.sick_minutes + minutes)

    critical = is_critical(nxt)
    if critical and nxt.sickness:
        critical_minutes = nxt.critical_minutes + minutes
    else:
        critical_minutes = max(0.0, nxt.critical_minutes - minutes * SICKNESS.critical_recovery_rate)
    nxt = replace(nxt, critical_minutes=critical_minutes)

    if (
        nxt.critical_minutes >= SICKNESS.critical_minutes_to_death
        or (nxt.sick_minutes >= SICKNESS.max_untreated_minutes and critical)
    ):
        logger.debug("Pet died")
        nxt = replace(
            nxt,
            dead=True,
            asleep=False,
            attention_demand=AttentionDemand(active=False, reason=None, ts=now_ts),
        )
    return nxt


def cure(state: PetState) -> PetState:
    return replace(
        state,
        sickness=False,
        sick_minutes=0.0,
        critical_minutes=0.0,
        medicine_steps_remaining=0,
    )
