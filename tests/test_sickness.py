"""Tests for the sickness state machine."""
from dataclasses import replace

import pytest

from care_critter.lifecycle import new_pet
from care_critter.randomness import FixedRandom
from care_critter.sickness import (
    DEAD,
    HEALTHY,
    SICK,
    cure,
    health_status,
    onset_chance,
    update_sickness,
)
from care_critter.types import AttentionDemand

NOW = 1_770_000_000_000.0


@pytest.fixture
def pet():
    return new_pet(NOW, FixedRandom(0.5))


class TestOnset:
    def test_no_risk_means_no_roll(self, pet):
        rng = FixedRandom(0.0)

        nxt = update_sickness(pet, 30, NOW, rng)

        assert not nxt.sickness
        assert rng.calls == 0

    def test_waste_raises_risk(self, pet):
        assert onset_chance(replace(pet, poop_count=2), 10) == pytest.approx(0.04)

    def test_low_needs_raise_risk(self, pet):
        assert onset_chance(replace(pet, hunger=20.0), 10) == pytest.approx(0.05)
        assert onset_chance(replace(pet, happiness=15.0, poop_count=1), 10) == pytest.approx(0.09)

    def test_onset_draws_medicine_steps(self, pet):
        dirty = replace(pet, poop_count=1)

        nxt = update_sickness(dirty, 10, NOW, FixedRandom([0.01, 0.9]))

        assert nxt.sickness
        assert nxt.medicine_steps_remaining == 2
        assert nxt.sick_minutes == 10

    def test_roll_miss_stays_healthy(self, pet):
        nxt = update_sickness(replace(pet, poop_count=1), 10, NOW, FixedRandom(0.5))

        assert not nxt.sickness
        assert nxt.medicine_steps_remaining == 0

    def test_already_sick_does_not_reroll(self, pet):
        sick = replace(pet, sickness=True, poop_count=3, medicine_steps_remaining=1, sick_minutes=5.0)
        rng = FixedRandom(0.0)

        nxt = update_sickness(sick, 10, NOW, rng)

        assert rng.calls == 0
        assert nxt.medicine_steps_remaining == 1
        assert nxt.sick_minutes == 15


class TestCriticalTime:
    def test_accumulates_while_sick_and_critical(self, pet):
        sick = replace(pet, sickness=True, hunger=3.0, medicine_steps_remaining=1)

        nxt = update_sickness(sick, 60, NOW, FixedRandom(0.5))

        assert nxt.critical_minutes == 60
        assert not nxt.dead

    def test_leaks_when_not_critical(self, pet):
        recovering = replace(pet, sickness=True, critical_minutes=100.0, medicine_steps_remaining=1)

        nxt = update_sickness(recovering, 60, NOW, FixedRandom(0.5))

        assert nxt.critical_minutes == 70

    def test_leak_floors_at_zero(self, pet):
        nxt = update_sickness(replace(pet, critical_minutes=10.0), 60, NOW, FixedRandom(0.5))

        assert nxt.critical_minutes == 0

    def test_critical_but_healthy_does_not_accumulate(self, pet):
        starving = replace(pet, hunger=2.0, critical_minutes=20.0)

        nxt = update_sickness(starving, 10, NOW, FixedRandom(0.99))

        assert not nxt.sickness
        assert nxt.critical_minutes == 15


class TestDeath:
    def test_dies_after_critical_ceiling(self, pet):
        sick = replace(
            pet,
            sickness=True,
            hunger=0.0,
            asleep=True,
            critical_minutes=170.0,
            medicine_steps_remaining=2,
            attention_demand=AttentionDemand(active=True, reason="bored", ts=NOW - 1),
        )

        nxt = update_sickness(sick, 10, NOW, FixedRandom(0.5))

        assert nxt.dead
        assert not nxt.asleep
        assert nxt.attention_demand == AttentionDemand(active=False, reason=None, ts=NOW)

    def test_dies_when_untreated_and_critical(self, pet):
        sick = replace(pet, sickness=True, happiness=4.0, sick_minutes=895.0, medicine_steps_remaining=1)

        nxt = update_sickness(sick, 5, NOW, FixedRandom(0.5))

        assert nxt.critical_minutes == 5
        assert nxt.dead

    def test_untreated_but_not_critical_survives(self, pet):
        sick = replace(pet, sickness=True, sick_minutes=2000.0, medicine_steps_remaining=1)

        nxt = update_sickness(sick, 60, NOW, FixedRandom(0.5))

        assert not nxt.dead

    def test_dead_is_left_alone(self, pet):
        dead = replace(pet, dead=True, sickness=True, sick_minutes=10.0)

        assert update_sickness(dead, 60, NOW, FixedRandom(0.0)) == dead


class TestHealthStatus:
    def test_statuses(self, pet):
        assert health_status(pet) == HEALTHY
        assert health_status(replace(pet, sickness=True)) == SICK
        assert health_status(replace(pet, sickness=True, dead=True)) == DEAD

    def test_cure_resets_counters(self, pet):
        sick = replace(
            pet,
            sickness=True,
            sick_minutes=40.0,
            critical_minutes=12.0,
            medicine_steps_remaining=2,
        )

        cured = cure(sick)

        assert health_status(cured) == HEALTHY
        assert (cured.sick_minutes, cured.critical_minutes, cured.medicine_steps_remaining) == (0, 0, 0)
