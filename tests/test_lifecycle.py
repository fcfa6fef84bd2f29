"""Tests for pet creation, care scoring and stage progression."""
from dataclasses import replace

import pytest

from care_critter.constants import DAY_MS, MINUTE_MS
from care_critter.lifecycle import (
    advance_stage,
    average_care_score,
    care_score,
    new_pet,
    resolve_adult_variant,
    stage_duration_ms,
)
from care_critter.randomness import FixedRandom
from care_critter.types import CareSample, ParentSettings

T0 = 1_770_000_000_000.0
EGG_MS = 5 * MINUTE_MS


@pytest.fixture
def pet():
    return new_pet(T0, FixedRandom(0.5))


class TestNewPet:
    def test_defaults(self, pet):
        assert pet.stage == "egg"
        assert (pet.hunger, pet.happiness, pet.training) == (70, 70, 30)
        assert pet.weight == 8
        assert pet.egg_style is None
        assert pet.critter_variant is None
        assert pet.adult_variant == "C"
        assert not pet.asleep and not pet.sickness and not pet.dead
        assert pet.created_ts == pet.stage_started_ts == pet.last_update_ts == T0
        assert pet.care_score_history == (CareSample(ts=T0, score=56.67),)

    def test_waste_interval_bounds(self):
        assert new_pet(T0, FixedRandom(0.0)).next_poop_in_minutes == 60
        assert new_pet(T0, FixedRandom(0.999)).next_poop_in_minutes == 120

    def test_only_one_roll(self):
        rng = FixedRandom(0.5)
        new_pet(T0, rng)
        assert rng.calls == 1

    def test_keeps_given_settings(self):
        settings = ParentSettings(timer_seconds=30)
        assert new_pet(T0, FixedRandom(0.5), settings).settings is settings


class TestCareScore:
    def test_care_score_is_mean_of_meters(self, pet):
        assert care_score(replace(pet, hunger=90.0, happiness=60.0, training=30.0)) == 60

    def test_empty_history_defaults(self):
        assert average_care_score(()) == 50

    def test_average(self):
        history = (CareSample(ts=1, score=80.0), CareSample(ts=2, score=70.0))
        assert average_care_score(history) == 75


class TestAdultTiers:
    @pytest.mark.parametrize(
        "score, variant",
        [(100, "A"), (75, "A"), (74.99, "B"), (50, "B"), (49.99, "C"), (0, "C")],
    )
    def test_thresholds(self, score, variant):
        assert resolve_adult_variant(score) == variant


class TestStageDurations:
    def test_egg_uses_settings(self):
        assert stage_duration_ms("egg", ParentSettings()) == EGG_MS
        assert stage_duration_ms("egg", ParentSettings(egg_hatch_seconds=15)) == 15_000

    def test_adult_is_final(self):
        assert stage_duration_ms("adult", ParentSettings()) == float("inf")


class TestAdvanceStage:
    def test_egg_hatches_at_five_minutes(self, pet):
        assert advance_stage(pet, T0 + EGG_MS - 1000).stage == "egg"

        hatched = advance_stage(pet, T0 + EGG_MS)
        assert hatched.stage == "baby"
        assert hatched.stage_started_ts == T0 + EGG_MS

    def test_custom_hatch_time(self):
        quick = new_pet(T0, FixedRandom(0.5), ParentSettings(egg_hatch_seconds=15))

        assert advance_stage(quick, T0 + 15_000).stage == "baby"

    def test_leftover_time_carries(self, pet):
        later = advance_stage(pet, T0 + EGG_MS + DAY_MS + 3 * MINUTE_MS)

        assert later.stage == "child"
        assert later.stage_started_ts == T0 + EGG_MS + DAY_MS

    def test_one_jump_to_adult(self, pet):
        adult = advance_stage(pet, T0 + EGG_MS + 5 * DAY_MS)

        assert adult.stage == "adult"
        assert adult.stage_started_ts == T0 + EGG_MS + 5 * DAY_MS

    def test_adult_never_advances(self, pet):
        adult = advance_stage(pet, T0 + EGG_MS + 5 * DAY_MS)

        assert advance_stage(adult, T0 + 400 * DAY_MS) == adult

    def test_hourly_steps_never_regress(self, pet):
        order = ("egg", "baby", "child", "teen", "adult")
        state = pet
        last = 0
        for hour in range(1, 24 * 7):
            state = advance_stage(state, T0 + hour * 60 * MINUTE_MS)
            index = order.index(state.stage)
            assert index >= last
            last = index
        assert state.stage == "adult"


class TestVariants:
    @pytest.mark.parametrize(
        "egg_style, variant",
        [("speckled", "sunny"), ("striped", "stripe"), ("star", "astro"), ("leaf", "forest"), (None, "sunny")],
    )
    def test_hatch_resolves_variant(self, pet, egg_style, variant):
        hatched = advance_stage(replace(pet, egg_style=egg_style), T0 + EGG_MS)

        assert hatched.critter_variant == variant

    def test_existing_variant_is_kept(self, pet):
        hatched = advance_stage(replace(pet, egg_style="star", critter_variant="forest"), T0 + EGG_MS)

        assert hatched.critter_variant == "forest"

    def test_adult_tier_from_recent_care(self, pet):
        reach = T0 + EGG_MS + 5 * DAY_MS
        cared = replace(pet, care_score_history=(CareSample(ts=reach - 60 * MINUTE_MS, score=90.0),))

        assert advance_stage(cared, reach).adult_variant == "A"

    def test_adult_tier_ignores_old_care(self, pet):
        reach = T0 + EGG_MS + 5 * DAY_MS
        stale = replace(pet, care_score_history=(CareSample(ts=T0, score=95.0),))

        assert advance_stage(stale, reach).adult_variant == "B"

    def test_adult_tier_neglect(self, pet):
        reach = T0 + EGG_MS + 5 * DAY_MS
        neglected = replace(pet, care_score_history=(CareSample(ts=reach - MINUTE_MS, score=20.0),))

        assert advance_stage(neglected, reach).adult_variant == "C"
