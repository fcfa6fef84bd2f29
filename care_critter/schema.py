"""Serialisation of ``PetState`` with versioned migrations.

Loading never trusts the stored blob: after migrating to the current
version, every field is normalised and merged onto a freshly created pet,
so missing or garbage fields fall back to current defaults.
"""
from __future__ import annotations

import dataclasses
import logging
import math
import re
from datetime import date
from typing import Any, Callable

from care_critter.clock import is_valid_clock
from care_critter.constants import (
    ADULT_VARIANTS,
    ATTENTION_REASONS,
    CAPS,
    CONFIRM_MODES,
    CONFIRM_TIMER,
    CRITTER_VARIANTS,
    DEFAULT_PROMPTS,
    EGG_HATCH,
    EGG_STYLES,
    EGG_TO_VARIANT,
    PROMPT_ICONS,
    PROMPT_KEYS,
    STAGE_ORDER,
)
from care_critter.decay import clamp_meter
from care_critter.lifecycle import new_pet
from care_critter.randomness import RandomSource
from care_critter.types import (
    AttentionDemand,
    CareSample,
    Millis,
    ParentSettings,
    PetState,
    PromptEntry,
    SchemaError,
    SleepWindow,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2

# Legacy saves predate egg selection; their pets hatched from this style.
LEGACY_EGG_STYLE = "speckled"

# --- Migrations ---

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")


def _snake(key: str) -> str:
    return _CAMEL_RE.sub(r"_\1", key).lower()


def _snake_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {_snake(k) if isinstance(k, str) else k: _snake_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_snake_keys(v) for v in value]
    return value


def _v0_to_v1(data: dict[str, Any]) -> dict[str, Any]:
    """Saves exported by the web app use camelCase keys throughout."""
    return _snake_keys(data)


def _v1_to_v2(data: dict[str, Any]) -> dict[str, Any]:
    """Introduce egg selection and structured per-action prompts."""
    data = dict(data)
    if "egg_style" not in data:
        data["egg_style"] = LEGACY_EGG_STYLE
    settings = data.get("settings")
    if isinstance(settings, dict) and isinstance(settings.get("per_action_prompts"), dict):
        prompts = {
            key: {"prompt_text": entry} if isinstance(entry, str) else entry
            for key, entry in settings["per_action_prompts"].items()
        }
        data["settings"] = {**settings, "per_action_prompts": prompts}
    return data


_MIGRATIONS: dict[int, Callable[[dict[str, Any]], dict[str, Any]]] = {
    0: _v0_to_v1,
    1: _v1_to_v2,
}


def migrate(data: dict[str, Any]) -> dict[str, Any]:
    """Upgrade a raw blob to ``SCHEMA_VERSION``. Unversioned blobs are v0."""
    version = data.get("version", 0)
    if not isinstance(version, int) or isinstance(version, bool) or version < 0:
        raise SchemaError(f"Invalid schema version {version!r}")
    if version > SCHEMA_VERSION:
        raise SchemaError(
            f"Unsupported schema version {version!r}, expected <= {SCHEMA_VERSION}"
        )
    while version < SCHEMA_VERSION:
        data = _MIGRATIONS[version](data)
        version += 1
        logger.info(f"Migrated save to schema v{version}")
    data["version"] = version
    return data


# --- Field normalisers ---


def _number(value: Any, fallback: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return fallback
    try:
        number = float(value)
    except OverflowError:
        return fallback
    return number if math.isfinite(number) else fallback


def _timestamp(value: Any, fallback: Millis, now_ts: Millis) -> Millis:
    """Epoch millis no earlier than 1970 and no later than *now_ts*."""
    ts = _number(value, fallback)
    return ts if 0 <= ts <= now_ts else fallback


def _meter(value: Any, fallback: float) -> float:
    return clamp_meter(_number(value, fallback))


def _count(value: Any, fallback: int = 0) -> int:
    return max(0, round(_number(value, fallback)))


def _minutes(value: Any, fallback: float = 0.0) -> float:
    return max(0.0, _number(value, fallback))


def _flag(value: Any, fallback: bool) -> bool:
    return value if isinstance(value, bool) else fallback


def _choice(value: Any, options: tuple[str, ...], fallback: Any) -> Any:
    return value if isinstance(value, str) and value in options else fallback


def _day_key(value: Any, fallback: str) -> str:
    if not isinstance(value, str):
        return fallback
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        return fallback


def _prompts(raw: Any, base: dict[str, PromptEntry]) -> dict[str, PromptEntry]:
    src = raw if isinstance(raw, dict) else {}
    prompts: dict[str, PromptEntry] = {}
    for key in PROMPT_KEYS:
        default = base.get(key) or PromptEntry(*DEFAULT_PROMPTS[key])
        entry = src.get(key)
        if isinstance(entry, str):
            prompts[key] = PromptEntry(entry, default.prompt_icon)
        elif isinstance(entry, dict):
            text = entry.get("prompt_text")
            prompts[key] = PromptEntry(
                text if isinstance(text, str) else default.prompt_text,
                _choice(entry.get("prompt_icon"), PROMPT_ICONS, default.prompt_icon),
            )
        else:
            prompts[key] = default
    return prompts


def normalize_settings(raw: Any, base: ParentSettings) -> ParentSettings:
    """Merge a raw settings mapping onto *base*, field by field."""
    src = raw if isinstance(raw, dict) else {}
    window = src.get("sleep_window")
    window = window if isinstance(window, dict) else {}
    start, end = window.get("start"), window.get("end")

    timer = src.get("timer_seconds")
    hatch = src.get("egg_hatch_seconds")
    return ParentSettings(
        mirror_enabled=_flag(src.get("mirror_enabled"), base.mirror_enabled),
        hatch_sound_enabled=_flag(src.get("hatch_sound_enabled"), base.hatch_sound_enabled),
        confirm_mode=_choice(src.get("confirm_mode"), CONFIRM_MODES, base.confirm_mode),
        timer_seconds=CONFIRM_TIMER.clamp(_number(timer, base.timer_seconds)),
        egg_hatch_seconds=EGG_HATCH.clamp(_number(hatch, base.egg_hatch_seconds)),
        per_action_prompts=_prompts(src.get("per_action_prompts"), base.per_action_prompts),
        pause_decay=_flag(src.get("pause_decay"), base.pause_decay),
        sleep_window=SleepWindow(
            start=start if is_valid_clock(start) else base.sleep_window.start,
            end=end if is_valid_clock(end) else base.sleep_window.end,
        ),
        parent_override_sleep=_flag(src.get("parent_override_sleep"), base.parent_override_sleep),
    )


def _attention(raw: Any, base: AttentionDemand) -> AttentionDemand:
    if not isinstance(raw, dict):
        return base
    active = _flag(raw.get("active"), False)
    reason = _choice(raw.get("reason"), ATTENTION_REASONS, None)
    return AttentionDemand(
        active=active,
        reason=reason if active else None,
        ts=_number(raw.get("ts"), base.ts),
    )


def _history(raw: Any, base: tuple[CareSample, ...]) -> tuple[CareSample, ...]:
    if not isinstance(raw, (list, tuple)):
        return base
    samples = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        ts = _number(entry.get("ts"), math.nan)
        score = _number(entry.get("score"), math.nan)
        if math.isnan(ts) or math.isnan(score):
            continue
        samples.append(CareSample(ts=ts, score=clamp_meter(score)))
    return tuple(samples)


def _egg_style(data: dict[str, Any], base: str | None) -> str | None:
    if "egg_style" not in data:
        return base
    value = data["egg_style"]
    if value is None:
        return None
    return _choice(value, EGG_STYLES, LEGACY_EGG_STYLE)


def _critter_variant(value: Any, egg_style: str | None) -> str | None:
    if isinstance(value, str) and value in CRITTER_VARIANTS:
        return value
    if egg_style is None:
        return None
    return EGG_TO_VARIANT[egg_style]


# --- Public API ---


def to_dict(state: PetState) -> dict[str, Any]:
    """JSON-compatible dict of *state*, tagged with the schema version."""
    return {"version": SCHEMA_VERSION, **dataclasses.asdict(state)}


def from_dict(raw: Any, now_ts: Millis, rng: RandomSource) -> PetState:
    """Build a ``PetState`` from a stored blob of any supported version.

    Raises ``SchemaError`` if *raw* is not a mapping or its version is
    unknown. Field-level problems never raise; they fall back to defaults.
    """
    if not isinstance(raw, dict):
        raise SchemaError(f"State blob must be an object, got {type(raw).__name__}")
    data = migrate(dict(raw))
    base = new_pet(now_ts, rng)

    egg_style = _egg_style(data, base.egg_style)
    next_poop = _count(data.get("next_poop_in_minutes"), base.next_poop_in_minutes)
    successful_today = _count(data.get("successful_mirrors_today"))

    return PetState(
        hunger=_meter(data.get("hunger"), base.hunger),
        happiness=_meter(data.get("happiness"), base.happiness),
        training=_meter(data.get("training"), base.training),
        weight=max(CAPS.min_weight, _count(data.get("weight"), base.weight)),
        stage=_choice(data.get("stage"), STAGE_ORDER, base.stage),
        age_days=_count(data.get("age_days"), base.age_days),
        asleep=_flag(data.get("asleep"), base.asleep),
        sickness=_flag(data.get("sickness"), base.sickness),
        dead=_flag(data.get("dead"), base.dead),
        poop_count=_count(data.get("poop_count"), base.poop_count),
        poop_progress_minutes=_minutes(data.get("poop_progress_minutes")),
        next_poop_in_minutes=next_poop if next_poop >= 1 else base.next_poop_in_minutes,
        snack_count_today=_count(data.get("snack_count_today")),
        last_snack_reset_date=_day_key(data.get("last_snack_reset_date"), base.last_snack_reset_date),
        sick_minutes=_minutes(data.get("sick_minutes")),
        critical_minutes=_minutes(data.get("critical_minutes")),
        medicine_steps_remaining=_count(data.get("medicine_steps_remaining")),
        attention_demand=_attention(data.get("attention_demand"), base.attention_demand),
        care_score_history=_history(data.get("care_score_history"), base.care_score_history),
        egg_style=egg_style,
        critter_variant=_critter_variant(data.get("critter_variant"), egg_style),
        adult_variant=_choice(data.get("adult_variant"), ADULT_VARIANTS, base.adult_variant),
        settings=normalize_settings(data.get("settings"), base.settings),
        stage_started_ts=_timestamp(data.get("stage_started_ts"), base.stage_started_ts, now_ts),
        created_ts=_timestamp(data.get("created_ts"), base.created_ts, now_ts),
        last_update_ts=_timestamp(data.get("last_update_ts"), base.last_update_ts, now_ts),
        last_care_snapshot_ts=_timestamp(
            data.get("last_care_snapshot_ts"), base.last_care_snapshot_ts, now_ts
        ),
        stars_today=min(CAPS.stars_per_day, _count(data.get("stars_today"))),
        total_stars=_count(data.get("total_stars")),
        successful_mirrors_today=successful_today,
        best_day_record=max(_count(data.get("best_day_record")), successful_today),
    )
