"""Command dispatcher: the single entry point for external callers.

Commands are frozen dataclasses routed by type. Every command except
``ImportState`` first fast-forwards the pet through the time elapsed since
its last update, then applies its own effect and stamps ``last_update_ts``.
"""
from __future__ import annotations

import os
import random
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Callable

from care_critter.clock import elapsed_minutes
from care_critter.constants import CAPS, EGG_STYLES, EGG_TO_VARIANT, STAGE_ORDER
from care_critter.decay import apply_elapsed_time
from care_critter.randomness import RandomSource
from care_critter.rewards import apply_action
from care_critter.schema import normalize_settings
from care_critter.types import Action, ActionOutcome, Millis, ParentSettings, PetState


@dataclass(frozen=True)
class Tick:
    now_ts: Millis


@dataclass(frozen=True)
class PerformAction:
    action: Action
    now_ts: Millis
    outcome: ActionOutcome = field(default_factory=ActionOutcome)


@dataclass(frozen=True)
class UpdateSettings:
    """Replace settings wholesale, or merge a mapping of partial changes."""

    settings: ParentSettings | Mapping[str, Any]
    now_ts: Millis


@dataclass(frozen=True)
class SelectCosmetic:
    egg_style: str
    now_ts: Millis


@dataclass(frozen=True)
class ImportState:
    """Swap in an already-normalised state. No decay is applied."""

    state: PetState
    now_ts: Millis


@dataclass(frozen=True)
class RecordMirrorSuccess:
    """The child completed a mirrored habit prompt."""

    now_ts: Millis


CommandHandler = Callable[[PetState, Any, RandomSource], PetState]


def _decayed(state: PetState, now_ts: Millis, rng: RandomSource) -> PetState:
    return apply_elapsed_time(state, elapsed_minutes(state.last_update_ts, now_ts), now_ts, rng)


def _on_tick(state: PetState, cmd: Tick, rng: RandomSource) -> PetState:
    return _decayed(state, cmd.now_ts, rng)


def _on_action(state: PetState, cmd: PerformAction, rng: RandomSource) -> PetState:
    decayed = _decayed(state, cmd.now_ts, rng)
    return replace(
        apply_action(decayed, cmd.action, cmd.outcome, cmd.now_ts, rng),
        last_update_ts=cmd.now_ts,
    )


def _on_settings(state: PetState, cmd: UpdateSettings, rng: RandomSource) -> PetState:
    decayed = _decayed(state, cmd.now_ts, rng)
    if isinstance(cmd.settings, ParentSettings):
        settings = cmd.settings
    else:
        settings = normalize_settings(dict(cmd.settings), decayed.settings)
    return replace(decayed, settings=settings, last_update_ts=cmd.now_ts)


def _on_cosmetic(state: PetState, cmd: SelectCosmetic, rng: RandomSource) -> PetState:
    decayed = _decayed(state, cmd.now_ts, rng)
    if cmd.egg_style not in EGG_STYLES or decayed.stage != STAGE_ORDER[0]:
        return replace(decayed, last_update_ts=cmd.now_ts)
    return replace(
        decayed,
        egg_style=cmd.egg_style,
        critter_variant=EGG_TO_VARIANT[cmd.egg_style],
        last_update_ts=cmd.now_ts,
    )


def _on_import(state: PetState, cmd: ImportState, rng: RandomSource) -> PetState:
    return replace(cmd.state, last_update_ts=cmd.now_ts)


def _on_mirror(state: PetState, cmd: RecordMirrorSuccess, rng: RandomSource) -> PetState:
    decayed = _decayed(state, cmd.now_ts, rng)
    successful = decayed.successful_mirrors_today + 1
    return replace(
        decayed,
        stars_today=min(CAPS.stars_per_day, decayed.stars_today + 1),
        total_stars=decayed.total_stars + 1,
        successful_mirrors_today=successful,
        best_day_record=max(decayed.best_day_record, successful),
        last_update_ts=cmd.now_ts,
    )


class Dispatcher:
    """Routes commands to handlers and owns a seeded random source.

    ``dispatch`` is a sequential fold step: feed it the state it returned
    last time. Pass *rng* to override the dispatcher's own generator, e.g.
    with a ``FixedRandom`` in tests.
    """

    def __init__(self, seed: int | None = None) -> None:
        if seed is None:
            seed = int.from_bytes(os.urandom(8))
        self._seed = seed
        self._rng = random.Random(seed)
        self._handlers: dict[type[Any], CommandHandler] = {
            Tick: _on_tick,
            PerformAction: _on_action,
            UpdateSettings: _on_settings,
            SelectCosmetic: _on_cosmetic,
            ImportState: _on_import,
            RecordMirrorSuccess: _on_mirror,
        }

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def rng(self) -> random.Random:
        return self._rng

    def handle(self, cmd_type: type[Any], handler: CommandHandler) -> None:
        """Register a handler for a command type. Later calls overwrite."""
        self._handlers[cmd_type] = handler

    def dispatch(self, state: PetState, cmd: Any, rng: RandomSource | None = None) -> PetState:
        """Apply *cmd* to *state* and return the new state.

        Raises ``TypeError`` if no handler is registered for the command's type.
        """
        cmd_type = type(cmd)
        handler = self._handlers.get(cmd_type)
        if handler is None:
            raise TypeError(f"No handler registered for {cmd_type.__qualname__}")
        return handler(state, cmd, rng if rng is not None else self._rng)
