"""A day in the life: drive one pet through a simulated day from the terminal.

Picks an egg, hatches it, then plays a morning/afternoon/evening routine,
printing the meters after each step. The save is written to a directory;
a later run resumes the same pet and replays only the steps it has not
lived through yet.

Run:
    python examples/day_in_the_life.py
    python examples/day_in_the_life.py --seed 7 --save-dir /tmp/critter
"""
from __future__ import annotations

import argparse
import logging
import time
from dataclasses import replace

from care_critter import (
    Action,
    Dispatcher,
    JsonFileStorage,
    PerformAction,
    PetState,
    RecordMirrorSuccess,
    SelectCosmetic,
    Tick,
    load_state,
    save_state,
)
from care_critter.constants import MINUTE_MS, STORAGE_KEY

ROUTINE: list[tuple[int, object]] = [
    (0, SelectCosmetic("star", 0)),
    (1, PerformAction(Action.HATCH_EARLY, 0)),
    (30, PerformAction(Action.FEED_MEAL, 0)),
    (31, RecordMirrorSuccess(0)),
    (90, PerformAction(Action.PLAY_WIN, 0)),
    (180, Tick(0)),
    (200, PerformAction(Action.CLEAN, 0)),
    (240, PerformAction(Action.LEARN_CORRECT, 0)),
    (241, RecordMirrorSuccess(0)),
    (360, PerformAction(Action.FEED_SNACK, 0)),
    (480, Tick(0)),
    (490, PerformAction(Action.PRAISE, 0)),
]


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="care-critter - one simulated day")
    p.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    p.add_argument("--save-dir", type=str, default=".critter", help="Save directory (default: .critter)")
    p.add_argument("--verbose", action="store_true", help="Show engine debug logging")
    return p.parse_args()


def _at(cmd, now_ts: float):
    return replace(cmd, now_ts=now_ts)


def _line(label: str, state: PetState) -> str:
    flags = [name for name in ("asleep", "sickness", "dead") if getattr(state, name)]
    return (
        f"  {label:<22s} {state.stage:<6s} "
        f"hunger {state.hunger:5.1f}  happy {state.happiness:5.1f}  train {state.training:5.1f}  "
        f"poop {state.poop_count}  stars {state.stars_today}/{state.total_stars}"
        + (f"  [{', '.join(flags)}]" if flags else "")
    )


def run_day(storage: JsonFileStorage, dispatcher: Dispatcher, now_ts: float) -> PetState:
    """Replay the routine so that it ends at *now_ts*, then save.

    A pet saved part-way through an earlier run only replays the steps
    that fall after its last update.
    """
    start = now_ts - ROUTINE[-1][0] * MINUTE_MS
    saved = storage.get_item(STORAGE_KEY) is not None
    state = load_state(storage, now_ts if saved else start, dispatcher.rng)
    resumed_at = state.last_update_ts if saved else None

    state = dispatcher.dispatch(state, Tick(max(start, state.last_update_ts)))
    print(_line("resumed", state))

    for offset, cmd in ROUTINE:
        ts = start + offset * MINUTE_MS
        if resumed_at is not None and ts <= resumed_at:
            continue
        cmd = _at(cmd, ts)
        state = dispatcher.dispatch(state, cmd)
        label = cmd.action.value if isinstance(cmd, PerformAction) else type(cmd).__name__
        print(_line(f"+{offset:>3d}m {label}", state))

    save_state(state, storage)
    return state


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    storage = JsonFileStorage(args.save_dir)
    run_day(storage, Dispatcher(seed=args.seed), time.time() * 1000)
    print(f"\n  saved to {storage.path_for(STORAGE_KEY)}")


if __name__ == "__main__":
    main()
