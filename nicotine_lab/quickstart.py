"""Command-line helper for exploring the nicotine circuit locally."""

from __future__ import annotations

import argparse
import json
from typing import Dict, Iterable, Mapping, Sequence

from .engine.parameters import ParameterError, ParameterSet
from .simulation import Preset, SimulationDriver, SimulationError, available_presets


class QuickstartError(Exception):
    """Raised when the quickstart helper receives invalid input."""


def _parse_param_override(values: Iterable[str]) -> Dict[str, float]:
    overrides: Dict[str, float] = {}
    for value in values:
        try:
            name_part, number_part = value.split("=", 1)
            overrides[name_part.strip()] = float(number_part)
        except ValueError as exc:
            raise QuickstartError(
                "Parameter overrides must use the format NAME=VALUE (for example desensWindowMin=30)"
            ) from exc
    return overrides


def run_quickstart(
    preset: Preset | str = Preset.SINGLE_PUFF,
    *,
    minutes: float = 60.0,
    dt_min: float = 1.0,
    seed: int | None = 0,
    puffs: int = 0,
    advance: int = 0,
    params: Mapping[str, float] | None = None,
) -> Dict[str, object]:
    """Run a scenario in continuous mode and return a structured summary.

    ``puffs`` manual puffs are applied right after the preset, then the loop
    runs for ``minutes`` in ``dt_min`` frames, followed by ``advance``
    fast-forward batches.
    """

    if minutes < 0:
        raise QuickstartError("Minutes must be non-negative")
    if dt_min <= 0:
        raise QuickstartError("The frame step must be positive")
    if puffs < 0 or advance < 0:
        raise QuickstartError("Puff and batch counts must be non-negative")

    try:
        parameter_set = ParameterSet().merged(params or {})
        driver = SimulationDriver(parameter_set, seed=seed, preset=preset)
    except (ParameterError, SimulationError) as exc:
        raise QuickstartError(str(exc)) from exc

    for _ in range(puffs):
        driver.do_puff()

    frames = int(minutes // dt_min)
    deltas = [dt_min] * frames
    remainder = minutes - frames * dt_min
    if remainder > 1e-9:
        deltas.append(remainder)
    puff_count = sum(1 for result in driver.run_continuous(deltas) if result.point.puff_occurred)

    for _ in range(advance):
        driver.advance60()

    snapshot = driver.snapshot()
    value_min, value_max = driver.trace.value_range()
    recovery = {}
    for pathway in ("da", "gaba"):
        clock = driver.recovery_clock(pathway)
        recovery[pathway] = clock.to_dict() if clock is not None else None

    return {
        "preset": snapshot.preset.value,
        "sim_min": snapshot.sim_min,
        "params": snapshot.params.to_dict(),
        "state": snapshot.state.to_dict(),
        "dominant_states": {name: state.value for name, state in snapshot.dominant_states.items()},
        "desens_start": dict(snapshot.desens_start),
        "recovery": recovery,
        "sampled_puffs": puff_count,
        "trace": {
            "points": len(driver.trace),
            "value_range": [value_min, value_max],
            "puff_times": driver.trace.puff_times(),
        },
    }


def summarise_quickstart(payload: Mapping[str, object]) -> str:
    """Create a human-readable summary of a quickstart run."""

    state = payload.get("state", {})
    dominant = payload.get("dominant_states", {})
    recovery = payload.get("recovery", {})
    trace = payload.get("trace", {})

    lines = [f"Preset {payload.get('preset')} after {float(payload.get('sim_min', 0.0)):.1f} simulated minutes:"]
    if isinstance(state, Mapping):
        for key, label in (("nicotine", "Nicotine"), ("da", "Dopamine"), ("gaba", "GABA"), ("direct", "Direct pathway"), ("indirect", "Indirect pathway")):
            value = state.get(key)
            if isinstance(value, (int, float)):
                lines.append(f"  • {label}: {value * 100:.0f}%")
    if isinstance(dominant, Mapping):
        lines.append("\nα4β2 pools:")
        for pathway, name in dominant.items():
            line = f"  • {pathway.upper()}: {name}"
            clock = recovery.get(pathway) if isinstance(recovery, Mapping) else None
            if isinstance(clock, Mapping):
                line += f" (recovery window {clock['remaining_min']} min remaining)"
            lines.append(line)
    if isinstance(trace, Mapping):
        lines.append(f"\nTimeline: {trace.get('points', 0)} points, {payload.get('sampled_puffs', 0)} sampled puffs")
    return "\n".join(lines)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the nicotine circuit simulation with friendly defaults.")
    parser.add_argument("--preset", choices=[preset.value for preset in Preset], default=Preset.SINGLE_PUFF.value, help="Scenario to start from")
    parser.add_argument("--minutes", type=float, default=60.0, help="Simulated minutes to run in continuous mode")
    parser.add_argument("--dt", type=float, default=1.0, help="Frame length in simulated minutes")
    parser.add_argument("--seed", type=int, default=0, help="Seed for the puff sampler")
    parser.add_argument("--puff", type=int, default=0, help="Manual puffs applied before the run")
    parser.add_argument("--advance", type=int, default=0, help="Number of +60 min fast-forward batches after the run")
    parser.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Override a kinetic parameter (repeatable)",
    )
    parser.add_argument("--json", action="store_true", help="Print the raw JSON payload instead of a summary")
    parser.add_argument("--list-presets", action="store_true", help="List built-in presets and exit")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.list_presets:
        lines = ["Available presets:"]
        for preset, config in available_presets().items():
            lines.append(f"  • {preset.value}: {config.description}")
        print("\n".join(lines))
        return 0

    try:
        payload = run_quickstart(
            args.preset,
            minutes=args.minutes,
            dt_min=args.dt,
            seed=args.seed,
            puffs=args.puff,
            advance=args.advance,
            params=_parse_param_override(args.param),
        )
    except QuickstartError as exc:
        parser.error(str(exc))
        return 2

    if args.json:
        print(json.dumps(payload, indent=2, sort_keys=True, default=float))
    else:
        print(summarise_quickstart(payload))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
