"""Session-level simulation components.

The :mod:`nicotine_lab.simulation` package wraps the pure transition of
:mod:`nicotine_lab.engine` in a stateful :class:`SimulationDriver` offering
the continuous, discrete-puff and fast-forward modes, together with the
scenario presets, the timeline :class:`TraceBuffer` and the recovery clock
shown next to desensitized pathways.
"""

from .driver import (
    BATCH_STEPS,
    BatchResult,
    DriverSnapshot,
    PATHWAYS,
    SimulationDriver,
    SimulationError,
    TickResult,
)
from .presets import DEFAULT_PRESET, Preset, PresetConfig, available_presets, get_preset
from .recovery import RecoveryClock
from .trace import BATCH_CAP, TimelineBand, TraceBuffer, TracePoint, WINDOW_MIN

__all__ = [
    "BATCH_CAP",
    "BATCH_STEPS",
    "BatchResult",
    "DEFAULT_PRESET",
    "DriverSnapshot",
    "PATHWAYS",
    "Preset",
    "PresetConfig",
    "RecoveryClock",
    "SimulationDriver",
    "SimulationError",
    "TickResult",
    "TimelineBand",
    "TracePoint",
    "TraceBuffer",
    "WINDOW_MIN",
    "available_presets",
    "get_preset",
]
