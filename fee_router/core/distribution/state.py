"""Record construction and serialization for the distribution kernel.

Round-trip property (tested): ``*_from_dict(*_to_dict(r)) == r``.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Mapping, Type, TypeVar

from .math import day_index
from .types import DayPhase, HonoraryPosition, Policy, Progress

R = TypeVar("R", Policy, Progress, HonoraryPosition)


def initial_progress(now: int = 0) -> Progress:
    """Fresh record for a pool whose first crank happens at ``now``."""
    return Progress(current_day=day_index(now))


def day_phase(progress: Progress | None) -> DayPhase:
    if progress is None:
        return DayPhase.IDLE
    if progress.day_closed:
        return DayPhase.CLOSED
    if progress.page_cursor is None:
        return DayPhase.IDLE
    return DayPhase.IN_PROGRESS


def record_to_dict(record: Policy | Progress | HonoraryPosition) -> dict[str, Any]:
    return {f.name: getattr(record, f.name) for f in fields(record)}


def record_from_dict(cls: Type[R], d: Mapping[str, Any]) -> R:
    """Deserialize a record. Raises KeyError on missing fields, TypeError on bad types."""
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        val = d[f.name]
        if f.type in ("bool", bool):
            if not isinstance(val, bool):
                raise TypeError(f"{cls.__name__}.{f.name} must be bool")
            kwargs[f.name] = val
        elif f.type in ("int", int):
            if not isinstance(val, int) or isinstance(val, bool):
                raise TypeError(f"{cls.__name__}.{f.name} must be int")
            kwargs[f.name] = int(val)  # normalize int subclasses
        elif f.type == "int | None":
            if val is not None and (not isinstance(val, int) or isinstance(val, bool)):
                raise TypeError(f"{cls.__name__}.{f.name} must be int or None")
            kwargs[f.name] = None if val is None else int(val)
        else:
            if not isinstance(val, str):
                raise TypeError(f"{cls.__name__}.{f.name} must be str")
            kwargs[f.name] = val
    return cls(**kwargs)
