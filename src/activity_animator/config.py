"""Runtime settings read from the environment (``.env`` is loaded by entry points)."""

import os
from dataclasses import dataclass
from typing import Callable, Mapping, TypeVar

from .constants import CAPTURE_PHASE_WEIGHT, DEFAULT_ENCODER_WORKERS, RENDER_SETTLE_SECONDS

ENV_PREFIX = "ACTIVITY_ANIMATOR_"
DEFAULT_ACTIVITIES_PATH = "data/activities/all_activities.json"

T = TypeVar("T")


@dataclass(frozen=True)
class Settings:
    activities_path: str = DEFAULT_ACTIVITIES_PATH
    settle_seconds: float = RENDER_SETTLE_SECONDS
    encoder_workers: int = DEFAULT_ENCODER_WORKERS
    capture_weight: float = CAPTURE_PHASE_WEIGHT


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Build settings from ``ACTIVITY_ANIMATOR_*`` environment variables.

    Raises:
        ValueError: If a variable is set to an unparsable value
    """
    env = os.environ if environ is None else environ
    settle_ms = _read(env, "SETTLE_MS", float, RENDER_SETTLE_SECONDS * 1000)
    return Settings(
        activities_path=env.get(ENV_PREFIX + "ACTIVITIES_PATH", DEFAULT_ACTIVITIES_PATH),
        settle_seconds=settle_ms / 1000,
        encoder_workers=_read(env, "ENCODER_WORKERS", int, DEFAULT_ENCODER_WORKERS),
        capture_weight=_read(env, "CAPTURE_WEIGHT", float, CAPTURE_PHASE_WEIGHT),
    )


def _read(env: Mapping[str, str], name: str, parse: Callable[[str], T], default: T) -> T:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    try:
        return parse(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {ENV_PREFIX}{name}: {raw!r}")
