"""Export size and timing experiment across dimensions, frame rates and durations."""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Sequence

from .activities import Activity
from .animation_pipeline import encode_animation
from .constants import DEFAULT_QUALITY
from .export import ExportArtifact, ExportError, ExportRequest

logger = logging.getLogger(__name__)

ExportRunner = Callable[[Sequence[Activity], ExportRequest], ExportArtifact]


@dataclass(frozen=True)
class ExperimentSet:
    name: str
    fixed: dict[str, float]
    tests: tuple[dict[str, float], ...]

    def configs(self) -> list[dict[str, float]]:
        return [{**self.fixed, **test} for test in self.tests]


EXPERIMENT_SETS: dict[str, ExperimentSet] = {
    "dimensions": ExperimentSet(
        name="Dimension Impact",
        fixed={"duration": 10, "fps": 15},
        tests=(
            {"width": 800, "height": 600},
            {"width": 1200, "height": 800},
            {"width": 1600, "height": 1200},
            {"width": 1920, "height": 1080},
        ),
    ),
    "fps": ExperimentSet(
        name="FPS Impact",
        fixed={"width": 1200, "height": 800, "duration": 10},
        tests=({"fps": 10}, {"fps": 15}, {"fps": 20}, {"fps": 30}),
    ),
    "duration": ExperimentSet(
        name="Duration Impact",
        fixed={"width": 1200, "height": 800, "fps": 15},
        tests=({"duration": 5}, {"duration": 10}, {"duration": 15}, {"duration": 20}),
    ),
}


@dataclass
class ExperimentResult:
    config: dict[str, float]
    activity_count: int
    size_bytes: int | None = None
    seconds: float | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def size_mb(self) -> float:
        return (self.size_bytes or 0) / (1024 * 1024)

    @property
    def megapixels(self) -> float:
        return self.config["width"] * self.config["height"] / 1_000_000

    @property
    def total_frames(self) -> int:
        return int(self.config["fps"] * self.config["duration"])


@dataclass
class ExperimentReport:
    results: dict[str, list[ExperimentResult]] = field(default_factory=dict)

    def to_markdown(self) -> str:
        sections = []
        for key, results in self.results.items():
            experiment_set = EXPERIMENT_SETS.get(key)
            title = experiment_set.name if experiment_set else key
            lines = [
                f"### {title}",
                "",
                "| Width | Height | FPS | Duration | Total Frames | Size (MB) | Time (s) |",
                "|-------|--------|-----|----------|--------------|-----------|----------|",
            ]
            for r in results:
                if not r.ok:
                    continue
                lines.append(
                    f"| {r.config['width']} | {r.config['height']} | {r.config['fps']} "
                    f"| {r.config['duration']} | {r.total_frames} | {r.size_mb:.2f} "
                    f"| {r.seconds:.1f} |"
                )
            sections.append("\n".join(lines))
        return "\n\n".join(sections) + "\n"


def window_for_activity_count(
    activities: Sequence[Activity], target_count: int
) -> tuple[datetime, datetime, int]:
    """
    Pick a time window centred in the data covering about ``target_count`` activities.

    Returns:
        (start, end, number of activities in the window)
    """
    if not activities:
        raise ValueError("No activities loaded")

    ordered = sorted(activities, key=lambda a: a.start_time)
    mid = len(ordered) // 2
    start_index = max(0, mid - target_count // 2)
    end_index = min(len(ordered) - 1, start_index + target_count - 1)
    start = ordered[start_index].start_time
    end = max(a.end_time for a in ordered[start_index:end_index + 1])
    return start, end, end_index - start_index + 1


def run_experiment(
    activities: Sequence[Activity],
    set_names: Sequence[str] | None = None,
    target_activity_count: int = 50,
    quality: int = DEFAULT_QUALITY,
    run_export: ExportRunner = encode_animation,
    clock: Callable[[], float] = time.perf_counter,
    on_result: Callable[[str, ExperimentResult], None] | None = None,
) -> ExperimentReport:
    """
    Export every configuration of the selected sets and record size and time.

    A failed export is recorded with its error and the run continues.
    """
    names = list(set_names) if set_names else list(EXPERIMENT_SETS)
    start, end, activity_count = window_for_activity_count(activities, target_activity_count)
    report = ExperimentReport()

    for name in names:
        experiment_set = EXPERIMENT_SETS[name]
        report.results[name] = []
        for config in experiment_set.configs():
            request = ExportRequest(
                start=start,
                end=end,
                width=int(config["width"]),
                height=int(config["height"]),
                frame_rate=config["fps"],
                duration_seconds=config["duration"],
                quality=quality,
            )
            began = clock()
            try:
                artifact = run_export(activities, request)
            except ExportError as e:
                logger.warning("Experiment export failed for %s: %s", config, e)
                result = ExperimentResult(config, activity_count, error=str(e))
            else:
                result = ExperimentResult(
                    config,
                    activity_count,
                    size_bytes=artifact.size_bytes,
                    seconds=clock() - began,
                )
            report.results[name].append(result)
            if on_result is not None:
                on_result(name, result)

    return report
