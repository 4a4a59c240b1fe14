"""FastAPI web app for activity animation export."""

from datetime import datetime

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response

from activity_animator.activities import (
    Activity,
    ActivityDataError,
    filter_by_type,
    load_activities,
    summarize,
)
from activity_animator.animation_pipeline import build_export_request, encode_animation
from activity_animator.config import load_settings
from activity_animator.constants import (
    DEFAULT_DURATION_SECONDS,
    DEFAULT_FPS,
    DEFAULT_HEIGHT,
    DEFAULT_QUALITY,
    DEFAULT_WIDTH,
    MAX_QUALITY,
    MIN_QUALITY,
)
from activity_animator.export import ExportAlreadyInProgress, ExportArtifact, ExportError

load_dotenv()

app = FastAPI(title="Activity Animator")


def _load_activities(activity_type: str = "all") -> list[Activity]:
    settings = load_settings()
    try:
        activities = filter_by_type(load_activities(settings.activities_path), activity_type)
    except ActivityDataError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not activities:
        raise HTTPException(status_code=404, detail="No activities with tracks to animate")
    return activities


@app.get("/api/activities/summary")
def activities_summary():
    """Return counts, distance and types of the cached activities."""
    summary = summarize(_load_activities())
    return {
        "count": summary.count,
        "total_distance_km": round(summary.total_distance_km, 2),
        "types": list(summary.types),
    }


@app.get("/api/export")
def export_animation(
    activity_type: str = Query("all", alias="type", description="Activity type filter"),
    start: datetime | None = Query(None, description="Window start (ISO 8601)"),
    end: datetime | None = Query(None, description="Window end (ISO 8601)"),
    fps: float = Query(DEFAULT_FPS, gt=0),
    duration: float = Query(DEFAULT_DURATION_SECONDS, gt=0),
    width: int = Query(DEFAULT_WIDTH, gt=0),
    height: int = Query(DEFAULT_HEIGHT, gt=0),
    quality: int = Query(DEFAULT_QUALITY, ge=MIN_QUALITY, le=MAX_QUALITY),
    output_format: str = Query("gif", alias="format", description="Output format: gif or webp"),
):
    """Export an animation of the cached activities and return it as the response body."""
    # Declared sync so FastAPI runs the blocking export on its threadpool
    activities = _load_activities(activity_type)
    try:
        request = build_export_request(
            activities,
            start=start,
            end=end,
            width=width,
            height=height,
            frame_rate=fps,
            duration_seconds=duration,
            quality=quality,
            output_format=output_format,
        )
        artifact = encode_animation(activities, request)
    except ExportAlreadyInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ExportError as e:
        raise HTTPException(status_code=500, detail=f"Failed to generate animation: {e}")

    return _artifact_response(artifact)


def _artifact_response(artifact: ExportArtifact) -> Response:
    return Response(
        content=artifact.data,
        media_type=artifact.media_type,
        headers={
            "Content-Disposition": f"inline; filename={artifact.suggested_filename}",
            "X-Frame-Count": str(artifact.frame_count),
        },
    )
