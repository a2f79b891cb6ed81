"""
REST API Routes

FastAPI routes for presentation gesture coaching.
Handles HTTP requests for single-frame analysis, the tip catalog and
stored session statistics.
"""

import time
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query

from .schemas import (
    LandmarkSchema,
    PoseDetectionRequest,
    CoachTipSchema,
    AnalysisResultSchema,
    AnalyzeLandmarksRequest,
    AnalyzeResponse,
    SessionRecordSchema,
    StatsResponse,
    HealthResponse,
)
from .dependencies import (
    get_session_store,
    create_pose_detector,
    create_smile_detector,
    detector_available,
    read_smile,
)
from config import settings
from core.services import (
    ALL_TIPS,
    SessionStore,
    analyze_gesture,
    select_coach_tips,
    format_time,
)
from core.services.smile import is_smiling

# Configure logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()

# =============================================================================
# Health Check
# =============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Health check endpoint"
)
async def health_check() -> HealthResponse:
    """
    Check if the API is running and server-side detection is available.

    Landmark analysis works either way; only image frames need the detector.
    """
    return HealthResponse(
        status="healthy",
        version=settings.version,
        detector_available=detector_available()
    )


# =============================================================================
# Gesture Analysis
# =============================================================================

@router.post(
    "/analysis/landmarks",
    response_model=AnalyzeResponse,
    tags=["Gesture Analysis"],
    summary="Analyse one landmark set"
)
async def analyze_landmarks(request: AnalyzeLandmarksRequest) -> AnalyzeResponse:
    """
    Analyse landmarks detected client-side.

    Returns the gesture, impact score, posture flags and the two
    coaching tips for this frame.
    """
    start_time = time.time()

    result = analyze_gesture([lm.to_domain() for lm in request.landmarks])
    tips = select_coach_tips(
        result,
        request.elapsed_seconds,
        is_smiling(request.smile_score, settings.smile_threshold)
    )

    return AnalyzeResponse(
        analysis=AnalysisResultSchema.from_domain(result),
        tips=[CoachTipSchema.from_domain(t) for t in tips],
        processing_time_ms=(time.time() - start_time) * 1000
    )


@router.post(
    "/pose/detect",
    response_model=AnalyzeResponse,
    tags=["Gesture Analysis"],
    summary="Detect and analyse the pose in a single image"
)
async def detect_pose(request: PoseDetectionRequest) -> AnalyzeResponse:
    """
    Detect the presenter's pose in a base64-encoded image and analyse it.

    Requires the optional MediaPipe stack and model files.
    For live sessions, use the WebSocket endpoint instead.
    """
    start_time = time.time()

    try:
        from core.services.pose_detector import decode_base64_image
        detector = create_pose_detector()
    except (ImportError, FileNotFoundError) as e:
        logger.error(f"Pose detector unavailable: {e}")
        raise HTTPException(status_code=503, detail="Pose detection is not available on this server")

    smile_detector = create_smile_detector()
    try:
        image = decode_base64_image(request.image_base64)
        with detector:
            pose_frame = detector.detect_pose(
                image,
                timestamp_ms=request.timestamp_ms,
                frame_number=request.frame_number
            )
        smile = read_smile(smile_detector, image)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error(f"Pose detection failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    finally:
        if smile_detector is not None:
            smile_detector.close()

    if pose_frame is None:
        raise HTTPException(status_code=404, detail="No person detected in image")

    result = analyze_gesture(pose_frame.landmarks)
    tips = select_coach_tips(result, 0.0, is_smiling(smile, settings.smile_threshold))

    return AnalyzeResponse(
        analysis=AnalysisResultSchema.from_domain(result),
        tips=[CoachTipSchema.from_domain(t) for t in tips],
        landmarks=[LandmarkSchema.from_domain(lm) for lm in pose_frame.landmarks],
        processing_time_ms=(time.time() - start_time) * 1000
    )


# =============================================================================
# Tips
# =============================================================================

@router.get(
    "/tips",
    response_model=List[CoachTipSchema],
    tags=["Coaching"],
    summary="Coaching tip catalog"
)
async def list_tips() -> List[CoachTipSchema]:
    """Every tip the coach can show, in catalog order."""
    return [CoachTipSchema.from_domain(t) for t in ALL_TIPS]


# =============================================================================
# Stored Sessions
# =============================================================================

@router.get(
    "/sessions",
    response_model=List[SessionRecordSchema],
    tags=["Sessions"],
    summary="Recent practice sessions"
)
async def list_sessions(
    limit: int = Query(20, ge=1, le=100, description="Maximum sessions to return"),
    store: SessionStore = Depends(get_session_store),
) -> List[SessionRecordSchema]:
    """Stored session summaries, most recent first."""
    return [SessionRecordSchema.from_domain(r) for r in store.list_sessions(limit)]


@router.get(
    "/stats",
    response_model=StatsResponse,
    tags=["Sessions"],
    summary="Aggregate practice statistics"
)
async def get_stats(store: SessionStore = Depends(get_session_store)) -> StatsResponse:
    """Totals and bests across all stored sessions."""
    stats = store.load_stats()
    return StatsResponse.from_domain(stats, format_time(stats.total_time))
