"""
WebSocket Handler

Real-time practice sessions via WebSocket connection.
The frontend streams landmarks (or raw frames) and receives throttled
session snapshots, elapsed-time ticks and the final summary.
"""

import json
import time
import logging
from typing import Optional
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from .schemas import (
    WebSocketMessageType,
    WebSocketMessage,
    LandmarksMessage,
    FrameMessage,
    SessionStateSchema,
    SessionSummarySchema,
)
from .dependencies import (
    get_session_store,
    create_pose_detector,
    create_smile_detector,
    read_smile,
)
from config import settings
from core.services import SessionTracker
from core.services.smile import optional_score

# Configure logging
logger = logging.getLogger(__name__)


def _message(msg_type: WebSocketMessageType, data: dict) -> dict:
    return WebSocketMessage(
        type=msg_type,
        data=data,
        timestamp=int(time.time() * 1000)
    ).model_dump(mode="json")


class ConnectionManager:
    """
    Manages WebSocket connections.

    Each connection owns one SessionTracker and, when frames are sent,
    its own lazily created pose and smile detectors.
    """

    def __init__(self):
        self.active_connections: list[WebSocket] = []
        self.trackers: dict[WebSocket, SessionTracker] = {}
        self.pose_detectors: dict[WebSocket, object] = {}
        self.smile_detectors: dict[WebSocket, object] = {}

    async def connect(self, websocket: WebSocket) -> None:
        """Accept new WebSocket connection."""
        await websocket.accept()
        self.active_connections.append(websocket)

        async def send_tick(elapsed: int) -> None:
            await self.send_json(websocket, _message(WebSocketMessageType.TICK, {"elapsed": elapsed}))

        # Dedicated session tracker for this connection
        self.trackers[websocket] = SessionTracker(
            tuning=settings.session_tuning(),
            store=get_session_store(),
            on_tick=send_tick,
        )

        logger.info(f"New WebSocket connection. Total: {len(self.active_connections)}")

    async def disconnect(self, websocket: WebSocket) -> None:
        """Handle WebSocket disconnection."""
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

        # An abandoned session still counts towards the stats
        tracker = self.trackers.pop(websocket, None)
        if tracker is not None:
            await tracker.stop_async()

        # Clean up detectors
        for detectors in (self.pose_detectors, self.smile_detectors):
            detector = detectors.pop(websocket, None)
            if detector is not None:
                detector.close()

        logger.info(f"WebSocket disconnected. Remaining: {len(self.active_connections)}")

    def get_tracker(self, websocket: WebSocket) -> Optional[SessionTracker]:
        """Get session tracker for a connection."""
        return self.trackers.get(websocket)

    def get_detector(self, websocket: WebSocket):
        """
        Get (or create) the pose detector for a connection.

        Raises:
            ImportError, FileNotFoundError: Server-side detection unavailable
        """
        if websocket not in self.pose_detectors:
            self.pose_detectors[websocket] = create_pose_detector()
            smile_detector = create_smile_detector()
            if smile_detector is not None:
                self.smile_detectors[websocket] = smile_detector
        return self.pose_detectors[websocket]

    def get_smile_detector(self, websocket: WebSocket):
        return self.smile_detectors.get(websocket)

    async def send_json(self, websocket: WebSocket, data: dict) -> None:
        """Send JSON data to a specific connection."""
        try:
            await websocket.send_json(data)
        except Exception as e:
            logger.error(f"Failed to send WebSocket message: {e}")


# Global connection manager
manager = ConnectionManager()


async def websocket_endpoint(websocket: WebSocket) -> None:
    """
    WebSocket endpoint for live practice sessions.

    Protocol:
    1. Client connects and sends start_session
    2. Client streams landmarks (or frames for server-side detection)
    3. Server answers with session_state on every throttle tick and
       pushes a tick message about once per second
    4. Client sends end_session and receives the session summary

    Message format (client -> server):
    {
        "type": "landmarks",
        "data": {
            "landmarks": [{"x": 0.5, "y": 0.3, "visibility": 0.9}, ...],
            "smile_score": 0.6
        },
        "timestamp": 1704067200000
    }

    Message format (server -> client):
    {
        "type": "session_state",
        "data": { ...SessionStateSchema... },
        "timestamp": 1704067200025
    }
    """
    await manager.connect(websocket)

    try:
        # Main message loop
        while True:
            try:
                # Receive message from client
                data = await websocket.receive_json()

                # Process based on message type
                msg_type = data.get("type")

                if msg_type == WebSocketMessageType.START_SESSION.value:
                    await handle_start(websocket)

                elif msg_type == WebSocketMessageType.LANDMARKS.value:
                    await handle_landmarks(websocket, data)

                elif msg_type == WebSocketMessageType.FRAME.value:
                    await handle_frame(websocket, data)

                elif msg_type == WebSocketMessageType.END_SESSION.value:
                    await handle_end(websocket)
                    break

                else:
                    await manager.send_json(websocket, _message(
                        WebSocketMessageType.ERROR,
                        {"error": f"Unknown message type: {msg_type}"}
                    ))

            except json.JSONDecodeError:
                await manager.send_json(websocket, _message(
                    WebSocketMessageType.ERROR,
                    {"error": "Invalid JSON"}
                ))

    except WebSocketDisconnect:
        logger.info("Client disconnected")
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
    finally:
        await manager.disconnect(websocket)


async def handle_start(websocket: WebSocket) -> None:
    """Start (or restart) the practice session for this connection."""
    tracker = manager.get_tracker(websocket)
    tracker.start()
    await manager.send_json(websocket, _message(
        WebSocketMessageType.SESSION_STARTED,
        {"message": "Session started", "state": SessionStateSchema.from_domain(tracker.state).model_dump(mode="json")}
    ))


async def handle_landmarks(websocket: WebSocket, message: dict) -> None:
    """
    Feed client-detected landmarks into the session.
    """
    try:
        payload = LandmarksMessage(**message.get("data", {}))
    except ValidationError as e:
        await manager.send_json(websocket, _message(
            WebSocketMessageType.ERROR,
            {"error": f"Invalid landmarks message: {e.errors()[0]['msg']}"}
        ))
        return

    smile_signal = payload.is_smiling if payload.is_smiling is not None else optional_score(payload.smile_score)
    await _process(websocket, [lm.to_domain() for lm in payload.landmarks], smile_signal)


async def handle_frame(websocket: WebSocket, message: dict) -> None:
    """
    Detect the pose in a video frame server-side and feed it into the session.
    """
    try:
        payload = FrameMessage(**message.get("data", {}))
    except ValidationError:
        await manager.send_json(websocket, _message(
            WebSocketMessageType.ERROR,
            {"error": "No image data provided"}
        ))
        return

    try:
        detector = manager.get_detector(websocket)
    except (ImportError, FileNotFoundError) as e:
        logger.error(f"Pose detector unavailable: {e}")
        await manager.send_json(websocket, _message(
            WebSocketMessageType.ERROR,
            {"error": "Pose detection is not available on this server"}
        ))
        return

    try:
        from core.services.pose_detector import decode_base64_image

        image = decode_base64_image(payload.image_base64)
        pose_frame = detector.detect_pose(
            image,
            timestamp_ms=message.get("timestamp", 0),
            frame_number=payload.frame_number
        )
        smile = payload.smile_score
        if smile is None:
            smile = read_smile(manager.get_smile_detector(websocket), image)
    except Exception as e:
        logger.error(f"Frame processing error: {e}")
        await manager.send_json(websocket, _message(
            WebSocketMessageType.ERROR,
            {"error": str(e)}
        ))
        return

    if pose_frame is None:
        # No person in view; nothing to score
        return

    await _process(websocket, pose_frame.landmarks, smile)


async def handle_end(websocket: WebSocket) -> None:
    """Stop the session and send its summary."""
    tracker = manager.get_tracker(websocket)
    summary = await tracker.stop_async()

    if summary is not None:
        await manager.send_json(websocket, _message(
            WebSocketMessageType.SESSION_SUMMARY,
            SessionSummarySchema.from_domain(summary).model_dump()
        ))

    await manager.send_json(websocket, _message(
        WebSocketMessageType.SESSION_ENDED,
        {"message": "Session ended"}
    ))


async def _process(websocket: WebSocket, landmarks, smile_signal) -> None:
    tracker = manager.get_tracker(websocket)
    if not tracker.is_active:
        await manager.send_json(websocket, _message(
            WebSocketMessageType.ERROR,
            {"error": "No active session; send start_session first"}
        ))
        return

    snapshot = tracker.process_frame(landmarks, smile_signal)
    if snapshot is not None:
        await manager.send_json(websocket, _message(
            WebSocketMessageType.SESSION_STATE,
            SessionStateSchema.from_domain(snapshot).model_dump(mode="json")
        ))
