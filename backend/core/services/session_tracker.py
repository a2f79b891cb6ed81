"""
Session Tracker Service

Stateful core of a practice session. Feeds every frame through the
gesture analyzer, smooths the impact score on a ~300 ms throttle and
accumulates counters, streaks, tips and celebration triggers into a
SessionState snapshot.

Frames arrive serially from the capture loop; all work is synchronous.
The only concurrent piece is the ~1 Hz elapsed-time tick, which runs as
an asyncio task when a session is started inside an event loop.
"""

import asyncio
import inspect
import logging
import math
import time
from collections import deque
from typing import Awaitable, Callable, Deque, List, Optional, Sequence, Union

from ..constants import SessionTuning, DEFAULT_TUNING
from ..domain.pose import PoseLandmark
from ..domain.analysis import (
    AnalysisResult,
    CoachTip,
    GestureType,
    SessionState,
    SessionSummary,
)
from .coach_tips import select_coach_tips, SLOUCH_TIP_ID
from .geometry import round_half_up
from .gesture_analyzer import GestureAnalyzer
from .session_store import SessionStore
from .smile import SmileSignal, is_smiling

logger = logging.getLogger(__name__)

TickCallback = Callable[[int], Union[None, Awaitable[None]]]


class TipDebouncer:
    """
    Holds the displayed tips steady long enough to read.

    The displayed set changes when the slouch tip appears or disappears
    (always immediately), or when the candidates differ and at least
    `min_hold` seconds passed since the last change.
    """

    def __init__(self, min_hold: float, priority_tip_id: str = SLOUCH_TIP_ID):
        self.min_hold = min_hold
        self.priority_tip_id = priority_tip_id
        self.displayed: List[CoachTip] = []
        self.last_change: Optional[float] = None

    def reset(self) -> None:
        self.displayed = []
        self.last_change = None

    def update(self, candidates: Sequence[CoachTip], now: float) -> bool:
        """Offer new candidates; returns True when the displayed set changed."""
        candidate_ids = tuple(tip.id for tip in candidates)
        shown_ids = tuple(tip.id for tip in self.displayed)
        if candidate_ids == shown_ids:
            return False

        priority_flipped = (
            (self.priority_tip_id in candidate_ids) != (self.priority_tip_id in shown_ids)
        )
        hold_elapsed = self.last_change is None or now - self.last_change >= self.min_hold

        if priority_flipped or hold_elapsed:
            self.displayed = list(candidates)
            self.last_change = now
            return True
        return False


class SessionTracker:
    """
    Tracks one practice session at a time.

    Usage:
        tracker = SessionTracker(store=InMemorySessionStore())
        tracker.start()

        for landmarks, smile in frames:
            snapshot = tracker.process_frame(landmarks, smile)
            if snapshot:
                render(snapshot)

        summary = tracker.stop()
    """

    def __init__(
        self,
        analyzer: Optional[GestureAnalyzer] = None,
        tuning: SessionTuning = DEFAULT_TUNING,
        clock: Callable[[], float] = time.monotonic,
        store: Optional[SessionStore] = None,
        on_tick: Optional[TickCallback] = None,
    ):
        """
        Args:
            analyzer: Frame analyzer (default thresholds if omitted)
            tuning: Temporal aggregation constants
            clock: Seconds source; must be monotonic
            store: Receives the summary when a session stops
            on_tick: Called with elapsed seconds on every ~1 Hz tick;
                may be a coroutine function
        """
        self.analyzer = analyzer or GestureAnalyzer()
        self.tuning = tuning
        self.store = store
        self.on_tick = on_tick
        self._clock = clock

        self._active = False
        self._tick_task: Optional[asyncio.Task] = None
        self._last_summary: Optional[SessionSummary] = None
        self._reset()

    # -------------------------------------------------------------------------
    # Session Boundary
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Reset everything and begin a new session."""
        if self._active:
            logger.info("Session restarted while active; discarding previous session")
            self._cancel_ticker()

        self._reset()
        self._active = True
        self._start_time = self._clock()
        self._state = SessionState(is_active=True)
        self._start_ticker()
        logger.info("Session started")

    def stop(self) -> Optional[SessionSummary]:
        """
        End the session and hand its summary to the store.

        Safe to call when idle (returns None).
        """
        summary = self._finish()
        if summary is not None:
            self._persist(summary)
        return summary

    async def stop_async(self) -> Optional[SessionSummary]:
        """
        stop() for use inside an event loop.

        The store write runs in a worker thread so file I/O never
        blocks the loop.
        """
        summary = self._finish()
        if summary is not None:
            await asyncio.to_thread(self._persist, summary)
        return summary

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def state(self) -> SessionState:
        """Copy of the latest snapshot."""
        return self._state.copy()

    @property
    def last_summary(self) -> Optional[SessionSummary]:
        return self._last_summary

    # -------------------------------------------------------------------------
    # Frame Processing
    # -------------------------------------------------------------------------

    def process_frame(
        self,
        landmarks: Sequence[Optional[PoseLandmark]],
        smile_signal: SmileSignal = None,
        timestamp: Optional[float] = None,
    ) -> Optional[SessionState]:
        """
        Ingest one frame.

        Args:
            landmarks: Landmark set for this frame
            smile_signal: Smile score (0-1), bool, or None when unavailable
            timestamp: Frame time in the tracker clock's timebase
                (defaults to now)

        Returns:
            A snapshot when this frame triggered a throttle tick, else None.
            Idle sessions and empty frames are ignored.
        """
        if not self._active:
            return None
        if not landmarks:
            logger.debug("Skipping empty landmark frame")
            return None

        now = self._clock() if timestamp is None else timestamp
        result = self.analyzer.analyze(landmarks)
        smiling = is_smiling(smile_signal, self.tuning.smile_threshold)

        self._update_edge_counters(result, smile_signal, smiling)

        self._impact_buffer.append(result.impact)
        if self._last_sample is not None and now - self._last_sample < self.tuning.throttle_interval:
            return None
        self._last_sample = now

        return self._sample(result, smiling, now)

    def tick(self, now: Optional[float] = None) -> int:
        """Refresh elapsed seconds from the clock; returns the new value."""
        if not self._active:
            return self._state.elapsed
        now = self._clock() if now is None else now
        self._state.elapsed = max(self._state.elapsed, self._elapsed_seconds(now))
        return self._state.elapsed

    # -------------------------------------------------------------------------
    # Private Helper Methods
    # -------------------------------------------------------------------------

    def _reset(self) -> None:
        t = self.tuning
        self._start_time = 0.0
        self._state = SessionState()

        self._impact_buffer: Deque[int] = deque(maxlen=t.smoothing_samples)
        self._impact_total = 0
        self._impact_samples = 0
        self._last_sample: Optional[float] = None

        self._last_gesture = GestureType.REST
        self._high_impact_start: Optional[float] = None
        self._last_celebration: Optional[float] = None

        self._last_smiling = False
        self._last_slouching = False
        self._good_posture_seconds = 0.0

        self._tips = TipDebouncer(t.min_tip_hold)

    def _finish(self) -> Optional[SessionSummary]:
        if not self._active:
            return None

        self._active = False
        self._cancel_ticker()
        self._state.elapsed = max(self._state.elapsed, self._elapsed_seconds(self._clock()))
        self._state.is_active = False
        self._state.celebration = False

        summary = SessionSummary.from_state(self._state)
        self._last_summary = summary

        logger.info(
            f"Session stopped after {summary.duration}s: "
            f"{summary.gestures} gestures, peak impact {summary.peak_impact}"
        )
        return summary

    def _persist(self, summary: SessionSummary) -> None:
        if self.store is None:
            return
        try:
            self.store.save(summary)
        except Exception as e:
            logger.error(f"Failed to store session summary: {e}")

    def _elapsed_seconds(self, now: float) -> int:
        return max(0, int(math.floor(now - self._start_time)))

    def _update_edge_counters(
        self,
        result: AnalysisResult,
        smile_signal: SmileSignal,
        smiling: bool,
    ) -> None:
        """Count false -> true transitions only, not sustained frames."""
        # Without a face signal there is nothing to count
        if smile_signal is not None:
            if smiling and not self._last_smiling:
                self._state.smile_count += 1
            self._last_smiling = smiling

        if result.is_slouching and not self._last_slouching:
            self._state.slouch_count += 1
        self._last_slouching = result.is_slouching

    def _sample(self, result: AnalysisResult, smiling: bool, now: float) -> SessionState:
        """Throttled update: smoothing, counters, streaks, tips, celebration."""
        t = self.tuning
        state = self._state
        elapsed = now - self._start_time

        smoothed = round_half_up(sum(self._impact_buffer) / len(self._impact_buffer))
        self._impact_total += smoothed
        self._impact_samples += 1
        average = round_half_up(self._impact_total / self._impact_samples)
        state.peak_impact = max(state.peak_impact, smoothed)

        # Gesture count: transitions into power moves
        if (
            result.is_power_move
            and result.gesture != self._last_gesture
            and result.impact > t.gesture_min_impact
        ):
            state.gestures += 1
            logger.debug(f"Power move counted: {result.gesture.value}")
        self._last_gesture = result.gesture

        # Streak: sustained high impact, no grace period on drop
        if smoothed >= t.streak_threshold:
            if self._high_impact_start is None:
                self._high_impact_start = now
            elif now - self._high_impact_start >= t.streak_min_seconds:
                state.streak = int(math.floor(now - self._high_impact_start))
                state.best_streak = max(state.best_streak, state.streak)
        else:
            self._high_impact_start = None
            state.streak = 0

        # Good posture time is a duration integral over throttle ticks
        if smoothed >= t.good_posture_floor and not result.is_slouching:
            self._good_posture_seconds += t.good_posture_credit
        state.good_posture_seconds = max(
            state.good_posture_seconds, round_half_up(self._good_posture_seconds)
        )

        # Celebration with warm-up exclusion and cooldown
        celebrate = (
            smoothed >= t.celebration_threshold
            and elapsed >= t.celebration_min_elapsed
            and (
                self._last_celebration is None
                or now - self._last_celebration >= t.celebration_cooldown
            )
        )
        if celebrate:
            self._last_celebration = now
            logger.info(f"Celebration triggered at impact {smoothed}")

        self._tips.update(select_coach_tips(result, elapsed, smiling), now)

        state.elapsed = max(state.elapsed, self._elapsed_seconds(now))
        state.impact = smoothed
        state.average_impact = average
        state.gesture = result.gesture
        state.tips = list(self._tips.displayed)
        state.celebration = celebrate
        state.is_slouching = result.is_slouching
        state.nose_above_shoulder = result.nose_above_shoulder

        return state.copy()

    # -------------------------------------------------------------------------
    # Elapsed Ticker
    # -------------------------------------------------------------------------

    def _start_ticker(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop: elapsed time still advances on every sample
            return
        self._tick_task = loop.create_task(self._run_ticker())

    def _cancel_ticker(self) -> None:
        if self._tick_task is not None:
            self._tick_task.cancel()
            self._tick_task = None

    async def _run_ticker(self) -> None:
        while self._active:
            await asyncio.sleep(self.tuning.tick_interval)
            if not self._active:
                break
            elapsed = self.tick()
            if self.on_tick is not None:
                outcome = self.on_tick(elapsed)
                if inspect.isawaitable(outcome):
                    await outcome
