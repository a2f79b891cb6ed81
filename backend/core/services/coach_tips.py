"""
Coach Tips Service

Fixed catalog of coaching tips and the rules that pick which two to show
for a given analysis result.
"""

from typing import Dict, List, Optional

from ..domain.analysis import AnalysisResult, CoachTip, GestureType


# =============================================================================
# Tip Catalog
# =============================================================================

ALL_TIPS: tuple[CoachTip, ...] = (
    CoachTip("open-palms", "Palms open — builds trust with your audience!", "👐", 1),
    CoachTip("raise-hands", "Raise hands to chest level on key points", "🙌", 2),
    CoachTip("extend-arms", "Extend arms wider — project more authority", "💪", 3),
    CoachTip("chest-open", "Keep shoulders back and chest open", "🏆", 4),
    CoachTip("no-face-touch", "Avoid touching your face — it signals doubt", "🚫", 1),
    CoachTip("mirror-arms", "Mirror your arms for powerful emphasis", "🔄", 5),
    CoachTip("slow-gestures", "Slow your gestures — deliberate > frantic", "🎯", 6),
    CoachTip("above-waist", "Keep gestures above the waist to stay visible", "⬆️", 2),
    CoachTip("steeple", 'Try the "steeple" — fingertips touching = confidence', "🤝", 7),
    CoachTip("room-size", "Scale gestures to your audience size — go bigger!", "📢", 8),
    CoachTip("stillness", "Pause with stillness for dramatic effect", "⏸️", 9),
    CoachTip("symmetry", "Balance both sides — asymmetry looks uncertain", "⚖️", 3),
    CoachTip("power-pose", "Arms up + wide — the ultimate power move!", "⚡", 1),
    CoachTip("open-chest", "Open chest toward camera for maximum presence", "🌟", 4),
    CoachTip("slouching", "Sit up straight — upright posture commands respect!", "🪑", 1),
    CoachTip("smile", "Smile! Warmth and confidence go hand in hand.", "😊", 3),
)

_TIPS_BY_ID: Dict[str, CoachTip] = {tip.id: tip for tip in ALL_TIPS}

SLOUCH_TIP_ID = "slouching"
MAX_TIPS = 2

# Rule thresholds
LOW_SYMMETRY = 60
SHORT_ARM_ANGLE = 100
IDLE_SECONDS = 5
HIGH_IMPACT = 75
NO_SMILE_SECONDS = 8


def get_tip(tip_id: str) -> Optional[CoachTip]:
    """Look up a catalog entry by id."""
    return _TIPS_BY_ID.get(tip_id)


def select_coach_tips(
    result: AnalysisResult,
    elapsed: float,
    is_smiling: bool = True,
) -> List[CoachTip]:
    """
    Pick the tips to show for one analysis result.

    Slouch correction goes in first whenever it applies. Fewer than two
    matches are padded from the catalog in declaration order. The final
    list is stable-sorted by priority and cut to two.

    Args:
        result: Frame analysis result
        elapsed: Seconds since the session started
        is_smiling: Whether the presenter is currently smiling

    Returns:
        Up to two tips, most urgent first
    """
    rules = (
        (result.is_slouching, SLOUCH_TIP_ID),
        (result.fidgeting, "no-face-touch"),
        (not result.hands_above_waist, "above-waist"),
        (result.symmetry < LOW_SYMMETRY, "symmetry"),
        (result.arm_angle_left < SHORT_ARM_ANGLE and result.arm_angle_right < SHORT_ARM_ANGLE,
         "extend-arms"),
        (result.gesture == GestureType.REST and elapsed > IDLE_SECONDS, "raise-hands"),
        (result.gesture == GestureType.POWER_POSE, "power-pose"),
        (result.impact > HIGH_IMPACT, "open-chest"),
        (result.gesture == GestureType.STEEPLE, "steeple"),
        (not is_smiling and elapsed > NO_SMILE_SECONDS, "smile"),
    )
    tips = [_TIPS_BY_ID[tip_id] for fired, tip_id in rules if fired]

    # Always show at least two tips
    selected_ids = {tip.id for tip in tips}
    for fallback in ALL_TIPS:
        if len(tips) >= MAX_TIPS:
            break
        if fallback.id not in selected_ids:
            tips.append(fallback)
            selected_ids.add(fallback.id)

    # sorted() is stable, so equal priorities keep rule order
    return sorted(tips, key=lambda tip: tip.priority)[:MAX_TIPS]
