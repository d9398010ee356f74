# fitfeed/services/workout_logs.py
import math

from sqlalchemy import delete

from ..models.post import WorkoutLog


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def split_duration(duration: int, body_parts) -> list[tuple[str, int]]:
    """
    Spread a post's duration evenly across its body parts:
    40 min over [legs, back] -> [("legs", 20), ("back", 20)].
    """
    parts = list(body_parts)
    if not parts:
        return []
    share = _round_half_up(max(0, duration) / len(parts))
    return [(part, share) for part in parts]


def replace_workout_logs(session, post, body_parts, duration: int) -> list[WorkoutLog]:
    session.execute(delete(WorkoutLog).where(WorkoutLog.post_id == post.id))
    session.expire(post, ["workout_logs"])

    logs = [
        WorkoutLog(post_id=post.id, user_uuid=post.user_uuid, body_part=part, duration=share)
        for part, share in split_duration(duration, body_parts)
    ]
    session.add_all(logs)
    return logs
