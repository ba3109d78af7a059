from __future__ import annotations

import pandas as pd

from course_analytics.config.constants import COURSE_TYPES, QUIZ_TYPES, UNKNOWN
from course_analytics.features.hierarchy import nodes_of_type
from course_analytics.io.loaders import format_unix_timestamps
from course_analytics.io.writers import safe_label
from course_analytics.models.schema import QUIZ_COLUMNS, empty_frame


def _title_map(posts: pd.DataFrame, types: set[str]) -> dict[str, str]:
    nodes = nodes_of_type(posts, types)
    return {node_id: safe_label(title, node_id) for node_id, title in zip(nodes["id"], nodes["title"])}


def reconcile_quiz_attempts(
    quiz_attempts: pd.DataFrame,
    posts: pd.DataFrame,
    user_names: dict[str, str],
    timezone: str = "UTC",
    timestamp_format: str = "%Y-%m-%d %H:%M:%S",
) -> pd.DataFrame:
    if quiz_attempts.empty:
        return empty_frame(QUIZ_COLUMNS)

    quiz_titles = _title_map(posts, QUIZ_TYPES)
    course_titles = _title_map(posts, COURSE_TYPES)

    def _label(mapping: dict[str, str], key: str | None) -> str:
        return mapping.get(key) or safe_label(key, default=UNKNOWN)

    attempts = quiz_attempts.reset_index(drop=True)
    records = pd.DataFrame(
        {
            "user_id": attempts["user_id"],
            "user_name": [_label(user_names, uid) for uid in attempts["user_id"]],
            "quiz_id": attempts["quiz_id"],
            "quiz_title": [_label(quiz_titles, qid) for qid in attempts["quiz_id"]],
            "course_id": attempts["course_id"],
            "course_title": [_label(course_titles, cid) for cid in attempts["course_id"]],
            "earned_marks": attempts["earned_marks"],
            "total_marks": attempts["total_marks"],
            "attempt_status": attempts["status"],
            "completed_at": format_unix_timestamps(attempts["ended_at"], timezone, timestamp_format),
        }
    )
    return records[QUIZ_COLUMNS].astype(object)
