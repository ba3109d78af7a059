from __future__ import annotations

from course_analytics.features.completions import build_lookups
from course_analytics.features.quizzes import reconcile_quiz_attempts
from course_analytics.io.loaders import prepare_table
from course_analytics.models.schema import QUIZ_COLUMNS


def _attempts(tables, **kwargs):
    lookups = build_lookups(tables["users"], tables["posts"], tables["postmeta"])
    return reconcile_quiz_attempts(tables["quiz_attempts"], tables["posts"], lookups.user_names, **kwargs)


def test_attempt_resolves_titles_and_names(sample_tables):
    attempts = _attempts(sample_tables)

    assert list(attempts.columns) == QUIZ_COLUMNS
    first = attempts.iloc[0]
    assert first["user_name"] == "Ann"
    assert first["quiz_title"] == "Intro Quiz"
    assert first["course_title"] == "Intro"
    assert first["earned_marks"] == "8"
    assert first["total_marks"] == "10"
    assert first["attempt_status"] == "attempt_ended"
    assert first["completed_at"] == "2001-09-09 01:46:40"


def test_unresolved_references_fall_back_to_raw_ids(sample_tables):
    attempts = _attempts(sample_tables)

    assert len(attempts) == 2
    second = attempts.iloc[1]
    assert second["user_name"] == "5"
    assert second["quiz_title"] == "77"
    assert second["course_title"] == "88"
    assert second["completed_at"] == ""


def test_trashed_quiz_title_is_not_used():
    posts = prepare_table(
        "posts",
        [{"ID": 40, "post_type": "tutor_quiz", "post_title": "Gone", "post_status": "trash"}],
    )
    attempts = prepare_table("quiz_attempts", [{"user_id": 1, "quiz_id": 40, "course_id": 0}])

    row = reconcile_quiz_attempts(attempts, posts, {}).iloc[0]

    assert row["quiz_title"] == "40"
    assert row["course_title"] == "Unknown"


def test_no_attempts_gives_empty_frame(sample_tables):
    empty = prepare_table("quiz_attempts", [])
    result = reconcile_quiz_attempts(empty, sample_tables["posts"], {})

    assert result.empty
    assert list(result.columns) == QUIZ_COLUMNS
