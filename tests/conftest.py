import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from course_analytics.io.loaders import prepare_tables  # noqa: E402


@pytest.fixture
def sample_blobs():
    """Two learners, two live courses (one with a topic level), a trashed course and a quiz."""
    return {
        "users": [
            {"ID": "1", "display_name": "Ann", "user_login": "ann", "user_email": "ann@example.com"},
            {"ID": "2", "display_name": "", "user_login": "bob", "user_email": "bob@example.com"},
            {"ID": "3", "display_name": "Cy Instructor", "user_login": "cy", "user_email": "cy@example.com"},
        ],
        "posts": [
            {"ID": "10", "post_type": "courses", "post_title": "Intro", "post_parent": "0",
             "post_author": "3", "post_date": "2024-01-05 09:30:00", "post_status": "publish"},
            {"ID": "11", "post_type": "lesson", "post_title": "Intro L1", "post_parent": "10",
             "post_author": "3", "post_date": "2024-01-06 10:00:00", "post_status": "publish"},
            {"ID": "20", "post_type": "courses", "post_title": "Advanced", "post_parent": "0",
             "post_author": "99", "post_date": "2024-02-01 08:00:00", "post_status": "publish"},
            {"ID": "21", "post_type": "topics", "post_title": "Advanced T1", "post_parent": "20",
             "post_author": "3", "post_date": "2024-02-02 08:00:00", "post_status": "publish"},
            {"ID": "22", "post_type": "lesson", "post_title": "Advanced L1", "post_parent": "21",
             "post_author": "3", "post_date": "2024-02-03 08:00:00", "post_status": "publish"},
            {"ID": "30", "post_type": "courses", "post_title": "Old", "post_parent": "0",
             "post_author": "3", "post_date": "2023-01-01 08:00:00", "post_status": "trash"},
            {"ID": "31", "post_type": "lesson", "post_title": "Old L1", "post_parent": "30",
             "post_author": "3", "post_date": "2023-01-02 08:00:00", "post_status": "publish"},
            {"ID": "40", "post_type": "tutor_quiz", "post_title": "Intro Quiz", "post_parent": "11",
             "post_author": "3", "post_date": "2024-01-07 08:00:00", "post_status": "publish"},
        ],
        "usermeta": [
            {"umeta_id": "1", "user_id": "1", "meta_key": "_tutor_completed_lesson_id_11", "meta_value": "1000000000"},
            {"umeta_id": "2", "user_id": "1", "meta_key": "nickname", "meta_value": "ann"},
            {"umeta_id": "3", "user_id": "2", "meta_key": "_tutor_completed_lesson_id_999", "meta_value": "1000000000"},
            {"umeta_id": "4", "user_id": "2", "meta_key": "_tutor_completed_lesson_id_31", "meta_value": "1000000000"},
        ],
        "postmeta": [
            {"meta_id": "1", "post_id": "10", "meta_key": "_tutor_course_target_audience",
             "meta_value": "Beginners\n\nStudents"},
        ],
        "quiz_attempts": [
            {"attempt_id": "1", "user_id": "1", "quiz_id": "40", "course_id": "10", "earned_marks": "8",
             "total_marks": "10", "attempt_status": "attempt_ended", "attempt_ended_at": "1000000000"},
            {"attempt_id": "2", "user_id": "5", "quiz_id": "77", "course_id": "88", "earned_marks": "0",
             "total_marks": "10", "attempt_status": "attempt_started", "attempt_ended_at": None},
        ],
    }


@pytest.fixture
def sample_tables(sample_blobs):
    return prepare_tables(sample_blobs)
