from __future__ import annotations

TABLE_NAMES = {
    "users": "wp_users",
    "posts": "wp_posts",
    "usermeta": "wp_usermeta",
    "postmeta": "wp_postmeta",
    "quiz_attempts": "wp_tutor_quiz_attempts",
}

COURSE_TYPES = {"course", "courses"}
LESSON_TYPES = {"lesson"}
QUIZ_TYPES = {"quiz", "tutor_quiz"}
TRASH_STATUS = "trash"

COMPLETED_LESSON_PREFIX = "_tutor_completed_lesson_id_"
TARGET_AUDIENCE_KEY = "_tutor_course_target_audience"

MAX_PARENT_HOPS = 10

STATUS_COMPLETED = "Completed"
STATUS_INCOMPLETE = "Incomplete"
STATUS_ALIASES = {
    "completed": STATUS_COMPLETED,
    "incomplete": STATUS_INCOMPLETE,
    "not completed": STATUS_INCOMPLETE,
}

UNKNOWN = "Unknown"
LOAD_ERROR_MESSAGE = "Failed to load course data. Please ensure all JSON files are present."

# Source column aliases: WordPress export names first, then plain names.
USER_COLUMNS = {
    "id": ["ID", "id", "user_id"],
    "display_name": ["display_name", "name"],
    "login": ["user_login", "login"],
    "email": ["user_email", "email"],
}
POST_COLUMNS = {
    "id": ["ID", "id"],
    "type": ["post_type", "type"],
    "title": ["post_title", "title"],
    "parent_id": ["post_parent", "parent_id", "parent"],
    "author_id": ["post_author", "author_id", "author"],
    "created_date": ["post_date", "created_date", "date"],
    "status": ["post_status", "status"],
}
USERMETA_COLUMNS = {
    "user_id": ["user_id"],
    "key": ["meta_key", "key"],
    "value": ["meta_value", "value"],
}
POSTMETA_COLUMNS = {
    "node_id": ["post_id", "node_id"],
    "key": ["meta_key", "key"],
    "value": ["meta_value", "value"],
}
QUIZ_ATTEMPT_COLUMNS = {
    "user_id": ["user_id"],
    "quiz_id": ["quiz_id"],
    "course_id": ["course_id"],
    "earned_marks": ["earned_marks"],
    "total_marks": ["total_marks"],
    "status": ["attempt_status", "status"],
    "ended_at": ["attempt_ended_at", "ended_at"],
}
ID_COLUMNS = {"id", "user_id", "node_id", "parent_id", "author_id", "quiz_id", "course_id"}
