from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from course_analytics.config.constants import LOAD_ERROR_MESSAGE
from course_analytics.config.settings import Settings
from course_analytics.features.aggregates import (
    build_status_matrix,
    course_completion_counts,
    summarize,
    top_n,
    user_completion_counts,
)
from course_analytics.features.completions import build_lookups, reconcile_completions
from course_analytics.features.filters import CompletionFilter, filter_completions
from course_analytics.features.quizzes import reconcile_quiz_attempts
from course_analytics.io.loaders import TABLE_COLUMNS, prepare_table, prepare_tables, source_flags
from course_analytics.models.schema import (
    COMPLETION_COLUMNS,
    MATRIX_COLUMNS,
    QUIZ_COLUMNS,
    CompletionSummary,
    EngineResult,
    empty_frame,
)

logger = logging.getLogger(__name__)


def _now() -> str:
    return pd.Timestamp.now(tz="UTC").isoformat()


def _failed_result(sources: dict[str, bool], generated_at: str) -> EngineResult:
    return EngineResult(
        completions=empty_frame(COMPLETION_COLUMNS),
        quiz_attempts=empty_frame(QUIZ_COLUMNS),
        course_counts=empty_frame(["course_id", "course_title", "count"]),
        user_counts=empty_frame(["user_id", "user_name", "count"]),
        top_courses=empty_frame(["course_id", "course_title", "count"]),
        top_users=empty_frame(["user_id", "user_name", "count"]),
        status_matrix=empty_frame(MATRIX_COLUMNS),
        summary=CompletionSummary(0, 0, 0, 0, 0, None),
        sources=sources,
        generated_at=generated_at,
        error=LOAD_ERROR_MESSAGE,
    )


def run_engine(
    tables: dict[str, pd.DataFrame],
    *,
    timezone: str = "UTC",
    timestamp_format: str = "%Y-%m-%d %H:%M:%S",
    top: int = 10,
    record_filter: CompletionFilter | None = None,
) -> EngineResult:
    generated_at = _now()
    sources = {name: False for name in TABLE_COLUMNS}
    try:
        data = {name: tables[name] if name in tables else prepare_table(name, None) for name in TABLE_COLUMNS}
        sources = source_flags(data)

        lookups = build_lookups(data["users"], data["posts"], data["postmeta"])
        completions = reconcile_completions(data["usermeta"], lookups, timezone, timestamp_format)
        if record_filter is not None:
            completions = filter_completions(completions, record_filter)
            logger.info("Record filter kept %d completion records", len(completions))
        quiz_attempts = reconcile_quiz_attempts(
            data["quiz_attempts"], data["posts"], lookups.user_names, timezone, timestamp_format
        )

        course_counts = course_completion_counts(completions, lookups.catalog)
        user_counts = user_completion_counts(completions, lookups.directory)
        result = EngineResult(
            completions=completions,
            quiz_attempts=quiz_attempts,
            course_counts=course_counts,
            user_counts=user_counts,
            top_courses=top_n(course_counts, top),
            top_users=top_n(user_counts, top),
            status_matrix=build_status_matrix(completions, lookups.directory),
            summary=summarize(completions, lookups.directory, lookups.catalog),
            sources=sources,
            generated_at=generated_at,
        )
    except Exception:
        logger.exception("Completion engine failed")
        return _failed_result(sources, generated_at)

    logger.info(
        "Reconciled %d completion records (%d completed) and %d quiz attempts",
        result.summary.total_records,
        result.summary.total_completions,
        len(result.quiz_attempts),
    )
    return result


def run_with_settings(tables: dict[str, pd.DataFrame], settings: Settings) -> EngineResult:
    return run_engine(
        tables,
        timezone=settings.display_timezone,
        timestamp_format=settings.timestamp_format,
        top=settings.top_n,
        record_filter=settings.record_filter,
    )


def run_from_blobs(blobs: dict[str, Any], **kwargs: Any) -> EngineResult:
    try:
        tables = prepare_tables(blobs)
    except Exception:
        logger.exception("Could not prepare export tables")
        return _failed_result({name: False for name in TABLE_COLUMNS}, _now())
    return run_engine(tables, **kwargs)
