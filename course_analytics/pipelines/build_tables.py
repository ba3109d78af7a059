from __future__ import annotations

import logging

from course_analytics.features.aggregates import flat_export, status_matrix_wide, validate_records
from course_analytics.io.writers import ensure_dirs, save_table
from course_analytics.models.schema import Context

logger = logging.getLogger(__name__)


def build_tables(ctx: Context) -> None:
    settings = ctx.settings
    result = ctx.engine
    if result is None:
        raise ValueError("build_tables needs an engine result on the context")

    ensure_dirs(settings.table_dir)

    problems = validate_records(result.completions)
    if problems:
        logger.warning("%d completion records failed validation, first: %s", len(problems), problems[0])

    tables = {
        "completions": result.completions,
        "quiz_attempts": result.quiz_attempts,
        "course_completion_counts": result.course_counts,
        "user_completion_counts": result.user_counts,
        "top_courses": result.top_courses,
        "top_users": result.top_users,
        "full_course_report": status_matrix_wide(result.status_matrix),
        "completions_flat": flat_export(result.completions),
    }
    for name, df in tables.items():
        save_table(df, settings.table_dir / f"{name}.csv")
        ctx.add_result(name, df)
        logger.info("Wrote %s.csv (%d rows)", name, len(df))
