from __future__ import annotations

from pathlib import Path

import pandas as pd

from course_analytics.io.writers import ensure_dirs, fmt_int, fmt_pct, md_table, safe_label
from course_analytics.models.schema import Context, EngineResult


def _rate_label(rate: float | None) -> str:
    return fmt_pct(rate / 100 if rate is not None else None)


def _ranking_rows(df: pd.DataFrame, label_col: str) -> list[list[str]]:
    return [
        [str(rank), safe_label(row[label_col]), fmt_int(row["count"])]
        for rank, (_, row) in enumerate(df.iterrows(), start=1)
    ]


def render_report(result: EngineResult) -> str:
    s = result.summary
    lines: list[str] = []
    lines.append("# Course Completion Report")
    lines.append("")
    lines.append(f"Generated {result.generated_at}.")
    lines.append("")

    if result.error:
        lines.append(f"**{result.error}**")
        lines.append("")
        return "\n".join(lines)

    lines.append("## Summary")
    kpi_rows = [
        ["Total users", fmt_int(s.total_users)],
        ["Total courses", fmt_int(s.total_courses)],
        ["Completions", fmt_int(s.total_completions)],
        ["Courses with no completions", fmt_int(s.total_incomplete)],
        ["Completion rate", _rate_label(s.completion_rate)],
        ["Quiz attempts", fmt_int(len(result.quiz_attempts))],
    ]
    lines.append(md_table(["Metric", "Value"], kpi_rows))
    lines.append("")

    lines.append("## Top Courses")
    if result.top_courses.empty:
        lines.append("No courses found.")
    else:
        lines.append(md_table(["#", "Course", "Completions"], _ranking_rows(result.top_courses, "course_title")))
    lines.append("")

    lines.append("## Top Learners")
    if result.top_users.empty:
        lines.append("No users found.")
    else:
        lines.append(md_table(["#", "User", "Completions"], _ranking_rows(result.top_users, "user_name")))
    lines.append("")

    missing = [name for name, loaded in result.sources.items() if not loaded]
    if missing:
        lines.append("## Data Sources")
        lines.append("No rows were loaded for: " + ", ".join(sorted(missing)) + ".")
        lines.append("")

    return "\n".join(lines)


def build_report(ctx: Context) -> Path:
    if ctx.engine is None:
        raise ValueError("build_report needs an engine result on the context")
    ensure_dirs(ctx.settings.output_dir)
    report_path = ctx.settings.output_dir / "report.md"
    report_path.write_text(render_report(ctx.engine), encoding="utf-8")
    return report_path
