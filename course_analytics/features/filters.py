from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from course_analytics.config.constants import STATUS_ALIASES

ALL = "all"

OPTION_COLUMNS = {
    "users": "user_name",
    "courses": "course_title",
    "dates": "upload_date",
    "instructors": "instructor_name",
    "audiences": "target_audience",
}


@dataclass(frozen=True)
class CompletionFilter:
    search_term: str = ""
    status: str = ALL
    user: str = ALL
    course: str = ALL
    upload_date: str = ALL
    instructor: str = ALL
    audience: str = ALL


def _text(df: pd.DataFrame, col: str) -> pd.Series:
    return df[col].fillna("").astype(str)


def filter_completions(completions: pd.DataFrame, flt: CompletionFilter) -> pd.DataFrame:
    mask = pd.Series(True, index=completions.index)

    term = flt.search_term.strip().lower()
    if term:
        mask &= _text(completions, "user_name").str.lower().str.contains(term, regex=False) | _text(
            completions, "course_title"
        ).str.lower().str.contains(term, regex=False)

    if flt.status != ALL:
        wanted = STATUS_ALIASES.get(flt.status.strip().lower(), flt.status)
        mask &= completions["status"] == wanted

    for value, col in (
        (flt.user, "user_name"),
        (flt.course, "course_title"),
        (flt.upload_date, "upload_date"),
        (flt.instructor, "instructor_name"),
        (flt.audience, "target_audience"),
    ):
        if value != ALL:
            mask &= completions[col] == value

    return completions[mask].reset_index(drop=True)


def filter_options(completions: pd.DataFrame) -> dict[str, list[str]]:
    return {
        name: sorted({v for v in completions[col] if isinstance(v, str) and v})
        for name, col in OPTION_COLUMNS.items()
    }
