from __future__ import annotations

from dataclasses import dataclass, field
import pandas as pd
from typing import Dict

from course_analytics.config.settings import Settings

COMPLETION_COLUMNS = [
    "user_id",
    "user_name",
    "course_id",
    "course_title",
    "completed_at",
    "upload_date",
    "instructor_name",
    "target_audience",
    "status",
]

QUIZ_COLUMNS = [
    "user_id",
    "user_name",
    "quiz_id",
    "quiz_title",
    "course_id",
    "course_title",
    "earned_marks",
    "total_marks",
    "attempt_status",
    "completed_at",
]

MATRIX_COLUMNS = ["user_id", "user_name", "course_id", "course_title", "status"]


@dataclass(frozen=True)
class CompletionSummary:
    total_users: int
    total_courses: int
    total_completions: int
    total_incomplete: int
    total_records: int
    completion_rate: float | None


def empty_frame(columns: list[str]) -> pd.DataFrame:
    return pd.DataFrame({col: pd.Series(dtype=object) for col in columns})


@dataclass
class EngineResult:
    completions: pd.DataFrame
    quiz_attempts: pd.DataFrame
    course_counts: pd.DataFrame
    user_counts: pd.DataFrame
    top_courses: pd.DataFrame
    top_users: pd.DataFrame
    status_matrix: pd.DataFrame
    summary: CompletionSummary
    sources: Dict[str, bool]
    generated_at: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class Context:
    settings: Settings
    data: Dict[str, pd.DataFrame]
    engine: EngineResult | None = None
    results: Dict[str, pd.DataFrame] = field(default_factory=dict)

    def add_result(self, name: str, df: pd.DataFrame) -> None:
        self.results[name] = df

    def get(self, name: str) -> pd.DataFrame:
        return self.results[name]
