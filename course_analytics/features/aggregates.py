from __future__ import annotations

import numpy as np
import pandas as pd

from course_analytics.config.constants import STATUS_COMPLETED, STATUS_INCOMPLETE
from course_analytics.io.writers import safe_label
from course_analytics.models.schema import MATRIX_COLUMNS, CompletionSummary, empty_frame


def _completed(completions: pd.DataFrame) -> pd.DataFrame:
    return completions[completions["status"] == STATUS_COMPLETED]


def course_completion_counts(completions: pd.DataFrame, catalog: pd.DataFrame) -> pd.DataFrame:
    counts = _completed(completions).groupby("course_id").size()
    result = catalog[["course_id", "course_title"]].reset_index(drop=True).copy()
    result["count"] = result["course_id"].map(counts).fillna(0).astype(int)
    return result


def user_completion_counts(completions: pd.DataFrame, directory: pd.DataFrame) -> pd.DataFrame:
    counts = _completed(completions).groupby("user_id").size()
    result = directory[["user_id", "user_name"]].reset_index(drop=True).copy()
    result["count"] = result["user_id"].map(counts).fillna(0).astype(int)
    return result


def completion_rate(completions: pd.DataFrame) -> float | None:
    """Completed share of Completed + Incomplete records as a percentage; None when there are none."""
    completed = int((completions["status"] == STATUS_COMPLETED).sum())
    incomplete = int((completions["status"] == STATUS_INCOMPLETE).sum())
    total = completed + incomplete
    if total == 0:
        return None
    return round(completed / total * 100, 1)


def top_n(counts: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    # Stable sort: ties keep the order they were encountered in.
    ranked = counts.sort_values("count", ascending=False, kind="stable")
    return ranked.head(n).reset_index(drop=True)


def summarize(completions: pd.DataFrame, directory: pd.DataFrame, catalog: pd.DataFrame) -> CompletionSummary:
    status = completions["status"]
    return CompletionSummary(
        total_users=len(directory),
        total_courses=len(catalog),
        total_completions=int((status == STATUS_COMPLETED).sum()),
        total_incomplete=int((status == STATUS_INCOMPLETE).sum()),
        total_records=len(completions),
        completion_rate=completion_rate(completions),
    )


def build_status_matrix(completions: pd.DataFrame, directory: pd.DataFrame) -> pd.DataFrame:
    """A cell is Completed iff a Completed record exists for that exact (user, course) pair."""
    course_rows = completions[completions["course_id"].fillna("").astype(str) != ""]
    courses = course_rows.drop_duplicates(subset=["course_id"], keep="first")[["course_id", "course_title"]]
    users = directory[["user_id", "user_name"]].drop_duplicates(subset=["user_id"])
    if courses.empty or users.empty:
        return empty_frame(MATRIX_COLUMNS)

    done = _completed(completions)
    completed_pairs = set(zip(done["user_id"], done["course_id"]))

    matrix = users.merge(courses, how="cross")
    hits = [pair in completed_pairs for pair in zip(matrix["user_id"], matrix["course_id"])]
    matrix["status"] = np.where(hits, STATUS_COMPLETED, STATUS_INCOMPLETE)
    return matrix[MATRIX_COLUMNS].astype(object)


def lookup_status(matrix: pd.DataFrame, user_id: str, course_id: str) -> str:
    cell = matrix[(matrix["user_id"] == user_id) & (matrix["course_id"] == course_id)]
    if cell.empty:
        return STATUS_INCOMPLETE
    return str(cell["status"].iloc[0])


def _column_labels(courses: pd.DataFrame) -> list[str]:
    labels = [safe_label(title, cid) for cid, title in zip(courses["course_id"], courses["course_title"])]
    seen = (pd.Series(labels).duplicated(keep=False) | (pd.Series(labels) == "User")).tolist()
    return [f"{label} ({cid})" if dup else label for label, cid, dup in zip(labels, courses["course_id"], seen)]


def status_matrix_wide(matrix: pd.DataFrame) -> pd.DataFrame:
    if matrix.empty:
        return pd.DataFrame(columns=["User"])
    courses = matrix.drop_duplicates(subset=["course_id"])[["course_id", "course_title"]]
    labels = dict(zip(courses["course_id"], _column_labels(courses)))
    user_order = matrix["user_id"].drop_duplicates().tolist()
    names = dict(zip(matrix["user_id"], matrix["user_name"]))

    wide = matrix.pivot(index="user_id", columns="course_id", values="status")
    wide = wide.reindex(index=user_order, columns=courses["course_id"].tolist())
    wide.columns = [labels[cid] for cid in wide.columns]
    wide.insert(0, "User", [names[uid] for uid in wide.index])
    return wide.reset_index(drop=True)


def flat_export(completions: pd.DataFrame) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "User": completions["user_name"].fillna("").astype(str),
            "Course": completions["course_title"].fillna("").astype(str),
            "Status": completions["status"].fillna("").astype(str),
        }
    ).reset_index(drop=True)


def validate_records(completions: pd.DataFrame) -> list[str]:
    errors: list[str] = []
    required = ["course_id", "course_title", "status"]
    for index, row in enumerate(completions.to_dict("records"), start=1):
        fields = required + (["user_id"] if row.get("status") == STATUS_COMPLETED else [])
        for name in fields:
            if not safe_label(row.get(name), default=""):
                errors.append(f"Row {index}: Missing {name}")
    return errors
