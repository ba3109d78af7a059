from __future__ import annotations

import logging
from dataclasses import dataclass

import pandas as pd

from course_analytics.config.constants import (
    COMPLETED_LESSON_PREFIX,
    COURSE_TYPES,
    STATUS_COMPLETED,
    STATUS_INCOMPLETE,
    TARGET_AUDIENCE_KEY,
    UNKNOWN,
)
from course_analytics.features.hierarchy import ContentTree, build_content_tree, nodes_of_type, resolve_course_ids
from course_analytics.io.loaders import date_part, format_unix_timestamps, normalize_id
from course_analytics.io.writers import safe_label
from course_analytics.models.schema import COMPLETION_COLUMNS, empty_frame

logger = logging.getLogger(__name__)


def user_directory(users: pd.DataFrame) -> pd.DataFrame:
    known = users[users["id"].notna()].drop_duplicates(subset=["id"], keep="first")
    names = [
        safe_label(row.display_name, row.login, row.email, row.id)
        for row in known.itertuples(index=False)
    ]
    return pd.DataFrame({"user_id": known["id"].tolist(), "user_name": names}, dtype=object)


def course_catalog(posts: pd.DataFrame, user_names: dict[str, str]) -> pd.DataFrame:
    courses = nodes_of_type(posts, COURSE_TYPES)
    upload_dates = date_part(courses["created_date"])
    instructors = [user_names.get(author) or author for author in courses["author_id"]]
    return pd.DataFrame(
        {
            "course_id": courses["id"].tolist(),
            "course_title": [safe_label(title, default=UNKNOWN) for title in courses["title"]],
            "upload_date": [safe_label(d, default=UNKNOWN) for d in upload_dates],
            "instructor_name": [safe_label(name, default=UNKNOWN) for name in instructors],
        },
        dtype=object,
    )


def _flatten_audience(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    joined = ", ".join(part.strip() for part in value.splitlines() if part.strip())
    return joined or None


def audience_map(postmeta: pd.DataFrame) -> dict[str, str]:
    rows = postmeta[(postmeta["key"] == TARGET_AUDIENCE_KEY) & postmeta["node_id"].notna()]
    audiences: dict[str, str] = {}
    for node_id, value in zip(rows["node_id"], rows["value"]):
        flat = _flatten_audience(value)
        if flat:
            audiences[node_id] = flat
    return audiences


def completion_events(usermeta: pd.DataFrame) -> pd.DataFrame:
    keys = usermeta["key"].fillna("").astype(str)
    mask = keys.str.startswith(COMPLETED_LESSON_PREFIX)
    events = usermeta.loc[mask, ["user_id", "value"]].copy()
    suffix = keys[mask].str.slice(len(COMPLETED_LESSON_PREFIX))
    suffix = suffix.where(suffix.str.fullmatch(r"\d+").fillna(False).astype(bool))
    events["lesson_id"] = suffix.map(normalize_id).astype(object)
    return events.reset_index(drop=True)


@dataclass(frozen=True)
class CourseLookups:
    directory: pd.DataFrame
    user_names: dict[str, str]
    catalog: pd.DataFrame
    tree: ContentTree


def build_lookups(users: pd.DataFrame, posts: pd.DataFrame, postmeta: pd.DataFrame) -> CourseLookups:
    directory = user_directory(users)
    user_names = dict(zip(directory["user_id"], directory["user_name"]))
    catalog = course_catalog(posts, user_names)
    audiences = audience_map(postmeta)
    catalog["target_audience"] = [audiences.get(cid, UNKNOWN) for cid in catalog["course_id"]]
    return CourseLookups(
        directory=directory,
        user_names=user_names,
        catalog=catalog,
        tree=build_content_tree(posts),
    )


def reconcile_completions(
    usermeta: pd.DataFrame,
    lookups: CourseLookups,
    timezone: str = "UTC",
    timestamp_format: str = "%Y-%m-%d %H:%M:%S",
) -> pd.DataFrame:
    events = completion_events(usermeta)
    events["course_id"] = resolve_course_ids(lookups.tree, events["lesson_id"])
    resolved = events[events["course_id"].notna()].reset_index(drop=True)
    if len(resolved) < len(events):
        logger.debug("Dropped %d completion events with no resolvable course", len(events) - len(resolved))

    completed = resolved.merge(lookups.catalog, on="course_id", how="left")
    completed["user_name"] = [
        lookups.user_names.get(uid) or safe_label(uid, default=UNKNOWN) for uid in completed["user_id"]
    ]
    completed["completed_at"] = format_unix_timestamps(completed["value"], timezone, timestamp_format)
    completed["status"] = STATUS_COMPLETED

    completed_ids = set(completed["course_id"])
    placeholders = lookups.catalog[~lookups.catalog["course_id"].isin(completed_ids)].copy()
    placeholders["user_id"] = ""
    placeholders["user_name"] = ""
    placeholders["completed_at"] = ""
    placeholders["status"] = STATUS_INCOMPLETE

    frames = [df[COMPLETION_COLUMNS] for df in (completed, placeholders) if not df.empty]
    if not frames:
        return empty_frame(COMPLETION_COLUMNS)
    return pd.concat(frames, ignore_index=True).astype(object)
