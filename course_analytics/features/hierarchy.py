from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from course_analytics.config.constants import COURSE_TYPES, LESSON_TYPES, MAX_PARENT_HOPS, TRASH_STATUS


def node_types(posts: pd.DataFrame) -> pd.Series:
    return posts["type"].fillna("").astype(str).str.strip().str.lower()


def live_nodes(posts: pd.DataFrame) -> pd.DataFrame:
    status = posts["status"].fillna("").astype(str).str.strip().str.lower()
    return posts[(status != TRASH_STATUS) & posts["id"].notna()].drop_duplicates(subset=["id"], keep="last")


def nodes_of_type(posts: pd.DataFrame, types: set[str]) -> pd.DataFrame:
    nodes = live_nodes(posts)
    return nodes[node_types(nodes).isin(types)]


@dataclass(frozen=True)
class ContentTree:
    parents: dict[str, str | None]
    lesson_parents: dict[str, str | None]
    course_ids: frozenset[str]


def build_content_tree(posts: pd.DataFrame) -> ContentTree:
    nodes = live_nodes(posts)
    types = node_types(nodes)
    lessons = nodes[types.isin(LESSON_TYPES)]
    courses = nodes[types.isin(COURSE_TYPES)]
    return ContentTree(
        parents=dict(zip(nodes["id"], nodes["parent_id"])),
        lesson_parents=dict(zip(lessons["id"], lessons["parent_id"])),
        course_ids=frozenset(courses["id"]),
    )


def resolve_course_id(tree: ContentTree, node_id: str | None, max_hops: int = MAX_PARENT_HOPS) -> str | None:
    """A lesson jumps straight to its parent; the walk after that is bounded to ``max_hops`` parent steps."""
    current = tree.lesson_parents.get(node_id, node_id) if node_id is not None else None
    hops = 0
    while current is not None and current not in tree.course_ids and current in tree.parents and hops < max_hops:
        current = tree.parents[current]
        hops += 1
    return current if current in tree.course_ids else None


def resolve_course_ids(tree: ContentTree, node_ids: pd.Series) -> pd.Series:
    cache: dict[str | None, str | None] = {}

    def _resolve(node_id: str | None) -> str | None:
        if node_id not in cache:
            cache[node_id] = resolve_course_id(tree, node_id)
        return cache[node_id]

    return node_ids.map(_resolve).astype(object)
