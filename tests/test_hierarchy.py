from __future__ import annotations

import pandas as pd

from course_analytics.features.hierarchy import build_content_tree, resolve_course_id, resolve_course_ids
from course_analytics.io.loaders import prepare_table


def _post(post_id, post_type, parent="0", status="publish"):
    return {"ID": str(post_id), "post_type": post_type, "post_title": f"node {post_id}",
            "post_parent": str(parent), "post_status": status}


def _chain_tree(topic_count):
    # lesson 100 -> topic 101 -> ... -> topic (100 + topic_count) -> course 500
    posts = [_post(500, "courses"), _post(100, "lesson", parent=101)]
    for offset in range(1, topic_count + 1):
        node = 100 + offset
        parent = 500 if offset == topic_count else node + 1
        posts.append(_post(node, "topics", parent=parent))
    return build_content_tree(prepare_table("posts", posts))


def test_lesson_resolves_through_topic(sample_tables):
    tree = build_content_tree(sample_tables["posts"])

    assert resolve_course_id(tree, "11") == "10"
    assert resolve_course_id(tree, "22") == "20"
    assert resolve_course_id(tree, "40") == "10"


def test_course_resolves_to_itself(sample_tables):
    tree = build_content_tree(sample_tables["posts"])
    assert resolve_course_id(tree, "20") == "20"


def test_unknown_and_missing_ids_are_unresolved(sample_tables):
    tree = build_content_tree(sample_tables["posts"])

    assert resolve_course_id(tree, "999") is None
    assert resolve_course_id(tree, None) is None


def test_trashed_course_is_not_a_target(sample_tables):
    tree = build_content_tree(sample_tables["posts"])

    assert "30" not in tree.course_ids
    assert resolve_course_id(tree, "31") is None


def test_walk_stops_after_ten_hops():
    assert resolve_course_id(_chain_tree(10), "100") == "500"
    assert resolve_course_id(_chain_tree(11), "100") is None


def test_cycle_terminates():
    posts = prepare_table(
        "posts",
        [_post(1, "courses"), _post(2, "topics", parent=3), _post(3, "topics", parent=2), _post(4, "lesson", parent=2)],
    )
    tree = build_content_tree(posts)
    assert resolve_course_id(tree, "4") is None


def test_root_without_course_is_unresolved():
    tree = build_content_tree(prepare_table("posts", [_post(7, "lesson", parent=0)]))
    assert resolve_course_id(tree, "7") is None


def test_resolve_course_ids_keeps_index(sample_tables):
    tree = build_content_tree(sample_tables["posts"])
    ids = pd.Series(["11", "999", "22", "11"], index=[5, 6, 7, 8], dtype=object)

    resolved = resolve_course_ids(tree, ids)

    assert resolved.index.tolist() == [5, 6, 7, 8]
    assert resolved.tolist() == ["10", None, "20", "10"]
