from __future__ import annotations

import pytest

from course_analytics.features.completions import build_lookups, reconcile_completions
from course_analytics.features.filters import CompletionFilter, filter_completions, filter_options


@pytest.fixture
def records(sample_tables):
    lookups = build_lookups(sample_tables["users"], sample_tables["posts"], sample_tables["postmeta"])
    return reconcile_completions(sample_tables["usermeta"], lookups)


def test_default_filter_keeps_everything(records):
    assert len(filter_completions(records, CompletionFilter())) == len(records)


def test_search_matches_user_or_course_case_insensitively(records):
    assert filter_completions(records, CompletionFilter(search_term="ANN"))["course_id"].tolist() == ["10"]
    assert filter_completions(records, CompletionFilter(search_term="vanced"))["course_id"].tolist() == ["20"]
    assert filter_completions(records, CompletionFilter(search_term="nobody")).empty


@pytest.mark.parametrize("status,expected", [("Completed", ["10"]), ("Incomplete", ["20"]), ("Not Completed", ["20"])])
def test_status_filter(records, status, expected):
    assert filter_completions(records, CompletionFilter(status=status))["course_id"].tolist() == expected


def test_attribute_filters_combine(records):
    flt = CompletionFilter(instructor="Cy Instructor", audience="Beginners, Students", upload_date="2024-01-05")
    assert filter_completions(records, flt)["course_title"].tolist() == ["Intro"]

    flt = CompletionFilter(course="Intro", user="bob")
    assert filter_completions(records, flt).empty


def test_filter_options(records):
    assert filter_options(records) == {
        "users": ["Ann"],
        "courses": ["Advanced", "Intro"],
        "dates": ["2024-01-05", "2024-02-01"],
        "instructors": ["99", "Cy Instructor"],
        "audiences": ["Beginners, Students", "Unknown"],
    }
