"""
Tests for the issue query engine.

Covers:
- search / status / severity filters and their combination
- sorting by createdAt, status and severity rank
- pagination arithmetic and out-of-range pages
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.services.query_engine import (
    QueryParams,
    filter_issues,
    paginate,
    query_issues,
    severity_rank,
    sort_issues,
)

BASE_TIME = datetime(2025, 5, 1, 9, 0, tzinfo=timezone.utc)


def titles(issues):
    return [issue.title for issue in issues]


class TestFilters:
    def test_no_filters_returns_everything(self, sample_issues):
        result = filter_issues(sample_issues, QueryParams())
        assert len(result) == 8

    def test_search_is_case_insensitive_substring(self, sample_issues):
        result = filter_issues(sample_issues, QueryParams(search="MISSING"))
        assert sorted(titles(result)) == ["Missing consent form", "Missing lab results"]

    def test_search_only_matches_title(self, sample_issues):
        # Every description mentions its site, titles never do
        result = filter_issues(sample_issues, QueryParams(search="Site-101"))
        assert result == []

    def test_status_filter(self, sample_issues):
        result = filter_issues(sample_issues, QueryParams(status="in_progress"))
        assert len(result) == 3
        assert all(issue.status == "in_progress" for issue in result)

    def test_severity_filter(self, sample_issues):
        result = filter_issues(sample_issues, QueryParams(severity="critical"))
        assert sorted(titles(result)) == ["Protocol deviation", "Sample storage issue"]

    def test_combined_filters_are_anded(self, sample_issues):
        params = QueryParams(search="missing", status="open", severity="major")
        result = filter_issues(sample_issues, params)
        assert sorted(titles(result)) == ["Missing consent form", "Missing lab results"]

        params = QueryParams(search="missing", severity="critical")
        assert filter_issues(sample_issues, params) == []


class TestSorting:
    def test_default_sort_is_newest_first(self, sample_issues):
        page, _ = query_issues(sample_issues, QueryParams(page_size=100))
        assert titles(page)[0] == "IRB approval pending"
        assert titles(page)[-1] == "Missing consent form"

    def test_created_at_ascending(self, sample_issues):
        result = sort_issues(sample_issues, "createdAt", "asc")
        created = [issue.created_at for issue in result]
        assert created == sorted(created)

    def test_created_at_compares_instants_across_offsets(self, issue_factory):
        plus_two = timezone(timedelta(hours=2))
        earlier = issue_factory(title="earlier", created_at=BASE_TIME)
        # 10:30+02:00 is 08:30Z, before BASE_TIME
        earliest = issue_factory(
            title="earliest", created_at=BASE_TIME.replace(hour=10, minute=30, tzinfo=plus_two)
        )
        result = sort_issues([earlier, earliest], "createdAt", "asc")
        assert titles(result) == ["earliest", "earlier"]

    def test_status_sorts_lexicographically(self, sample_issues):
        result = sort_issues(sample_issues, "status", "asc")
        statuses = [issue.status for issue in result]
        assert statuses == sorted(statuses)
        assert statuses[0] == "in_progress"
        assert statuses[-1] == "resolved"

    def test_severity_sorts_by_rank_not_alphabet(self, sample_issues):
        result = sort_issues(sample_issues, "severity", "desc")
        severities = [issue.severity for issue in result]
        assert severities == ["critical"] * 2 + ["major"] * 4 + ["minor"] * 2

        result = sort_issues(sample_issues, "severity", "asc")
        assert result[0].severity == "minor"
        assert result[-1].severity == "critical"

    def test_unknown_severity_ranks_below_minor(self, issue_factory):
        assert severity_rank("critical") > severity_rank("major") > severity_rank("minor")
        assert severity_rank("blocker") < severity_rank("minor")

        odd = issue_factory(title="odd", severity="blocker")
        minor = issue_factory(title="minor", severity="minor")
        assert titles(sort_issues([minor, odd], "severity", "asc")) == ["odd", "minor"]

    def test_unknown_sort_field_raises(self, sample_issues):
        with pytest.raises(ValueError, match="Unsupported sort field"):
            sort_issues(sample_issues, "title", "asc")


class TestPagination:
    def test_pagination_metadata(self, sample_issues):
        page, pagination = query_issues(sample_issues, QueryParams(page=2, page_size=3))
        assert len(page) == 3
        assert pagination.to_dict() == {"page": 2, "pageSize": 3, "total": 8, "totalPages": 3}

    def test_last_page_is_partial(self, sample_issues):
        page, pagination = query_issues(sample_issues, QueryParams(page=3, page_size=3))
        assert len(page) == 2
        assert pagination.total_pages == 3

    def test_page_beyond_last_is_empty(self, sample_issues):
        page, pagination = query_issues(sample_issues, QueryParams(page=5, page_size=3))
        assert page == []
        assert pagination.total == 8
        assert pagination.page == 5

    def test_no_matches_has_zero_pages(self, sample_issues):
        page, pagination = query_issues(sample_issues, QueryParams(search="nothing like this"))
        assert page == []
        assert pagination.total == 0
        assert pagination.total_pages == 0

    def test_total_counts_filtered_matches(self, sample_issues):
        _, pagination = query_issues(sample_issues, QueryParams(status="open", page_size=2))
        assert pagination.total == 4
        assert pagination.total_pages == 2

    def test_paginate_exact_multiple(self, sample_issues):
        _, pagination = paginate(sample_issues, 1, 4)
        assert pagination.total_pages == 2


class TestQueryProperties:
    def test_pages_cover_every_match_once(self, sample_issues):
        seen = []
        for page_number in (1, 2, 3):
            page, _ = query_issues(sample_issues, QueryParams(page=page_number, page_size=3))
            seen.extend(issue.id for issue in page)
        assert sorted(seen) == sorted(issue.id for issue in sample_issues)

    def test_same_query_same_result(self, sample_issues):
        params = QueryParams(sort_by="severity", sort_order="desc", page_size=5)
        first, _ = query_issues(sample_issues, params)
        second, _ = query_issues(sample_issues, params)
        assert [i.id for i in first] == [i.id for i in second]

    def test_input_is_not_mutated(self, sample_issues):
        before = [issue.id for issue in sample_issues]
        query_issues(sample_issues, QueryParams(sort_by="status", sort_order="asc", page=2, page_size=2))
        assert [issue.id for issue in sample_issues] == before
