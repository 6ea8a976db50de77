"""Tests for UserSearchService search, paging and ordering."""

import pytest

from userservice.exceptions import (
    InvalidRequestArgumentError,
    InvalidSortFieldError,
    MalformedFilterValueError,
)
from userservice.models.filter_criteria import FilterCriteria, Pagination
from userservice.models.user import User
from userservice.services.user_search_service import UserSearchService


@pytest.fixture
def search_service(user_repository):
    """Create a UserSearchService backed by the test database."""
    return UserSearchService(user_repository)


def _emails(page):
    return [record.email for record in page.content]


class TestUserSearchService:
    """Test filtering by field lists and free text."""

    def test_empty_criteria_returns_all(self, search_service, seeded_users):
        """Test no criteria returns every user on one page."""
        page = search_service.search_users(FilterCriteria(), Pagination())

        assert page.total_elements == 5
        assert page.total_pages == 1
        assert len(page.content) == 5

    def test_none_criteria_returns_all(self, search_service, seeded_users):
        """Test a missing filter behaves like an empty one."""
        page = search_service.search_users(None, Pagination())
        assert page.total_elements == 5

    def test_filter_first_names(self, search_service, seeded_users):
        """Test first-name substrings are OR-combined."""
        page = search_service.search_users(FilterCriteria(first_names=["al", "ERI"]), Pagination())
        assert _emails(page) == ["alice.smith@example.com", "erin.brown@sample.net"]

    def test_filter_fields_are_and_combined(self, search_service, seeded_users):
        """Test constraints on different fields must all hold."""
        page = search_service.search_users(
            FilterCriteria(last_names=["smith"], emails=[".org"]),
            Pagination(),
        )
        assert _emails(page) == ["carol.smithers@example.org"]

    def test_search_text_across_fields(self, search_service, seeded_users):
        """Test free text matches name, email or phone."""
        page = search_service.search_users(FilterCriteria(search_text="555"), Pagination())
        assert page.total_elements == 4

        page = search_service.search_users(FilterCriteria(search_text="  SMITH "), Pagination())
        assert _emails(page) == ["alice.smith@example.com", "carol.smithers@example.org"]

    def test_search_text_with_filters(self, search_service, seeded_users):
        """Test free text narrows the field filters."""
        page = search_service.search_users(
            FilterCriteria(emails=["example.com"], search_text="b"),
            Pagination(),
        )
        assert _emails(page) == ["bob.jones@example.com", "dave.o_brien@example.com"]

    def test_wildcards_in_input_are_literal(self, search_service, seeded_users):
        """Test % and _ in user input never act as wildcards."""
        assert search_service.search_users(FilterCriteria(search_text="%"), Pagination()).total_elements == 0
        assert search_service.search_users(FilterCriteria(first_names=["A_ice"]), Pagination()).total_elements == 0

        page = search_service.search_users(FilterCriteria(search_text="_"), Pagination())
        assert _emails(page) == ["dave.o_brien@example.com"]

    def test_quotes_in_input_are_harmless(self, search_service, seeded_users):
        """Test quote and comment sequences are matched as text."""
        page = search_service.search_users(FilterCriteria(search_text="' OR 1=1 --"), Pagination())
        assert page.total_elements == 0

    def test_reserved_characters_match_themselves(self, search_service, user_repository):
        """Test values with quotes, separators, comments, brackets and backslashes are found by their own text."""
        values = {
            "o'h": "O'Hara",
            "a;b": "a;b",
            "x--y": "x--y",
            "[tag]^": "[tag]^",
            'say "hi"': 'say "hi"',
            "/*c*/": "/*c*/",
            "a\\b": "a\\b",
        }
        for index, last_name in enumerate(values.values()):
            user_repository.create(
                User(email=f"user{index}@example.com", first_name="Test", last_name=last_name, phone_number="0")
            )

        for needle, last_name in values.items():
            page = search_service.search_users(FilterCriteria(last_names=[needle]), Pagination())
            assert [record.last_name for record in page.content] == [last_name], needle

            page = search_service.search_users(FilterCriteria(search_text=needle), Pagination())
            assert [record.last_name for record in page.content] == [last_name], needle

    def test_user_ids_substring(self, search_service, seeded_users):
        """Test IDs match by substring by default."""
        page = search_service.search_users(FilterCriteria(user_ids=["2"]), Pagination())
        assert [record.id for record in page.content] == [2]

    def test_user_ids_exact(self, search_service, seeded_users):
        """Test exact ID matching."""
        page = search_service.search_users(FilterCriteria(user_ids=[1, 4], exact_user_ids_flag=True), Pagination())
        assert [record.id for record in page.content] == [1, 4]

    def test_user_ids_exact_malformed(self, search_service, seeded_users):
        """Test exact matching rejects non-integer IDs."""
        with pytest.raises(MalformedFilterValueError):
            search_service.search_users(FilterCriteria(user_ids=["x1"], exact_user_ids_flag=True), Pagination())


class TestUserSearchPaging:
    """Test page arithmetic and ordering."""

    def test_page_totals(self, search_service, seeded_users):
        """Test total pages are rounded up."""
        page = search_service.search_users(FilterCriteria(), Pagination(page_number=0, page_size=2))

        assert page.total_elements == 5
        assert page.total_pages == 3
        assert [record.id for record in page.content] == [1, 2]

    def test_last_and_past_last_page(self, search_service, seeded_users):
        """Test the last page is partial and pages past the end are empty."""
        last = search_service.search_users(FilterCriteria(), Pagination(page_number=2, page_size=2))
        assert [record.id for record in last.content] == [5]

        past = search_service.search_users(FilterCriteria(), Pagination(page_number=3, page_size=2))
        assert past.content == []
        assert past.total_elements == 5

    def test_no_matches(self, search_service, seeded_users):
        """Test an empty result has zero pages."""
        page = search_service.search_users(FilterCriteria(emails=["nobody"]), Pagination())
        assert page.content == []
        assert page.total_elements == 0
        assert page.total_pages == 0

    def test_descending_direction(self, search_service, seeded_users):
        """Test any direction containing "desc" sorts descending."""
        page = search_service.search_users_paged(FilterCriteria(), 0, 10, "desc", "lastName")
        assert [record.last_name for record in page.content] == ["Smithers", "Smith", "O_Brien", "Jones", "Brown"]

        page = search_service.search_users_paged(FilterCriteria(), 0, 10, "descending", "id")
        assert [record.id for record in page.content] == [5, 4, 3, 2, 1]

    def test_direction_is_case_sensitive(self, search_service, seeded_users):
        """Test upper-case DESC falls back to ascending."""
        page = search_service.search_users_paged(FilterCriteria(), 0, 10, "DESC", "id")
        assert [record.id for record in page.content] == [1, 2, 3, 4, 5]

    def test_missing_direction_is_ascending(self, search_service, seeded_users):
        """Test a missing direction sorts ascending."""
        page = search_service.search_users_paged(FilterCriteria(), 0, 10, None, "email")
        assert _emails(page)[0] == "alice.smith@example.com"

    def test_invalid_sort_field(self, search_service, seeded_users):
        """Test an unknown sort field is rejected."""
        with pytest.raises(InvalidSortFieldError):
            search_service.search_users_paged(FilterCriteria(), 0, 10, "asc", "salary")

    def test_invalid_page_arguments(self, search_service, seeded_users):
        """Test negative pages and non-positive sizes are rejected."""
        with pytest.raises(InvalidRequestArgumentError):
            search_service.search_users_paged(FilterCriteria(), -1, 10, "asc", "id")
        with pytest.raises(InvalidRequestArgumentError):
            search_service.search_users_paged(FilterCriteria(), 0, 0, "asc", "id")
