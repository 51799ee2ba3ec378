"""Test Letterboxd data models"""

import pytest

from letterboxd_sync.core.exceptions import LetterboxdError
from letterboxd_sync.letterboxd.models import (
    AccessToken,
    FilmMatch,
    ListEntriesPage,
    ListSummary,
    ListUpdateResult,
    LookupKind,
    LookupOutcome,
)


class TestFilmMatch:
    """Test FilmMatch parsing"""

    def test_from_search_item(self):
        match = FilmMatch.from_search_item({
            "type": "FilmSearchItem",
            "film": {"id": "2bbs", "name": "Blade Runner", "releaseYear": 1982},
        })

        assert match == FilmMatch(film_id="2bbs", name="Blade Runner", release_year=1982)
        assert match.display_name == "Blade Runner (1982)"

    def test_other_item_types_are_ignored(self):
        assert FilmMatch.from_search_item({"type": "ContributorSearchItem", "film": {"id": "x"}}) is None

    def test_item_without_id_is_ignored(self):
        assert FilmMatch.from_search_item({"type": "FilmSearchItem", "film": {"name": "?"}}) is None

    @pytest.mark.parametrize("film", ["oops", None, ["2bbs"]])
    def test_film_that_is_not_an_object_is_ignored(self, film):
        assert FilmMatch.from_search_item({"type": "FilmSearchItem", "film": film}) is None

    def test_display_name_without_year(self):
        assert FilmMatch(film_id="x", name="Untitled").display_name == "Untitled"


class TestLookupOutcome:
    """Test LookupOutcome tagging"""

    def test_found(self):
        outcome = LookupOutcome.found("q", FilmMatch(film_id="x", name="X"))

        assert outcome.kind is LookupKind.FOUND
        assert outcome.film_id == "x"

    def test_auth_error_is_fatal(self):
        error = LetterboxdError("denied", is_auth_error=True)

        assert LookupOutcome.from_error("q", error).kind is LookupKind.FATAL

    @pytest.mark.parametrize("error", [
        LetterboxdError("rate limited", is_rate_limit=True),
        LetterboxdError("Letterboxd API error 502"),
    ])
    def test_other_errors_are_transient(self, error):
        outcome = LookupOutcome.from_error("q", error)

        assert outcome.kind is LookupKind.TRANSIENT
        assert outcome.error is error
        assert outcome.film_id is None


class TestListModels:
    """Test list payload parsing"""

    def test_entries_page(self):
        page = ListEntriesPage.from_api_data({
            "next": "start=100",
            "items": [
                {"film": {"id": "a", "name": "Film A"}},
                {"film": {"id": "b", "name": "Film B"}},
                {"film": {}},
                "garbage",
            ],
        })

        assert page.films == {"a": "Film A", "b": "Film B"}
        assert page.film_ids == {"a", "b"}
        assert page.next_cursor == "start=100"

    def test_empty_cursor_means_last_page(self):
        assert ListEntriesPage.from_api_data({"items": [], "next": ""}).next_cursor is None

    def test_malformed_items_raise(self):
        with pytest.raises(LetterboxdError):
            ListEntriesPage.from_api_data({"items": {"a": 1}})

    def test_list_summary(self):
        summary = ListSummary.from_api_data({"id": "aBc1", "name": "To watch", "filmCount": 3})

        assert summary == ListSummary(list_id="aBc1", name="To watch", film_count=3)

    def test_list_summary_requires_name(self):
        with pytest.raises(LetterboxdError):
            ListSummary.from_api_data({"id": "aBc1"})

    def test_update_result_errors(self):
        result = ListUpdateResult.from_api_data("aBc1", {
            "messages": [
                {"type": "Success", "code": "ListUpdated", "title": "Updated"},
                {"type": "Error", "code": "UnknownFilm", "title": "Unknown film"},
            ],
        })

        assert not result.succeeded
        assert [m.code for m in result.errors] == ["UnknownFilm"]

    def test_update_result_without_messages(self):
        assert ListUpdateResult.from_api_data("aBc1", {}).succeeded


class TestAccessToken:
    """Test AccessToken parsing"""

    def test_from_api_data(self):
        token = AccessToken.from_api_data({"access_token": "tok", "expires_in": 3600})

        assert token.access_token == "tok"
        assert "tok" not in repr(token)

    def test_missing_token_is_auth_error(self):
        with pytest.raises(LetterboxdError) as exc_info:
            AccessToken.from_api_data({"error": "invalid_grant"})

        assert exc_info.value.is_auth_error
