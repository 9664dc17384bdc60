"""
Unit tests for SurveyService domain logic.

Tests domain logic with a mocked repository to verify:
- Field validation and normalization
- Duplicate detection
- Pagination bounds
- Partial updates
- Not-found handling
"""

from unittest.mock import Mock
from uuid import uuid4

import pytest

from assetpay.domain.exceptions import (
    DuplicateKey,
    DuplicateSurvey,
    InvalidSurvey,
    SurveyNotFound,
)
from assetpay.domain.models import SurveyDraft, SurveyEntry
from assetpay.domain.survey import SurveyService


def make_draft(**overrides) -> SurveyDraft:
    fields = {
        "name": "John Doe",
        "company_name": "ABC Corp",
        "designation": "Manager",
        "email": "john@abc.com",
        "mobile": "9876543210",
        "url": "https://abc.com",
        "entries": [
            SurveyEntry("How many assets?", "20"),
            SurveyEntry("Project duration?", "1 month"),
        ],
    }
    fields.update(overrides)
    return SurveyDraft(**fields)


@pytest.fixture
def repo() -> Mock:
    repo = Mock()
    repo.find_by_email.return_value = None
    return repo


@pytest.fixture
def service(repo: Mock) -> SurveyService:
    return SurveyService(repository=repo)


class TestSubmit:
    """Tests for survey submission."""

    def test_valid_survey_stored(self, service: SurveyService, repo: Mock) -> None:
        """A valid draft is stored with all its entries."""
        service.submit(make_draft())
        stored = repo.create.call_args[0][0]
        assert stored.company_name == "ABC Corp"
        assert len(stored.entries) == 2

    def test_email_normalized(self, service: SurveyService, repo: Mock) -> None:
        """Survey email is stripped and lowercased."""
        service.submit(make_draft(email="  John@ABC.com "))
        assert repo.create.call_args[0][0].email == "john@abc.com"

    def test_name_and_url_optional(self, service: SurveyService, repo: Mock) -> None:
        """Blank name and url are stored as None."""
        service.submit(make_draft(name="  ", url=""))
        stored = repo.create.call_args[0][0]
        assert stored.name is None
        assert stored.url is None

    @pytest.mark.parametrize("field", ["company_name", "designation", "email", "mobile"])
    def test_required_fields(self, service: SurveyService, field: str) -> None:
        """Blank required fields are rejected."""
        with pytest.raises(InvalidSurvey):
            service.submit(make_draft(**{field: "  "}))

    @pytest.mark.parametrize("mobile", ["12345", "98765432101", "98765abcde"])
    def test_mobile_must_be_ten_digits(self, service: SurveyService, mobile: str) -> None:
        """Mobile must be exactly ten digits."""
        with pytest.raises(InvalidSurvey):
            service.submit(make_draft(mobile=mobile))

    def test_invalid_email(self, service: SurveyService) -> None:
        """Malformed email is rejected."""
        with pytest.raises(InvalidSurvey):
            service.submit(make_draft(email="john-at-abc"))

    def test_invalid_url(self, service: SurveyService) -> None:
        """A url that is not a web address is rejected."""
        with pytest.raises(InvalidSurvey):
            service.submit(make_draft(url="not a url"))

    def test_bare_domain_url_accepted(self, service: SurveyService, repo: Mock) -> None:
        """A url without scheme is accepted as given."""
        service.submit(make_draft(url="abc.com"))
        assert repo.create.call_args[0][0].url == "abc.com"

    def test_entries_required(self, service: SurveyService) -> None:
        """A survey with no entries is rejected."""
        with pytest.raises(InvalidSurvey):
            service.submit(make_draft(entries=[]))

    def test_empty_question_rejected_with_position(self, service: SurveyService) -> None:
        """The error names the position of the blank question."""
        entries = [SurveyEntry("Q1", "A1"), SurveyEntry("", "A2")]
        with pytest.raises(InvalidSurvey, match="item 2"):
            service.submit(make_draft(entries=entries))

    def test_empty_answers_allowed(self, service: SurveyService, repo: Mock) -> None:
        """Missing answers are stored as empty strings."""
        service.submit(make_draft(entries=[SurveyEntry("Q1", None)]))
        assert repo.create.call_args[0][0].entries == [SurveyEntry("Q1", "")]

    def test_duplicate_email_rejected(self, service: SurveyService, repo: Mock) -> None:
        """A second survey for the same email is rejected before insert."""
        repo.find_by_email.return_value = Mock()
        with pytest.raises(DuplicateSurvey):
            service.submit(make_draft())
        repo.create.assert_not_called()

    def test_store_duplicate_key_translated(self, service: SurveyService, repo: Mock) -> None:
        """A unique violation from the store surfaces as DuplicateSurvey."""
        repo.create.side_effect = DuplicateKey("john@abc.com")
        with pytest.raises(DuplicateSurvey):
            service.submit(make_draft())


class TestListPage:
    """Tests for pagination."""

    def test_offset_from_page(self, service: SurveyService, repo: Mock) -> None:
        """Page and page size become offset and limit."""
        repo.list_recent.return_value = []
        repo.count.return_value = 25

        page = service.list_page(page=3, per_page=10)

        repo.list_recent.assert_called_once_with(offset=20, limit=10)
        assert page.total == 25
        assert page.total_pages == 3

    def test_bounds_clamped(self, service: SurveyService, repo: Mock) -> None:
        """Page is at least 1 and page size is capped."""
        repo.list_recent.return_value = []
        repo.count.return_value = 0

        page = service.list_page(page=0, per_page=1000)

        assert page.page == 1
        assert page.per_page == 100
        assert page.total_pages == 0


class TestGetUpdateDelete:
    """Tests for single-survey operations."""

    def test_get_missing(self, service: SurveyService, repo: Mock) -> None:
        """Getting an unknown id raises SurveyNotFound."""
        repo.get.return_value = None
        with pytest.raises(SurveyNotFound):
            service.get(uuid4())

    def test_partial_update_passes_only_given_fields(
        self, service: SurveyService, repo: Mock
    ) -> None:
        """Only supplied fields are cleaned and passed to the store."""
        survey_id = uuid4()
        service.update(survey_id, {"designation": " Director ", "email": "NEW@abc.com"})
        repo.update.assert_called_once_with(
            survey_id, {"designation": "Director", "email": "new@abc.com"}
        )

    def test_update_validates_entries(self, service: SurveyService) -> None:
        """Replacing entries with an empty list is rejected."""
        with pytest.raises(InvalidSurvey):
            service.update(uuid4(), {"entries": []})

    def test_update_rejects_unknown_fields(self, service: SurveyService) -> None:
        """Fields outside the survey schema are rejected."""
        with pytest.raises(InvalidSurvey):
            service.update(uuid4(), {"id": "x"})

    def test_update_missing(self, service: SurveyService, repo: Mock) -> None:
        """Updating an unknown id raises SurveyNotFound."""
        repo.update.return_value = None
        with pytest.raises(SurveyNotFound):
            service.update(uuid4(), {"designation": "CTO"})

    def test_update_email_conflict(self, service: SurveyService, repo: Mock) -> None:
        """Changing email to one already used raises DuplicateSurvey."""
        repo.update.side_effect = DuplicateKey("x@abc.com")
        with pytest.raises(DuplicateSurvey):
            service.update(uuid4(), {"email": "x@abc.com"})

    def test_delete_missing(self, service: SurveyService, repo: Mock) -> None:
        """Deleting an unknown id raises SurveyNotFound."""
        repo.delete.return_value = False
        with pytest.raises(SurveyNotFound):
            service.delete(uuid4())


class TestSearch:
    """Tests for search argument handling."""

    def test_blank_terms_become_none(self, service: SurveyService, repo: Mock) -> None:
        """Blank search terms are dropped and the result limit applied."""
        service.search(text="  ", company=" ABC ", designation=None)
        repo.search.assert_called_once_with(
            text=None, company="ABC", designation=None, limit=50
        )
