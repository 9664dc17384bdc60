"""
Survey domain service - customer survey storage and search.

Surveys hold an ordered list of question/answer entries. Input formats are
normalized to entries by the API layer; this service only validates and
persists them.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from email_validator import EmailNotValidError, validate_email

from .exceptions import DuplicateKey, DuplicateSurvey, InvalidSurvey, SurveyNotFound
from .models import CustomerSurvey, SurveyDraft, SurveyEntry, SurveyPage
from .ports import SurveyRepository
from .registration import normalize_email

logger = logging.getLogger(__name__)

MOBILE_PATTERN = re.compile(r"^[0-9]{10}$")
URL_PATTERN = re.compile(r"^(https?://)?([\da-z.-]+)\.([a-z.]{2,6})([/\w .-]*)/?$", re.IGNORECASE)
SEARCH_LIMIT = 50
MAX_PER_PAGE = 100

UPDATABLE_FIELDS = frozenset(
    {"name", "company_name", "designation", "email", "mobile", "url", "entries"}
)


def validate_entries(entries: list[SurveyEntry]) -> list[SurveyEntry]:
    """Require at least one entry and a question for every entry."""
    if not entries:
        raise InvalidSurvey("At least one question is required")
    normalized = []
    for index, entry in enumerate(entries, start=1):
        question = (entry.question or "").strip()
        if not question:
            raise InvalidSurvey(f"Question is required for item {index}")
        normalized.append(SurveyEntry(question=question, answer=entry.answer or ""))
    return normalized


def _required(value: str | None, field_name: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidSurvey(f"{field_name} is required")
    return value


def _email(value: str | None) -> str:
    email = normalize_email(_required(value, "email"))
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise InvalidSurvey("Please enter a valid email") from None
    return email


def _mobile(value: str | None) -> str:
    mobile = _required(value, "mobile")
    if not MOBILE_PATTERN.match(mobile):
        raise InvalidSurvey("Please enter a valid 10-digit mobile number")
    return mobile


def _url(value: str | None) -> str | None:
    url = (value or "").strip()
    if not url:
        return None
    if not URL_PATTERN.match(url):
        raise InvalidSurvey("Please enter a valid URL")
    return url


@dataclass
class SurveyService:
    """CRUD and search over customer surveys."""

    repository: SurveyRepository

    def submit(self, draft: SurveyDraft) -> CustomerSurvey:
        """
        Validate and store a new survey.

        Raises:
            InvalidSurvey: A field failed validation
            DuplicateSurvey: A survey already exists for the email
        """
        clean = SurveyDraft(
            name=(draft.name or "").strip() or None,
            company_name=_required(draft.company_name, "company_name"),
            designation=_required(draft.designation, "designation"),
            email=_email(draft.email),
            mobile=_mobile(draft.mobile),
            url=_url(draft.url),
            entries=validate_entries(draft.entries),
        )

        if self.repository.find_by_email(clean.email) is not None:
            raise DuplicateSurvey(clean.email)
        try:
            survey = self.repository.create(clean)
        except DuplicateKey:
            raise DuplicateSurvey(clean.email) from None

        logger.info("Customer survey saved: %s", survey.id)
        return survey

    def list_page(self, page: int = 1, per_page: int = 10) -> SurveyPage:
        page = max(page, 1)
        per_page = min(max(per_page, 1), MAX_PER_PAGE)
        items = self.repository.list_recent(offset=(page - 1) * per_page, limit=per_page)
        return SurveyPage(
            items=items, page=page, per_page=per_page, total=self.repository.count()
        )

    def get(self, survey_id: UUID) -> CustomerSurvey:
        survey = self.repository.get(survey_id)
        if survey is None:
            raise SurveyNotFound(str(survey_id))
        return survey

    def update(self, survey_id: UUID, changes: dict[str, Any]) -> CustomerSurvey:
        """
        Apply a partial update. Fields left out of changes keep their values.

        Raises:
            InvalidSurvey: A provided field failed validation
            SurveyNotFound: No survey with this id
            DuplicateSurvey: The new email belongs to another survey
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise InvalidSurvey(f"Unknown fields: {', '.join(sorted(unknown))}")

        clean: dict[str, Any] = {}
        for key, value in changes.items():
            if key == "name":
                clean[key] = (value or "").strip() or None
            elif key in ("company_name", "designation"):
                clean[key] = _required(value, key)
            elif key == "email":
                clean[key] = _email(value)
            elif key == "mobile":
                clean[key] = _mobile(value)
            elif key == "url":
                clean[key] = _url(value)
            else:
                clean[key] = validate_entries(value)

        try:
            survey = self.repository.update(survey_id, clean)
        except DuplicateKey:
            raise DuplicateSurvey(clean.get("email", "")) from None
        if survey is None:
            raise SurveyNotFound(str(survey_id))

        logger.info("Customer survey updated: %s", survey.id)
        return survey

    def delete(self, survey_id: UUID) -> None:
        if not self.repository.delete(survey_id):
            raise SurveyNotFound(str(survey_id))
        logger.info("Customer survey deleted: %s", survey_id)

    def search(
        self,
        text: str | None = None,
        company: str | None = None,
        designation: str | None = None,
    ) -> list[CustomerSurvey]:
        return self.repository.search(
            text=(text or "").strip() or None,
            company=(company or "").strip() or None,
            designation=(designation or "").strip() or None,
            limit=SEARCH_LIMIT,
        )
