"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Survey requests accept both the paired format (questions_answers) and the
parallel-array format (questions + answers); both are normalized into
domain SurveyEntry lists here, before reaching the service.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, model_validator

from assetpay.domain.models import CustomerSurvey, SurveyDraft, SurveyEntry, SurveyPage


class RegisterRequest(BaseModel):
    """Request model for customer registration."""

    name: str | None = None
    email: EmailStr
    company: str = Field(..., min_length=1)
    assets: int = Field(..., gt=0, description="Number of assets")
    duration: int = Field(..., gt=0, description="Subscription length in months")
    pricing: Decimal = Field(..., gt=0, description="Price shown to the customer, in dollars")


class RegisterResponse(BaseModel):
    """Response model for successful registration."""

    message: str
    payment_handle: str
    record_id: UUID


class WebhookAck(BaseModel):
    """Acknowledgement returned to the payment gateway."""

    received: bool
    message: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str


class QuestionAnswer(BaseModel):
    question: str | None = None
    answer: str | None = None


def _normalize_entries(
    questions: list[str | None] | None,
    answers: list[str | None] | None,
    pairs: list[QuestionAnswer] | None,
) -> list[SurveyEntry] | None:
    if pairs is not None:
        return [SurveyEntry(question=p.question or "", answer=p.answer or "") for p in pairs]
    if questions is None and answers is None:
        return None
    if not questions:
        raise ValueError("questions must be a non-empty array")
    if not answers:
        raise ValueError("answers must be a non-empty array")
    if len(questions) != len(answers):
        raise ValueError("Number of questions and answers must be equal")
    return [SurveyEntry(question=q or "", answer=a or "") for q, a in zip(questions, answers)]


class SurveyFields(BaseModel):
    name: str | None = None
    url: str | None = None
    questions: list[str | None] | None = None
    answers: list[str | None] | None = None
    questions_answers: list[QuestionAnswer] | None = None

    def entries(self) -> list[SurveyEntry] | None:
        return _normalize_entries(self.questions, self.answers, self.questions_answers)

    @model_validator(mode="after")
    def check_entries(self) -> "SurveyFields":
        self.entries()
        return self


class SurveyCreateRequest(SurveyFields):
    """Request model for survey submission."""

    company_name: str
    designation: str
    email: str
    mobile: str

    @model_validator(mode="after")
    def require_entries(self) -> "SurveyCreateRequest":
        if self.entries() is None:
            raise ValueError("questions and answers are required")
        return self

    def to_draft(self) -> SurveyDraft:
        return SurveyDraft(
            name=self.name,
            company_name=self.company_name,
            designation=self.designation,
            email=self.email,
            mobile=self.mobile,
            url=self.url,
            entries=self.entries(),
        )


class SurveyUpdateRequest(SurveyFields):
    """Request model for partial survey updates. Omitted fields are unchanged."""

    company_name: str | None = None
    designation: str | None = None
    email: str | None = None
    mobile: str | None = None

    def to_changes(self) -> dict[str, Any]:
        provided = self.model_fields_set - {"questions", "answers", "questions_answers"}
        changes = {key: getattr(self, key) for key in provided}
        entries = self.entries()
        if entries is not None:
            changes["entries"] = entries
        return changes


class SurveyResponse(BaseModel):
    id: UUID
    name: str | None
    company_name: str
    designation: str
    email: str
    mobile: str
    url: str | None
    questions: list[str]
    answers: list[str]
    questions_answers: list[QuestionAnswer]
    total_questions: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, survey: CustomerSurvey) -> "SurveyResponse":
        return cls(
            id=survey.id,
            name=survey.name,
            company_name=survey.company_name,
            designation=survey.designation,
            email=survey.email,
            mobile=survey.mobile,
            url=survey.url,
            questions=[e.question for e in survey.entries],
            answers=[e.answer for e in survey.entries],
            questions_answers=[
                QuestionAnswer(question=e.question, answer=e.answer) for e in survey.entries
            ],
            total_questions=len(survey.entries),
            created_at=survey.created_at,
            updated_at=survey.updated_at,
        )


class SurveyEnvelope(BaseModel):
    message: str | None = None
    data: SurveyResponse


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_records: int
    per_page: int


class SurveyListResponse(BaseModel):
    data: list[SurveyResponse]
    pagination: Pagination

    @classmethod
    def from_page(cls, page: SurveyPage) -> "SurveyListResponse":
        return cls(
            data=[SurveyResponse.from_domain(s) for s in page.items],
            pagination=Pagination(
                current_page=page.page,
                total_pages=page.total_pages,
                total_records=page.total,
                per_page=page.per_page,
            ),
        )


class SurveySearchResponse(BaseModel):
    data: list[SurveyResponse]
    count: int


class MessageResponse(BaseModel):
    message: str
