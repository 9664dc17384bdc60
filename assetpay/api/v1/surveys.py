"""
API v1 routes - customer surveys.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from assetpay.api.dependencies import get_survey_service
from assetpay.api.models import (
    ErrorResponse,
    MessageResponse,
    SurveyCreateRequest,
    SurveyEnvelope,
    SurveyListResponse,
    SurveyResponse,
    SurveySearchResponse,
    SurveyUpdateRequest,
)
from assetpay.domain.exceptions import DuplicateSurvey, InvalidSurvey, SurveyNotFound
from assetpay.domain.survey import SurveyService

router = APIRouter(tags=["v1"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Survey not found"}}


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer survey not found")


@router.post(
    "/customer-survey",
    response_model=SurveyEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Invalid or duplicate survey"}},
    summary="Submit a customer survey",
)
def submit_survey(
    request_data: SurveyCreateRequest,
    service: SurveyService = Depends(get_survey_service),
) -> SurveyEnvelope:
    try:
        survey = service.submit(request_data.to_draft())
    except InvalidSurvey as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except DuplicateSurvey:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Customer with this email already exists",
        ) from None
    return SurveyEnvelope(
        message="Customer survey submitted successfully",
        data=SurveyResponse.from_domain(survey),
    )


@router.get(
    "/customer-surveys",
    response_model=SurveyListResponse,
    summary="List customer surveys, newest first",
)
def list_surveys(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: SurveyService = Depends(get_survey_service),
) -> SurveyListResponse:
    return SurveyListResponse.from_page(service.list_page(page=page, per_page=limit))


@router.get(
    "/customer-surveys/search",
    response_model=SurveySearchResponse,
    summary="Search customer surveys",
)
def search_surveys(
    q: str | None = None,
    company: str | None = None,
    designation: str | None = None,
    service: SurveyService = Depends(get_survey_service),
) -> SurveySearchResponse:
    """
    Case-insensitive search.

    - **q**: matches name, email, company, any question or any answer
    - **company**: matches company name
    - **designation**: matches designation
    """
    surveys = service.search(text=q, company=company, designation=designation)
    return SurveySearchResponse(
        data=[SurveyResponse.from_domain(s) for s in surveys], count=len(surveys)
    )


@router.get(
    "/customer-survey/{survey_id}",
    response_model=SurveyEnvelope,
    responses=_NOT_FOUND,
    summary="Get a customer survey",
)
def get_survey(
    survey_id: UUID,
    service: SurveyService = Depends(get_survey_service),
) -> SurveyEnvelope:
    try:
        survey = service.get(survey_id)
    except SurveyNotFound:
        raise _not_found() from None
    return SurveyEnvelope(data=SurveyResponse.from_domain(survey))


@router.put(
    "/customer-survey/{survey_id}",
    response_model=SurveyEnvelope,
    responses={**_NOT_FOUND, 400: {"model": ErrorResponse, "description": "Invalid update"}},
    summary="Update a customer survey",
)
def update_survey(
    survey_id: UUID,
    request_data: SurveyUpdateRequest,
    service: SurveyService = Depends(get_survey_service),
) -> SurveyEnvelope:
    try:
        survey = service.update(survey_id, request_data.to_changes())
    except SurveyNotFound:
        raise _not_found() from None
    except InvalidSurvey as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except DuplicateSurvey:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Customer with this email already exists",
        ) from None
    return SurveyEnvelope(
        message="Customer survey updated successfully",
        data=SurveyResponse.from_domain(survey),
    )


@router.delete(
    "/customer-survey/{survey_id}",
    response_model=MessageResponse,
    responses=_NOT_FOUND,
    summary="Delete a customer survey",
)
def delete_survey(
    survey_id: UUID,
    service: SurveyService = Depends(get_survey_service),
) -> MessageResponse:
    try:
        service.delete(survey_id)
    except SurveyNotFound:
        raise _not_found() from None
    return MessageResponse(message="Customer survey deleted successfully")
