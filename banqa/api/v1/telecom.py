"""Airtime and data operator lookups (Reloadly)."""

from fastapi import APIRouter, Query

from banqa.api.deps import CurrentContext
from banqa.providers.reloadly import get_reloadly_client
from banqa.schemas.telecom import OperatorDetectResponse, OperatorListResponse

router = APIRouter(prefix="/telecom", tags=["telecom"])


@router.get("/operators/{country_code}", response_model=OperatorListResponse)
async def list_operators(country_code: str, ctx: CurrentContext):
    operators = await get_reloadly_client().get_operators(country_code.upper())
    return OperatorListResponse(operators=operators)


@router.get("/detect", response_model=OperatorDetectResponse)
async def detect_operator(
    ctx: CurrentContext,
    phone_number: str = Query(..., min_length=7, max_length=20),
    country_code: str = Query(default="NG", min_length=2, max_length=2),
):
    operator = await get_reloadly_client().detect_operator(phone_number, country_code.upper())
    return OperatorDetectResponse(operator=operator)
