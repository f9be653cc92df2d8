"""
CatHealth Backend — Insurance Route Handlers
==============================================

Policies are created and listed through their cat
(/api/cats/{catId}/insurance) and addressed by id afterwards
(/api/insurance/{id}), with ownership resolved policy → cat → owner.
"""

from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from cathealth.database import get_db_session
from cathealth.dependencies import get_current_user
from cathealth.schemas.auth import TokenClaims
from cathealth.schemas.common import ErrorResponse
from cathealth.schemas.insurance import InsuranceResponse, InsuranceWrite
from cathealth.services.insurance_service import InsuranceService
from cathealth.services.ownership import parse_id

router = APIRouter(prefix="/api", tags=["Insurance"])

insurance_service = InsuranceService()

OWNED_RESPONSES = {
    403: {"description": "Belongs to another user", "model": ErrorResponse},
    404: {"description": "Cat or policy not found", "model": ErrorResponse},
}


@router.post(
    "/cats/{cat_id}/insurance",
    status_code=201,
    response_model=InsuranceResponse,
    responses={**OWNED_RESPONSES, 400: {"description": "Invalid policy", "model": ErrorResponse}},
    summary="Add an insurance policy to a cat",
)
async def create_policy(
    cat_id: str,
    payload: InsuranceWrite,
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> InsuranceResponse:
    return await insurance_service.create_policy(db, parse_id(cat_id, "cat"), payload, current_user)


@router.get(
    "/cats/{cat_id}/insurance",
    response_model=List[InsuranceResponse],
    responses=OWNED_RESPONSES,
    summary="List a cat's insurance policies (latest start date first)",
)
async def list_policies(
    cat_id: str,
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[InsuranceResponse]:
    return await insurance_service.list_policies(db, parse_id(cat_id, "cat"), current_user)


@router.get(
    "/insurance/{policy_id}",
    response_model=InsuranceResponse,
    responses=OWNED_RESPONSES,
    summary="Get an insurance policy",
)
async def get_policy(
    policy_id: str,
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> InsuranceResponse:
    return await insurance_service.get_policy(db, parse_id(policy_id, "insurance policy"), current_user)


@router.put(
    "/insurance/{policy_id}",
    response_model=InsuranceResponse,
    responses={**OWNED_RESPONSES, 400: {"description": "Invalid policy", "model": ErrorResponse}},
    summary="Replace an insurance policy",
)
async def update_policy(
    policy_id: str,
    payload: InsuranceWrite,
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> InsuranceResponse:
    return await insurance_service.update_policy(
        db, parse_id(policy_id, "insurance policy"), payload, current_user
    )


@router.delete(
    "/insurance/{policy_id}",
    status_code=204,
    response_class=Response,
    responses=OWNED_RESPONSES,
    summary="Delete an insurance policy",
)
async def delete_policy(
    policy_id: str,
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await insurance_service.delete_policy(db, parse_id(policy_id, "insurance policy"), current_user)
    return Response(status_code=204)
