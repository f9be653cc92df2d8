"""
CatHealth Backend — Insurance Service
=======================================

What:  Insurance policy CRUD. A policy belongs to a cat; its owner is the
       cat's owner.
Who:   Called by routes/insurance.py.
"""

import logging
from typing import List

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cathealth.exceptions import DatabaseError
from cathealth.models import InsurancePolicy
from cathealth.schemas.auth import TokenClaims
from cathealth.schemas.insurance import InsuranceResponse, InsuranceWrite
from cathealth.services.ownership import get_owned_cat, get_owned_child

logger = logging.getLogger(__name__)


def _apply(policy: InsurancePolicy, payload: InsuranceWrite) -> None:
    policy.provider = payload.provider
    policy.policy_number = payload.policy_number
    policy.start_date = payload.start_date
    policy.end_date = payload.end_date
    policy.premium = payload.premium
    policy.coverage = payload.coverage


class InsuranceService:
    async def _owned_policy(
        self, db: AsyncSession, policy_id: int, current_user: TokenClaims
    ) -> InsurancePolicy:
        return await get_owned_child(db, InsurancePolicy, policy_id, current_user, "insurance policy")

    async def create_policy(
        self,
        db: AsyncSession,
        cat_id: int,
        payload: InsuranceWrite,
        current_user: TokenClaims,
    ) -> InsuranceResponse:
        try:
            cat = await get_owned_cat(db, cat_id, current_user)
            policy = InsurancePolicy(cat_id=cat.id)
            _apply(policy, payload)
            db.add(policy)
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to create policy for cat %s: %s", cat_id, str(e))
            raise DatabaseError(message="Failed to create insurance policy. Please try again.")

        logger.info("Insurance policy %s created for cat %s", policy.id, cat_id)
        return InsuranceResponse.from_model(policy)

    async def list_policies(
        self, db: AsyncSession, cat_id: int, current_user: TokenClaims
    ) -> List[InsuranceResponse]:
        """Policies of one cat, latest start date first."""
        try:
            cat = await get_owned_cat(db, cat_id, current_user)
            result = await db.execute(
                select(InsurancePolicy)
                .where(InsurancePolicy.cat_id == cat.id)
                .order_by(desc(InsurancePolicy.start_date), desc(InsurancePolicy.id))
            )
        except SQLAlchemyError as e:
            logger.error("Failed to list policies for cat %s: %s", cat_id, str(e))
            raise DatabaseError(message="Failed to retrieve insurance policies. Please try again.")
        return [InsuranceResponse.from_model(p) for p in result.scalars().all()]

    async def get_policy(
        self, db: AsyncSession, policy_id: int, current_user: TokenClaims
    ) -> InsuranceResponse:
        try:
            policy = await self._owned_policy(db, policy_id, current_user)
        except SQLAlchemyError as e:
            logger.error("Failed to load policy %s: %s", policy_id, str(e))
            raise DatabaseError(message="Failed to retrieve insurance policy. Please try again.")
        return InsuranceResponse.from_model(policy)

    async def update_policy(
        self,
        db: AsyncSession,
        policy_id: int,
        payload: InsuranceWrite,
        current_user: TokenClaims,
    ) -> InsuranceResponse:
        try:
            policy = await self._owned_policy(db, policy_id, current_user)
            _apply(policy, payload)
            policy.touch()
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to update policy %s: %s", policy_id, str(e))
            raise DatabaseError(message="Failed to update insurance policy. Please try again.")

        logger.info("Insurance policy %s updated", policy.id)
        return InsuranceResponse.from_model(policy)

    async def delete_policy(self, db: AsyncSession, policy_id: int, current_user: TokenClaims) -> None:
        try:
            policy = await self._owned_policy(db, policy_id, current_user)
            await db.delete(policy)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to delete policy %s: %s", policy_id, str(e))
            raise DatabaseError(message="Failed to delete insurance policy. Please try again.")

        logger.info("Insurance policy %s deleted", policy_id)
