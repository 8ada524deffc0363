"""Plan store: the read-only source of active lawn plans."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lawn_advisor.database.models import LawnPlan, User
from lawn_advisor.errors import StoreUnavailable
from lawn_advisor.models.location import Coordinates
from lawn_advisor.models.plan import LawnCarePlan

logger = logging.getLogger(__name__)


class PlanStore(ABC):
    """Source of the plans evaluated on each run."""

    @abstractmethod
    async def list_active_plans(self) -> list[LawnCarePlan]:
        """Return a snapshot of every active plan with its owner contact.

        Raises:
            StoreUnavailable: If the snapshot cannot be read
        """


class InMemoryPlanStore(PlanStore):
    """Plan store backed by a fixed list. Useful for local runs and tests."""

    def __init__(self, plans: Iterable[LawnCarePlan] = ()):
        self._plans = list(plans)

    async def list_active_plans(self) -> list[LawnCarePlan]:
        return list(self._plans)


class SqlPlanStore(PlanStore):
    """Reads active plans and their owners through async SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def list_active_plans(self) -> list[LawnCarePlan]:
        stmt = (
            select(LawnPlan, User)
            .join(User, LawnPlan.user_id == User.id)
            .where(LawnPlan.is_active.is_(True), User.is_active.is_(True))
            .order_by(LawnPlan.created_at, LawnPlan.id)
        )

        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).all()
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailable(f"Failed to load lawn plans: {e}") from e

        plans: list[LawnCarePlan] = []
        for plan_row, user_row in rows:
            plan = self._to_domain(plan_row, user_row)
            if plan is not None:
                plans.append(plan)

        logger.debug(f"Loaded {len(plans)} active lawn plans ({len(rows)} rows)")
        return plans

    @staticmethod
    def _to_domain(plan: LawnPlan, user: User) -> LawnCarePlan | None:
        """Convert a row pair to a domain plan, skipping unusable rows."""
        if plan.latitude is None or plan.longitude is None:
            logger.warning(f"Skipping lawn plan {plan.id}: no location set")
            return None
        try:
            return LawnCarePlan(
                id=plan.id,
                owner_email=user.email,
                owner_name=user.name,
                location=Coordinates(latitude=plan.latitude, longitude=plan.longitude),
                name=plan.name,
            )
        except ValidationError as e:
            logger.warning(f"Skipping lawn plan {plan.id}: {e.error_count()} invalid field(s)")
            return None
