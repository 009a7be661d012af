"""Candidacy applications: intake during the application stage, admin review.

An application is accepted only while the timeline allows ``apply``.  Review
is a one-way move out of ``submitted``; approval creates the Candidate in the
same unit of work and announces it on the candidates topic.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from evote.core.exceptions import ConflictError, NotFoundError, ValidationError
from evote.core.notifications import CANDIDATES, ChangeEvent, ChangeFeed
from evote.core.pagination import PaginationParams
from evote.domain.aspirant import Aspirant, AspirantStatus
from evote.repositories.aspirant import AspirantRepository
from evote.repositories.catalog import CandidateRepository, PositionRepository
from evote.schemas.aspirant import AspirantApply
from evote.services import audit
from evote.services.audit import AuditService
from evote.services.eligibility import Action, require
from evote.services.timeline import Clock, TimelineService, utc_now

logger = logging.getLogger(__name__)


class AspirantService:
    def __init__(self, session: AsyncSession, feed: ChangeFeed, clock: Clock = utc_now):
        self._session = session
        self._repo = AspirantRepository(session)
        self._positions = PositionRepository(session)
        self._candidates = CandidateRepository(session)
        self._audit = AuditService(session)
        self._timeline = TimelineService(session, clock)
        self._feed = feed
        self._clock = clock

    async def apply(self, data: AspirantApply) -> Aspirant:
        require(Action.APPLY, await self._timeline.status())

        if not await self._positions.get_by_name(data.position):
            raise ValidationError(f"Unknown position '{data.position}'")
        if await self._repo.get_by_matric(data.matric):
            raise ConflictError("An application already exists for this matric number", code="ALREADY_APPLIED")

        aspirant = await self._repo.create(**data.model_dump(), status=AspirantStatus.SUBMITTED.value)
        await self._audit.record(
            audit.ASPIRANT_APPLIED,
            f"Application for {data.position}",
            actor_id=aspirant.id,
            metadata={"position": data.position},
        )
        logger.info("Aspirant %s applied for %s", aspirant.id, data.position)
        return aspirant

    async def list_aspirants(self, pagination: PaginationParams, status: str | None = None):
        return await self._repo.page(pagination, {"status": status})

    async def get_aspirant(self, aspirant_id: str) -> Aspirant:
        aspirant = await self._repo.get_by_id(aspirant_id)
        if not aspirant:
            raise NotFoundError("Aspirant", aspirant_id)
        return aspirant

    async def approve(self, aspirant_id: str, notes: str | None = None) -> Aspirant:
        """Approve a submitted application and promote it to a Candidate."""
        aspirant = await self.get_aspirant(aspirant_id)
        if not await self._positions.get_by_name(aspirant.position):
            raise ValidationError(f"Unknown position '{aspirant.position}'")

        if not await self._repo.review(aspirant_id, AspirantStatus.APPROVED, review_notes=notes):
            raise ConflictError("Application has already been reviewed", code="ASPIRANT_ALREADY_REVIEWED")
        candidate = await self._candidates.create(
            full_name=aspirant.full_name, position=aspirant.position, vote_count=0
        )
        aspirant = await self._repo.update(aspirant_id, candidate_id=candidate.id, promoted_at=self._clock())
        await self._audit.record(
            audit.ASPIRANT_APPROVED,
            "Application approved",
            actor_id=aspirant_id,
            metadata={"candidate_id": candidate.id, "position": candidate.position},
        )
        await self._session.commit()
        await self._feed.publish(ChangeEvent(topic=CANDIDATES, action="created", entity_id=candidate.id))
        logger.info("Aspirant %s promoted to candidate %s", aspirant_id, candidate.id)
        return aspirant  # type: ignore[return-value]

    async def reject(self, aspirant_id: str, notes: str | None = None) -> Aspirant:
        await self.get_aspirant(aspirant_id)
        if not await self._repo.review(aspirant_id, AspirantStatus.REJECTED, review_notes=notes):
            raise ConflictError("Application has already been reviewed", code="ASPIRANT_ALREADY_REVIEWED")
        await self._audit.record(audit.ASPIRANT_REJECTED, "Application rejected", actor_id=aspirant_id)
        return await self.get_aspirant(aspirant_id)
