"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  stage.py           — Election timeline stages (category-tagged windows)
  aspirant.py        — Candidacy applications and their review outcome
  voter.py           — Registered voters and their monotonic voted flag
  catalog.py         — Positions and candidates (vote_count is a cache)
  ballot.py          — Issuance log and anonymous vote rows
  audit.py           — Immutable audit log (never updated or deleted)
  reconciliation.py  — Operator queue for claimed voters without a ballot
  mixins.py          — Shared TimestampMixin
"""

from evote.domain.aspirant import Aspirant, AspirantStatus
from evote.domain.audit import AuditEvent
from evote.domain.ballot import IssuanceLog, Vote
from evote.domain.catalog import Candidate, Position, VoteType
from evote.domain.reconciliation import ReconciliationItem, ReconciliationStatus
from evote.domain.stage import Stage, StageCategory
from evote.domain.voter import Voter

__all__ = [
    "Aspirant",
    "AspirantStatus",
    "AuditEvent",
    "Candidate",
    "IssuanceLog",
    "Position",
    "ReconciliationItem",
    "ReconciliationStatus",
    "Stage",
    "StageCategory",
    "Vote",
    "VoteType",
    "Voter",
]
