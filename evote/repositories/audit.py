"""Audit log repository — append and list only."""


from evote.domain.audit import AuditEvent
from evote.repositories.base import BaseRepository


class AuditEventRepository(BaseRepository[AuditEvent]):
    model = AuditEvent
