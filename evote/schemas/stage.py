"""Stage and timeline Pydantic schemas (request DTOs and response models)."""


from datetime import datetime

from evote.domain.stage import StageCategory
from evote.schemas.common import CamelModel

_STORE_ENUM_VALUES = {**CamelModel.model_config, "use_enum_values": True}

class StageCreate(CamelModel):
    stage_name: str
    category: StageCategory = StageCategory.OTHER
    start_time: datetime
    end_time: datetime
    is_active: bool = True

    model_config = _STORE_ENUM_VALUES

class StageUpdate(CamelModel):
    stage_name: str | None = None
    category: StageCategory | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    is_active: bool | None = None

    model_config = _STORE_ENUM_VALUES

class StageOut(CamelModel):
    id: str
    stage_name: str
    category: StageCategory
    start_time: datetime
    end_time: datetime
    is_active: bool

class TimelineStatusOut(CamelModel):
    evaluated_at: datetime
    current_stage: StageOut | None = None
    registration_stage: StageOut | None = None
    application_stage: StageOut | None = None
    voting_stage: StageOut | None = None
    results_stage: StageOut | None = None
    is_voting_active: bool
    is_voting_ended: bool
    is_results_published: bool
    voting_end_time: datetime | None = None
    results_publish_time: datetime | None = None

class EligibilityOut(CamelModel):
    action: str
    allowed: bool
    reason: str | None = None
