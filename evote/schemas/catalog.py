"""Position and candidate Pydantic schemas.

Candidate responses never carry ``vote_count``; tallies are only served by
the results endpoint once results are published.
"""


from pydantic import Field

from evote.domain.catalog import VoteType
from evote.schemas.common import CamelModel

class PositionCreate(CamelModel):
    name: str
    vote_type: VoteType = VoteType.SINGLE
    max_selections: int = Field(default=1, ge=1)
    display_order: int = 0

    model_config = {**CamelModel.model_config, "use_enum_values": True}

class PositionOut(CamelModel):
    id: str
    name: str
    vote_type: VoteType
    max_selections: int
    display_order: int

class CandidateCreate(CamelModel):
    full_name: str
    position: str

class CandidateOut(CamelModel):
    id: str
    full_name: str
    position: str
