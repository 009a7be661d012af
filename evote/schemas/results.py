"""Results and turnout response schemas."""


from datetime import datetime

from evote.schemas.common import CamelModel

class CandidateTallyOut(CamelModel):
    id: str
    full_name: str
    vote_count: int
    percentage: float

class PositionResultOut(CamelModel):
    position: str
    total_votes: int
    candidates: list[CandidateTallyOut]
    winner: CandidateTallyOut | None = None
    is_draw: bool
    withheld: bool

class TurnoutOut(CamelModel):
    voted: int
    verified: int
    percentage: float

class ResultsOut(CamelModel):
    evaluated_at: datetime
    is_voting_ended: bool
    is_results_published: bool
    positions: list[PositionResultOut]
    turnout: TurnoutOut
