"""Vote submission request/response schemas."""


from pydantic import Field

from evote.schemas.common import CamelModel

class VoteSubmission(CamelModel):
    voter_id: str = Field(min_length=1)
    # position name -> candidate ids
    selections: dict[str, list[str]]

class VoteSubmitResponse(CamelModel):
    success: bool = True
    message: str = "Vote submitted successfully"
    positions: list[str] = []
