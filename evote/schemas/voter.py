"""Voter Pydantic schemas."""


from pydantic import Field, field_validator

from evote.schemas.common import CamelModel

class VoterRegister(CamelModel):
    matric: str = Field(pattern=r"^\s*\d{2}/\d{2}[A-Za-z]{3}\d{3}\s*$")
    name: str = Field(min_length=1)
    email: str = Field(pattern=r".+@.+\..+")

    @field_validator("matric", "email")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("name")
    @classmethod
    def _strip(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be blank")
        return value.strip()

class VoterRegistered(CamelModel):
    voter_id: str
    status: str  # created | exists

class VoterOut(CamelModel):
    id: str
    matric: str
    name: str
    verified: bool
    voted: bool
    needs_ballot_recovery: bool = False
