from pydantic import BaseModel, Field


class ProspectIn(BaseModel):
    name: str
    email: str
    company: str
    role: str


class GoalIn(BaseModel):
    name: str
    interval: int = Field(ge=0)  # seconds between ticks
    prospect: ProspectIn
