from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from sqlmodel import Session, select

from knockout.database import get_session
from knockout.models.competition import Competition, CompetitionFormat

router = APIRouter()


class CompetitionCreate(BaseModel):
    name: str
    format: CompetitionFormat
    subdivisions: Optional[List[str]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()

    @model_validator(mode="after")
    def validate_subdivisions(self):
        if self.format == CompetitionFormat.league and self.subdivisions:
            raise ValueError("league competitions have no subdivisions")
        if self.subdivisions and len(set(self.subdivisions)) != len(self.subdivisions):
            raise ValueError("subdivisions must be unique")
        return self


class CompetitionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    format: CompetitionFormat
    subdivisions: List[str] = []
    qualifier_count: int
    created_at: datetime

    @field_validator("subdivisions", mode="before")
    @classmethod
    def normalize_subdivisions(cls, v):
        return v or []


@router.get("/competitions", response_model=List[CompetitionResponse])
def list_competitions(session: Session = Depends(get_session)):
    """List all competitions"""
    return session.exec(select(Competition).order_by(Competition.id)).all()


@router.post("/competitions", response_model=CompetitionResponse, status_code=201)
def create_competition(payload: CompetitionCreate, session: Session = Depends(get_session)):
    competition = Competition(
        name=payload.name,
        format=payload.format.value,
        subdivisions=payload.subdivisions or [],
    )
    session.add(competition)
    session.commit()
    session.refresh(competition)
    return competition


@router.get("/competitions/{competition_id}", response_model=CompetitionResponse)
def get_competition(competition_id: int, session: Session = Depends(get_session)):
    competition = session.get(Competition, competition_id)
    if not competition:
        raise HTTPException(status_code=404, detail="Competition not found")
    return competition
