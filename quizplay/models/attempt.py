import uuid
from datetime import datetime
from typing import List

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

from quizplay.core.time import utc_now
from quizplay.models.quiz import JSONColumnType


class AttemptRecord(SQLModel, table=True):
    __tablename__ = "quiz_attempts"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    quiz_id: str = Field(index=True)
    participant_name: str
    answers: List[dict] = Field(default_factory=list, sa_column=Column(JSONColumnType))
    score: int = Field(default=0, ge=0)
    submitted_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True)))
