import uuid
from typing import List, Optional

from sqlalchemy import JSON, Column, Integer
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, Relationship, SQLModel

JSONColumnType = JSON().with_variant(JSONB(), "postgresql")


class QuizRecord(SQLModel, table=True):
    __tablename__ = "quizzes"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    title: str
    description: Optional[str] = None
    code: str = Field(index=True)

    questions: List["QuestionRecord"] = Relationship(
        back_populates="quiz",
        sa_relationship_kwargs={"order_by": "QuestionRecord.position"},
    )


class QuestionRecord(SQLModel, table=True):
    __tablename__ = "questions"

    pk: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    quiz_id: str = Field(foreign_key="quizzes.id")
    # Unique within its quiz only
    question_id: str
    type: str
    text: str
    options: Optional[List[dict]] = Field(default=None, sa_column=Column(JSONColumnType, nullable=True))
    correct_answer: Optional[str] = None
    hint: Optional[str] = None
    position: int = Field(sa_column=Column(Integer), default=0)

    quiz: Optional[QuizRecord] = Relationship(back_populates="questions")
