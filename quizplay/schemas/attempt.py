from datetime import datetime
from typing import List, Optional, Tuple, Union

from pydantic import Field

from quizplay.schemas.quiz import QuizModel

Answer = Union[str, List[str]]


class Feedback(QuizModel):
    correct: bool
    message: str


class AnswerEntry(QuizModel):
    question_id: str
    # None marks a question that was reached but never answered
    answer: Optional[Answer] = None


class QuizAttempt(QuizModel):
    quiz_id: str
    participant_name: str
    answers: Tuple[AnswerEntry, ...] = ()
    score: int = Field(ge=0)
    submitted_at: datetime

    def to_record(self) -> dict:
        """Serialize to the camelCase shape shared with attempt consumers."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_record(cls, record: dict) -> "QuizAttempt":
        return cls.model_validate(record)


class LeaderboardEntry(QuizModel):
    rank: int
    participant_name: str
    score: int
    total_questions: int
    percentage: int
    submitted_at: datetime
