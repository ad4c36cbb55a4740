from typing import List, Optional

from pydantic import Field

from quizplay.schemas.attempt import Answer, Feedback
from quizplay.schemas.quiz import QuestionType, QuizModel


class OptionView(QuizModel):
    id: str
    text: str


class QuestionView(QuizModel):
    """A question as shown to the participant; correctness flags stay hidden."""

    id: str
    type: QuestionType
    text: str
    options: List[OptionView] = Field(default_factory=list)
    has_hint: bool = False


class SessionSnapshot(QuizModel):
    quiz_id: str
    title: str
    participant_name: str
    phase: str
    current_index: int
    question_count: int
    question: Optional[QuestionView] = None
    answer: Optional[Answer] = None
    time_remaining: int
    hint: Optional[str] = None
    feedback: Optional[Feedback] = None
    correct_answer: Optional[str] = None
    score: int
