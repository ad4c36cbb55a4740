from quizplay.schemas.attempt import Answer, AnswerEntry, Feedback, LeaderboardEntry, QuizAttempt
from quizplay.schemas.quiz import (
    MULTIPLE_CHOICE,
    SHORT_ANSWER,
    TRUE_FALSE,
    AnswerOption,
    Question,
    QuestionType,
    Quiz,
)
from quizplay.schemas.session import OptionView, QuestionView, SessionSnapshot

__all__ = [
    "Answer",
    "AnswerEntry",
    "AnswerOption",
    "Feedback",
    "LeaderboardEntry",
    "MULTIPLE_CHOICE",
    "OptionView",
    "Question",
    "QuestionType",
    "QuestionView",
    "Quiz",
    "QuizAttempt",
    "SHORT_ANSWER",
    "SessionSnapshot",
    "TRUE_FALSE",
]
