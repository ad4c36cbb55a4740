from quizplay.models.attempt import AttemptRecord
from quizplay.models.quiz import QuestionRecord, QuizRecord

__all__ = ["AttemptRecord", "QuestionRecord", "QuizRecord"]
