import asyncio
import logging
from typing import Dict, Iterable, List, Protocol

from quizplay.core.errors import QuizNotFound, StorageError
from quizplay.schemas import Quiz, QuizAttempt


class QuizStore(Protocol):
    async def get_quiz(self, id_or_code: str) -> Quiz:
        """Return the quiz whose id or join code matches; raise QuizNotFound otherwise."""
        ...


class AttemptStore(Protocol):
    async def append_attempt(self, quiz_id: str, attempt: QuizAttempt) -> None:
        """Persist a completed attempt; raise StorageError on write failure."""
        ...

    async def list_attempts(self, quiz_id: str) -> List[QuizAttempt]:
        """Return recorded attempts, oldest first; never raises."""
        ...


class InMemoryQuizStore:
    """Quiz lookup over a fixed set of quizzes."""

    def __init__(self, quizzes: Iterable[Quiz] = ()):
        self.quizzes: Dict[str, Quiz] = {}
        for quiz in quizzes:
            self.add_quiz(quiz)

    def add_quiz(self, quiz: Quiz) -> None:
        self.quizzes[quiz.id] = quiz

    async def get_quiz(self, id_or_code: str) -> Quiz:
        quiz = self.quizzes.get(id_or_code)
        if quiz is None:
            quiz = next((q for q in self.quizzes.values() if q.matches(id_or_code)), None)
        if quiz is None:
            raise QuizNotFound(id_or_code)
        return quiz


class InMemoryAttemptStore:
    """Attempts kept per quiz id in insertion order."""

    def __init__(self):
        self.logger = logging.getLogger("session")
        self.attempts: Dict[str, List[QuizAttempt]] = {}
        self.lock = asyncio.Lock()
        # Number of upcoming writes to reject, for exercising error handling
        self.fail_writes: int = 0

    async def append_attempt(self, quiz_id: str, attempt: QuizAttempt) -> None:
        async with self.lock:
            if self.fail_writes > 0:
                self.fail_writes -= 1
                raise StorageError(f"Could not store attempt for quiz {quiz_id}")
            self.attempts.setdefault(quiz_id, []).append(attempt)
        self.logger.info(
            "Attempt stored quiz=%s participant=%s score=%s",
            quiz_id,
            attempt.participant_name,
            attempt.score,
        )

    async def list_attempts(self, quiz_id: str) -> List[QuizAttempt]:
        return list(self.attempts.get(quiz_id, []))
