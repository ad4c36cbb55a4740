# =============================================================================
# CONFTEST - Shared fixtures
# =============================================================================
# Quizzes, a manually driven scheduler and in-memory stores, so sessions can
# be played without waiting on a wall clock.
# =============================================================================

from datetime import datetime, timezone

import pytest

from quizplay.schemas import AnswerOption, Question, Quiz
from quizplay.services.session_engine import SessionEngine
from quizplay.services.stores import InMemoryAttemptStore, InMemoryQuizStore


class ManualScheduler:
    """Scheduler whose callbacks fire only when the test moves time forward."""

    def __init__(self):
        self.now = 0.0
        self.entries: list[dict] = []

    def schedule(self, delay, callback):
        entry = {"due": self.now + delay, "callback": callback, "cancelled": False, "fired": False}
        self.entries.append(entry)

        def cancel():
            entry["cancelled"] = True

        return cancel

    @property
    def active(self) -> list[dict]:
        return [e for e in self.entries if not e["cancelled"] and not e["fired"]]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [e for e in self.active if e["due"] <= target]
            if not due:
                break
            entry = min(due, key=lambda e: e["due"])
            entry["fired"] = True
            self.now = entry["due"]
            entry["callback"]()
        self.now = target


# =============================================================================
# QUIZ FIXTURES
# =============================================================================


@pytest.fixture
def mc_question() -> Question:
    return Question(
        id="capital",
        type="multiple-choice",
        text="What is the capital of France?",
        options=[
            AnswerOption(id="paris", text="Paris", is_correct=True),
            AnswerOption(id="rome", text="Rome", is_correct=False),
        ],
        hint="It has a famous iron tower.",
    )


@pytest.fixture
def multi_mc_question() -> Question:
    return Question(
        id="primes",
        type="multiple-choice",
        text="Which numbers are prime?",
        options=[
            AnswerOption(id="two", text="2", is_correct=True),
            AnswerOption(id="three", text="3", is_correct=True),
            AnswerOption(id="four", text="4", is_correct=False),
        ],
    )


@pytest.fixture
def tf_question() -> Question:
    return Question(id="earth", type="true-false", text="The Earth orbits the Sun.", correct_answer="true")


@pytest.fixture
def sa_question() -> Question:
    return Question(id="boot", type="short-answer", text="Which country is shaped like a boot?", correct_answer="Italy")


@pytest.fixture
def alice_quiz(mc_question, tf_question) -> Quiz:
    """Two questions: multiple-choice (one correct of two) then true-false."""
    return Quiz(id="quiz-1", title="Geography", code="GEO101", questions=[mc_question, tf_question])


@pytest.fixture
def mixed_quiz(mc_question, multi_mc_question, tf_question, sa_question) -> Quiz:
    return Quiz(
        id="quiz-2",
        title="Mixed",
        description="One of each type",
        code="MIX202",
        questions=[mc_question, multi_mc_question, tf_question, sa_question],
    )


# =============================================================================
# ENGINE FIXTURES
# =============================================================================


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def attempt_store() -> InMemoryAttemptStore:
    return InMemoryAttemptStore()


@pytest.fixture
def quiz_store(alice_quiz, mixed_quiz) -> InMemoryQuizStore:
    return InMemoryQuizStore([alice_quiz, mixed_quiz])


@pytest.fixture
def frozen_now() -> datetime:
    return datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_engine(scheduler, attempt_store, frozen_now):
    """Build an engine on the manual scheduler with a fixed clock."""

    def _make(quiz, participant_name="Alice", **kwargs):
        kwargs.setdefault("time_limit", 30)
        kwargs.setdefault("tick_interval", 1.0)
        return SessionEngine(
            quiz,
            participant_name,
            attempt_store,
            scheduler=scheduler,
            clock=lambda: frozen_now,
            **kwargs,
        )

    return _make
