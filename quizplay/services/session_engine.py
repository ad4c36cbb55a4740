import logging
from typing import Callable, Dict, Optional, Set, Union

from quizplay.core.config import settings
from quizplay.core.errors import InvalidAnswer, InvalidTransition, NoAnswerSelected
from quizplay.core.time import utc_now
from quizplay.schemas import (
    MULTIPLE_CHOICE,
    Answer,
    AnswerEntry,
    Feedback,
    OptionView,
    Question,
    QuestionView,
    Quiz,
    QuizAttempt,
    SessionSnapshot,
)
from quizplay.services.grader import TIMEOUT_FEEDBACK, check_quiz, correct_answer_text, grade, is_blank
from quizplay.services.stores import AttemptStore
from quizplay.services.timer import AsyncioScheduler, Cancel, Scheduler

Captured = Union[str, Set[str]]


class SessionPhase(str):
    AWAITING_ANSWER = "awaiting_answer"
    GRADED = "graded"
    FINISHED = "finished"
    ABANDONED = "abandoned"


class SessionEngine:
    """Drives one participant through one quiz.

    Every question moves ``awaiting_answer -> graded`` exactly once, through
    either ``submit_answer()`` or ``force_grade()``, and ``advance()`` moves to
    the next question or, after the last one, to ``finished`` where the
    attempt is handed to the attempt store. The countdown only ever runs
    while awaiting an answer; the engine never advances on its own, so on
    timeout it force-grades and leaves the next step to ``on_timeout``.

    The countdown is armed during construction. With the default
    ``AsyncioScheduler`` the engine must therefore be built inside a running
    event loop; otherwise pass a scheduler bound to a loop.
    """

    def __init__(
        self,
        quiz: Quiz,
        participant_name: str,
        attempt_store: AttemptStore,
        *,
        scheduler: Optional[Scheduler] = None,
        time_limit: Optional[int] = None,
        tick_interval: Optional[float] = None,
        on_tick: Optional[Callable[["SessionEngine"], None]] = None,
        on_timeout: Optional[Callable[["SessionEngine"], None]] = None,
        clock: Callable = utc_now,
    ):
        check_quiz(quiz)
        name = (participant_name or "").strip()
        if not name:
            raise ValueError("participant_name must not be empty")
        limit = settings.question_time_limit if time_limit is None else time_limit
        if limit < 1:
            raise ValueError("time_limit must be at least one second")

        self.logger = logging.getLogger("session")
        self.quiz = quiz.model_copy(deep=True)
        self.participant_name = name
        self.attempt_store = attempt_store
        self.scheduler = scheduler or AsyncioScheduler()
        self.time_limit = limit
        self.tick_interval = tick_interval or settings.tick_interval_seconds
        self.on_tick = on_tick
        self.on_timeout = on_timeout
        self.clock = clock

        self.phase: str = SessionPhase.AWAITING_ANSWER
        self.current_index: int = 0
        self.time_remaining: int = limit
        self.hint_visible: bool = False
        self.score: int = 0
        self.attempt: Optional[QuizAttempt] = None
        self._answers: Dict[str, Captured] = {}
        self._feedback: Dict[str, Feedback] = {}
        # One live tick at a time; the generation invalidates stale callbacks
        self._cancel_tick: Optional[Cancel] = None
        self._timer_generation: int = 0

        self.logger.info(
            "Session started quiz=%s participant=%s questions=%s time_limit=%s",
            self.quiz.id,
            self.participant_name,
            self.question_count,
            self.time_limit,
        )
        self._start_countdown()

    @property
    def question_count(self) -> int:
        return len(self.quiz.questions)

    @property
    def current_question(self) -> Question:
        return self.quiz.questions[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return self.current_index == self.question_count - 1

    @property
    def countdown_running(self) -> bool:
        return self._cancel_tick is not None

    @property
    def answers(self) -> Dict[str, Answer]:
        return {qid: self._export(self._question(qid), value) for qid, value in self._answers.items()}

    @property
    def feedback(self) -> Dict[str, Feedback]:
        return dict(self._feedback)

    @property
    def visible_hint(self) -> Optional[str]:
        if not self.hint_visible or self.phase not in (SessionPhase.AWAITING_ANSWER, SessionPhase.GRADED):
            return None
        return self.current_question.hint

    def record_answer(self, question_id: str, value: str) -> None:
        question = self._require_awaiting("record_answer")
        if question_id != question.id:
            raise InvalidTransition(f"Question {question_id!r} is not the active question {question.id!r}")
        if not isinstance(value, str):
            raise InvalidAnswer(f"Answer for question {question.id!r} must be a string")

        if question.type == MULTIPLE_CHOICE:
            if question.option(value) is None:
                raise InvalidAnswer(f"Question {question.id!r} has no option {value!r}")
            selection = self._answers.setdefault(question.id, set())
            selection ^= {value}
        else:
            self._answers[question.id] = value
        # Interacting with the question cancels the countdown
        self._stop_countdown()

    def submit_answer(self) -> Feedback:
        question = self._require_awaiting("submit_answer")
        captured = self._answers.get(question.id)
        if is_blank(captured):
            raise NoAnswerSelected(f"No answer selected for question {question.id!r}")
        return self._record_feedback(question, grade(question, captured))

    def force_grade(self) -> Feedback:
        question = self._require_awaiting("force_grade")
        captured = self._answers.get(question.id)
        if is_blank(captured):
            return self._record_feedback(question, TIMEOUT_FEEDBACK)
        return self._record_feedback(question, grade(question, captured))

    async def advance(self) -> Optional[QuizAttempt]:
        if self.phase == SessionPhase.FINISHED:
            return None
        if self.phase != SessionPhase.GRADED:
            raise InvalidTransition(f"advance is not allowed while {self.phase}")

        if not self.is_last_question:
            self.current_index += 1
            self.hint_visible = False
            self.phase = SessionPhase.AWAITING_ANSWER
            self._start_countdown()
            return None

        self.phase = SessionPhase.FINISHED
        self.attempt = self._build_attempt()
        self.logger.info(
            "Session finished quiz=%s participant=%s score=%s/%s",
            self.quiz.id,
            self.participant_name,
            self.score,
            self.question_count,
        )
        await self.attempt_store.append_attempt(self.quiz.id, self.attempt)
        return self.attempt

    def toggle_hint(self) -> bool:
        if self.phase not in (SessionPhase.AWAITING_ANSWER, SessionPhase.GRADED):
            raise InvalidTransition(f"toggle_hint is not allowed while {self.phase}")
        self.hint_visible = not self.hint_visible
        return self.hint_visible

    def abandon(self) -> None:
        """Tear down an unfinished session; nothing is recorded."""
        if self.phase in (SessionPhase.FINISHED, SessionPhase.ABANDONED):
            return
        self._stop_countdown()
        self.phase = SessionPhase.ABANDONED
        self.logger.info(
            "Session abandoned quiz=%s participant=%s index=%s",
            self.quiz.id,
            self.participant_name,
            self.current_index,
        )

    def snapshot(self) -> SessionSnapshot:
        in_play = self.phase in (SessionPhase.AWAITING_ANSWER, SessionPhase.GRADED)
        question = self.current_question if in_play else None
        question_view = None
        answer = None
        feedback = None
        correct_answer = None
        if question:
            question_view = QuestionView(
                id=question.id,
                type=question.type,
                text=question.text,
                options=[OptionView(id=o.id, text=o.text) for o in question.options or []],
                has_hint=bool(question.hint),
            )
            if question.id in self._answers:
                answer = self._export(question, self._answers[question.id])
            feedback = self._feedback.get(question.id)
            if feedback is not None:
                correct_answer = correct_answer_text(question)
        return SessionSnapshot(
            quiz_id=self.quiz.id,
            title=self.quiz.title,
            participant_name=self.participant_name,
            phase=self.phase,
            current_index=self.current_index,
            question_count=self.question_count,
            question=question_view,
            answer=answer,
            time_remaining=self.time_remaining,
            hint=self.visible_hint,
            feedback=feedback,
            correct_answer=correct_answer,
            score=self.score,
        )

    def _require_awaiting(self, operation: str) -> Question:
        if self.phase != SessionPhase.AWAITING_ANSWER:
            raise InvalidTransition(f"{operation} is not allowed while {self.phase}")
        return self.current_question

    def _record_feedback(self, question: Question, feedback: Feedback) -> Feedback:
        self._stop_countdown()
        self._feedback[question.id] = feedback
        if feedback.correct:
            self.score += 1
        self.phase = SessionPhase.GRADED
        self.logger.info(
            "Question graded quiz=%s participant=%s question=%s type=%s correct=%s score=%s",
            self.quiz.id,
            self.participant_name,
            question.id,
            question.type,
            feedback.correct,
            self.score,
        )
        return feedback

    def _build_attempt(self) -> QuizAttempt:
        entries = []
        for question in self.quiz.questions:
            captured = self._answers.get(question.id)
            entries.append(
                AnswerEntry(
                    question_id=question.id,
                    answer=None if is_blank(captured) else self._export(question, captured),
                )
            )
        return QuizAttempt(
            quiz_id=self.quiz.id,
            participant_name=self.participant_name,
            answers=entries,
            score=self.score,
            submitted_at=self.clock(),
        )

    def _question(self, question_id: str) -> Question:
        return next(q for q in self.quiz.questions if q.id == question_id)

    @staticmethod
    def _export(question: Question, captured: Captured) -> Answer:
        if isinstance(captured, str):
            return captured
        # Selections follow the question's option order
        return [o.id for o in question.options or [] if o.id in captured]

    def _start_countdown(self) -> None:
        self._stop_countdown()
        self.time_remaining = self.time_limit
        self._schedule_tick(self.current_index, self._timer_generation)

    def _stop_countdown(self) -> None:
        self._timer_generation += 1
        if self._cancel_tick:
            self._cancel_tick()
            self._cancel_tick = None

    def _schedule_tick(self, index: int, generation: int) -> None:
        self._cancel_tick = self.scheduler.schedule(
            self.tick_interval, lambda: self._tick(index, generation)
        )

    def _is_current_timer(self, index: int, generation: int) -> bool:
        return (
            generation == self._timer_generation
            and index == self.current_index
            and self.phase == SessionPhase.AWAITING_ANSWER
        )

    def _tick(self, index: int, generation: int) -> None:
        if not self._is_current_timer(index, generation):
            return
        self._cancel_tick = None
        self.time_remaining = max(0, self.time_remaining - 1)
        if self.on_tick:
            self.on_tick(self)
        if not self._is_current_timer(index, generation):
            return
        if self.time_remaining > 0:
            self._schedule_tick(index, generation)
            return

        self.logger.info(
            "Time up quiz=%s participant=%s question=%s",
            self.quiz.id,
            self.participant_name,
            self.current_question.id,
        )
        self.force_grade()
        if self.on_timeout:
            self.on_timeout(self)
