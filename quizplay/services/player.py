import asyncio
import logging
from typing import List, Optional

from quizplay.core.config import Settings, settings
from quizplay.core.errors import HintGenerationError, InvalidTransition, StorageError
from quizplay.schemas import Feedback, LeaderboardEntry, QuizAttempt, SessionSnapshot
from quizplay.services.hint_service import HintService
from quizplay.services.leaderboard import rank_attempts
from quizplay.services.session_engine import SessionEngine, SessionPhase
from quizplay.services.stores import AttemptStore, QuizStore
from quizplay.services.timer import Scheduler


class PlayController:
    """Sequences a participant's session the way the player screen does.

    Owns at most one engine. A manual "next" submits (if needed) and then
    advances; a countdown expiry is force-graded by the engine and advanced
    here after ``gap_seconds`` so the timeout feedback can be shown.
    """

    def __init__(
        self,
        quiz_store: QuizStore,
        attempt_store: AttemptStore,
        hint_service: Optional[HintService] = None,
        scheduler: Optional[Scheduler] = None,
        config: Optional[Settings] = None,
    ):
        self.logger = logging.getLogger("session")
        self.quiz_store = quiz_store
        self.attempt_store = attempt_store
        self.hint_service = hint_service
        self.scheduler = scheduler
        self.config = config or settings
        self.engine: Optional[SessionEngine] = None
        self.advance_task: Optional[asyncio.Task] = None
        # Finished attempt whose write failed every retry
        self.pending_attempt: Optional[QuizAttempt] = None
        self.lock = asyncio.Lock()

    async def start(self, id_or_code: str, participant_name: str) -> SessionEngine:
        quiz = await self.quiz_store.get_quiz(id_or_code)
        if self.pending_attempt is not None:
            # The previous attempt must be stored before a new session replaces it
            await self.next()
        self.abandon()
        self.engine = SessionEngine(
            quiz,
            participant_name,
            self.attempt_store,
            scheduler=self.scheduler,
            time_limit=self.config.question_time_limit,
            tick_interval=self.config.tick_interval_seconds,
            on_timeout=self._handle_timeout,
        )
        return self.engine

    def record_answer(self, question_id: str, value: str) -> None:
        self._require_engine().record_answer(question_id, value)

    def submit_answer(self) -> Feedback:
        return self._require_engine().submit_answer()

    def toggle_hint(self) -> bool:
        return self._require_engine().toggle_hint()

    def snapshot(self) -> SessionSnapshot:
        return self._require_engine().snapshot()

    async def next(self) -> Optional[QuizAttempt]:
        """Submit the current answer if it is still open, then move on.

        Once the session is finished, an attempt whose write failed is written
        again; ``StorageError`` is raised if that still fails.
        """
        async with self.lock:
            engine = self._require_engine()
            if engine.phase == SessionPhase.FINISHED and self.pending_attempt is not None:
                return await self._store_pending(engine, self.config.attempt_write_retries + 1)
            if engine.phase == SessionPhase.AWAITING_ANSWER:
                engine.submit_answer()
            return await self._advance(engine)

    def abandon(self) -> None:
        if self.advance_task and not self.advance_task.done():
            self.advance_task.cancel()
        self.advance_task = None
        if self.pending_attempt is not None:
            self.logger.error(
                "Discarding unstored attempt quiz=%s participant=%s score=%s",
                self.pending_attempt.quiz_id,
                self.pending_attempt.participant_name,
                self.pending_attempt.score,
            )
            self.pending_attempt = None
        if self.engine:
            self.engine.abandon()
        self.engine = None

    async def leaderboard(self, id_or_code: str) -> List[LeaderboardEntry]:
        quiz = await self.quiz_store.get_quiz(id_or_code)
        attempts = await self.attempt_store.list_attempts(quiz.id)
        return rank_attempts(attempts, len(quiz.questions))

    async def generate_hints(self, id_or_code: str) -> List[str]:
        if self.hint_service is None:
            raise HintGenerationError("No hint service configured")
        quiz = await self.quiz_store.get_quiz(id_or_code)
        return await self.hint_service.generate_hints([q.text for q in quiz.questions])

    def _require_engine(self) -> SessionEngine:
        if self.engine is None:
            raise InvalidTransition("No session has been started")
        return self.engine

    def _handle_timeout(self, engine: SessionEngine) -> None:
        if engine is not self.engine:
            return
        index = engine.current_index
        self.advance_task = asyncio.get_running_loop().create_task(self._advance_after_gap(engine, index))

    async def _advance_after_gap(self, engine: SessionEngine, index: int) -> Optional[QuizAttempt]:
        if self.config.gap_seconds > 0:
            await asyncio.sleep(self.config.gap_seconds)
        async with self.lock:
            # A manual next during the gap already moved on
            if engine is not self.engine or engine.phase != SessionPhase.GRADED or engine.current_index != index:
                return None
            try:
                return await self._advance(engine)
            except StorageError:
                # Left on pending_attempt; the next call to next() writes it again
                return None

    async def _advance(self, engine: SessionEngine) -> Optional[QuizAttempt]:
        try:
            return await engine.advance()
        except StorageError as exc:
            self.pending_attempt = engine.attempt
            last_error = exc
        return await self._store_pending(engine, self.config.attempt_write_retries, last_error)

    async def _store_pending(
        self, engine: SessionEngine, tries: int, last_error: Optional[StorageError] = None
    ) -> QuizAttempt:
        attempt = self.pending_attempt
        for n in range(1, tries + 1):
            if last_error is not None:
                self.logger.warning(
                    "Retrying attempt write quiz=%s participant=%s try=%s/%s after: %s",
                    engine.quiz.id,
                    engine.participant_name,
                    n,
                    tries,
                    last_error,
                )
            try:
                await self.attempt_store.append_attempt(engine.quiz.id, attempt)
            except StorageError as exc:
                last_error = exc
                continue
            self.pending_attempt = None
            return attempt
        self.logger.error(
            "Attempt not stored quiz=%s participant=%s score=%s",
            engine.quiz.id,
            engine.participant_name,
            attempt.score,
        )
        raise last_error
