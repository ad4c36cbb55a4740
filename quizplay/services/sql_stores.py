import logging
from datetime import timezone
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.orm import selectinload

from quizplay.core.errors import DataIntegrityError, QuizNotFound, StorageError
from quizplay.db import get_session
from quizplay.models import AttemptRecord, QuestionRecord, QuizRecord
from quizplay.schemas import Quiz, QuizAttempt


def serialize_quiz(record: QuizRecord) -> Quiz:
    ordered_questions = sorted(record.questions, key=lambda q: q.position or 0)
    try:
        return Quiz.model_validate(
            {
                "id": record.id,
                "title": record.title,
                "description": record.description,
                "code": record.code,
                "questions": [
                    {
                        "id": q.question_id,
                        "type": q.type,
                        "text": q.text,
                        "options": q.options,
                        "correct_answer": q.correct_answer,
                        "hint": q.hint,
                    }
                    for q in ordered_questions
                ],
            }
        )
    except ValidationError as exc:
        raise DataIntegrityError(record.id, [err["msg"] for err in exc.errors()]) from exc


def serialize_attempt(record: AttemptRecord) -> QuizAttempt:
    submitted_at = record.submitted_at
    # SQLite drops the offset; stored values are always UTC
    if submitted_at.tzinfo is None:
        submitted_at = submitted_at.replace(tzinfo=timezone.utc)
    return QuizAttempt.model_validate(
        {
            "quiz_id": record.quiz_id,
            "participant_name": record.participant_name,
            "answers": record.answers or [],
            "score": record.score,
            "submitted_at": submitted_at,
        }
    )


class SqlQuizStore:
    def __init__(self, engine: Optional[AsyncEngine] = None):
        self.engine = engine

    async def add_quiz(self, quiz: Quiz) -> None:
        record = QuizRecord(id=quiz.id, title=quiz.title, description=quiz.description, code=quiz.code)
        for idx, q in enumerate(quiz.questions):
            record.questions.append(
                QuestionRecord(
                    question_id=q.id,
                    type=q.type,
                    text=q.text,
                    options=[o.model_dump() for o in q.options] if q.options is not None else None,
                    correct_answer=q.correct_answer,
                    hint=q.hint,
                    position=idx,
                )
            )
        async with get_session(self.engine) as db:
            db.add(record)
            await db.commit()

    async def get_quiz(self, id_or_code: str) -> Quiz:
        async with get_session(self.engine) as db:
            result = await db.execute(
                select(QuizRecord)
                .options(selectinload(QuizRecord.questions))
                .where(or_(QuizRecord.id == id_or_code, QuizRecord.code == id_or_code))
            )
            records = result.scalars().unique().all()
        if not records:
            raise QuizNotFound(id_or_code)
        # An id match wins over a code match
        record = next((r for r in records if r.id == id_or_code), records[0])
        return serialize_quiz(record)


class SqlAttemptStore:
    def __init__(self, engine: Optional[AsyncEngine] = None):
        self.engine = engine
        self.logger = logging.getLogger("session")

    async def append_attempt(self, quiz_id: str, attempt: QuizAttempt) -> None:
        record = AttemptRecord(
            quiz_id=quiz_id,
            participant_name=attempt.participant_name,
            answers=[entry.model_dump(mode="json", by_alias=True) for entry in attempt.answers],
            score=attempt.score,
            submitted_at=attempt.submitted_at,
        )
        try:
            async with get_session(self.engine) as db:
                db.add(record)
                await db.commit()
        except SQLAlchemyError as exc:
            self.logger.error("Attempt write failed quiz=%s participant=%s: %s", quiz_id, attempt.participant_name, exc)
            raise StorageError(f"Could not store attempt for quiz {quiz_id}") from exc
        self.logger.info(
            "Attempt stored quiz=%s participant=%s score=%s",
            quiz_id,
            attempt.participant_name,
            attempt.score,
        )

    async def list_attempts(self, quiz_id: str) -> List[QuizAttempt]:
        try:
            async with get_session(self.engine) as db:
                result = await db.execute(
                    select(AttemptRecord)
                    .where(AttemptRecord.quiz_id == quiz_id)
                    .order_by(AttemptRecord.submitted_at)
                )
                records = result.scalars().all()
        except SQLAlchemyError as exc:
            self.logger.error("Attempt listing failed quiz=%s: %s", quiz_id, exc)
            return []
        return [serialize_attempt(r) for r in records]
