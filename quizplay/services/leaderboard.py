from typing import Iterable, List

from quizplay.schemas import LeaderboardEntry, QuizAttempt


def rank_attempts(attempts: Iterable[QuizAttempt], total_questions: int) -> List[LeaderboardEntry]:
    """Order attempts by score (highest first), earlier submissions breaking ties."""
    ordered = sorted(attempts, key=lambda a: (-a.score, a.submitted_at))
    return [
        LeaderboardEntry(
            rank=idx + 1,
            participant_name=attempt.participant_name,
            score=attempt.score,
            total_questions=total_questions,
            percentage=round(attempt.score / total_questions * 100) if total_questions > 0 else 0,
            submitted_at=attempt.submitted_at,
        )
        for idx, attempt in enumerate(ordered)
    ]
