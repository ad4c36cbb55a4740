"""Correctness rules for the three question types.

Everything here is pure: the same question and answer always produce the
same verdict, and nothing is mutated.
"""
from typing import Iterable, List, Union

from quizplay.core.errors import DataIntegrityError
from quizplay.schemas import MULTIPLE_CHOICE, SHORT_ANSWER, TRUE_FALSE, Feedback, Question, Quiz

CapturedAnswer = Union[str, Iterable[str], None]

CORRECT_MESSAGE = "Correct!"
TIMEOUT_FEEDBACK = Feedback(correct=False, message="Time's up!")
TRUE_FALSE_VALUES = ("true", "false")


def is_blank(answer: CapturedAnswer) -> bool:
    if answer is None:
        return True
    if isinstance(answer, str):
        return answer == ""
    return len(set(answer)) == 0


def is_correct(question: Question, answer: CapturedAnswer) -> bool:
    if is_blank(answer):
        return False
    if question.type == MULTIPLE_CHOICE:
        if isinstance(answer, str):
            return False
        return set(answer) == question.correct_option_ids()
    if not isinstance(answer, str) or question.correct_answer is None:
        return False
    if question.type == TRUE_FALSE:
        return answer == question.correct_answer
    if question.type == SHORT_ANSWER:
        return answer.strip() == question.correct_answer.strip()
    return False


def correct_answer_text(question: Question) -> str:
    if question.type == MULTIPLE_CHOICE:
        return ", ".join(o.text for o in question.options or [] if o.is_correct)
    return question.correct_answer or "N/A"


def grade(question: Question, answer: CapturedAnswer) -> Feedback:
    if is_correct(question, answer):
        return Feedback(correct=True, message=CORRECT_MESSAGE)
    return Feedback(
        correct=False,
        message=f"Incorrect. The correct answer was: {correct_answer_text(question)}",
    )


def question_problems(question: Question) -> List[str]:
    problems: List[str] = []
    label = f"question {question.id!r}"
    if not question.text or not question.text.strip():
        problems.append(f"{label} has no text")
    if question.type == MULTIPLE_CHOICE:
        options = question.options or []
        if not options:
            problems.append(f"{label} is multiple-choice but has no options")
        elif not any(o.is_correct for o in options):
            problems.append(f"{label} has no correct option")
        ids = [o.id for o in options]
        if len(ids) != len(set(ids)):
            problems.append(f"{label} has duplicate option ids")
    elif question.type == TRUE_FALSE:
        if question.correct_answer not in TRUE_FALSE_VALUES:
            problems.append(f"{label} is true-false but correct_answer is {question.correct_answer!r}")
    elif question.type == SHORT_ANSWER:
        if not question.correct_answer or not question.correct_answer.strip():
            problems.append(f"{label} is short-answer but has no correct_answer")
    return problems


def check_quiz(quiz: Quiz) -> None:
    """Raise DataIntegrityError listing every malformed question in the quiz."""
    problems: List[str] = []
    if not quiz.questions:
        problems.append("quiz has no questions")
    seen: set[str] = set()
    for question in quiz.questions:
        if question.id in seen:
            problems.append(f"duplicate question id {question.id!r}")
        seen.add(question.id)
        problems.extend(question_problems(question))
    if problems:
        raise DataIntegrityError(quiz.id, problems)
