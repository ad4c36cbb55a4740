"""Errors raised by the play engine and its collaborators."""


class QuizPlayError(Exception):
    """Base class for every quizplay error."""


class NoAnswerSelected(QuizPlayError):
    """Submit was attempted with nothing captured for the current question."""


class InvalidTransition(QuizPlayError):
    """An engine operation was called outside the phase it is valid in."""


class InvalidAnswer(QuizPlayError):
    """A captured value does not fit the current question (e.g. unknown option id)."""


class DataIntegrityError(QuizPlayError):
    """A quiz's questions do not match their declared types."""

    def __init__(self, quiz_id: str, problems: list[str]):
        self.quiz_id = quiz_id
        self.problems = list(problems)
        super().__init__(f"Quiz {quiz_id!r} is malformed: {'; '.join(self.problems)}")


class QuizNotFound(QuizPlayError):
    def __init__(self, id_or_code: str):
        self.id_or_code = id_or_code
        super().__init__(f'Quiz with ID or code "{id_or_code}" not found')


class StorageError(QuizPlayError):
    """Attempt store write failed."""


class HintGenerationError(QuizPlayError):
    """Hint service failed; no partial results are returned."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
