from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

QuestionType = Literal["multiple-choice", "true-false", "short-answer"]

MULTIPLE_CHOICE = "multiple-choice"
TRUE_FALSE = "true-false"
SHORT_ANSWER = "short-answer"


class QuizModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class AnswerOption(QuizModel):
    id: str
    text: str
    is_correct: bool = False


class Question(QuizModel):
    id: str
    type: QuestionType
    text: str
    options: Optional[List[AnswerOption]] = None
    correct_answer: Optional[str] = None
    hint: Optional[str] = None

    def option(self, option_id: str) -> Optional[AnswerOption]:
        return next((o for o in self.options or [] if o.id == option_id), None)

    def correct_option_ids(self) -> set[str]:
        return {o.id for o in self.options or [] if o.is_correct}


class Quiz(QuizModel):
    id: str
    title: str
    description: Optional[str] = None
    code: str = ""
    questions: List[Question] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _default_code(cls, data):
        # Join code falls back to the id
        if isinstance(data, dict) and not data.get("code") and data.get("id"):
            data = {**data, "code": data["id"]}
        return data

    def matches(self, id_or_code: str) -> bool:
        return id_or_code in (self.id, self.code)
