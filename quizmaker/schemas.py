from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

QuestionType = Literal["mcq", "vsa", "lsa"]
QUESTION_TYPES = ("mcq", "vsa", "lsa")


def normalize(s: str) -> str:
    return (s or "").strip().lower()


class GeneratedQuestion(BaseModel):
    question_type: QuestionType
    question: str
    options: Optional[List[str]] = None
    correct_answer: str

    @field_validator("question_type", mode="before")
    @classmethod
    def _lower_type(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @model_validator(mode="before")
    @classmethod
    def _empty_options_to_none(cls, data):
        # Free-text questions often come back with "options": [].
        if isinstance(data, dict) and data.get("options") == []:
            qtype = data.get("question_type")
            if isinstance(qtype, str) and qtype.strip().lower() != "mcq":
                data = {**data, "options": None}
        return data

    @model_validator(mode="after")
    def _check_options(self):
        if self.question_type == "mcq":
            if not self.options:
                raise ValueError("mcq questions need a non-empty options list")
            if normalize(self.correct_answer) not in {normalize(o) for o in self.options}:
                raise ValueError("mcq correct_answer must match one of the options")
        elif self.options is not None:
            raise ValueError(f"{self.question_type} questions must not carry options")
        return self


class QuizQuestion(GeneratedQuestion):
    question_number: int = Field(ge=1)
    user_answer: str = ""
    is_correct: Optional[bool] = None


class TestResult(BaseModel):
    __test__ = False  # not a pytest class
    model_config = ConfigDict(frozen=True)

    topic: str
    total_questions: int
    correct_answers: int
    score: int
    question_types: List[str]
    created_at: Optional[datetime] = None

    @property
    def incorrect_answers(self) -> int:
        return self.total_questions - self.correct_answers


class ReviewRecord(BaseModel):
    question_number: int
    question_type: QuestionType
    question: str
    options: Optional[List[str]] = None
    correct_answer: str
    user_answer: str
    is_correct: bool


class AnalyticsSummary(BaseModel):
    tests_taken: int
    average_score: int
    total_questions: int
    total_correct: int
    total_incorrect: int
    best_score: Optional[int] = None
    recent: List[Dict[str, Any]] = Field(default_factory=list)


# ---------- wire bodies ----------
# Loose field types on purpose: shape checks happen in the request builder so
# bad input comes back as a 400 with a readable message.

class GenerateFromTextBody(BaseModel):
    text: Any = None
    questionCount: Any = None
    questionTypes: Any = ["mcq"]


class GenerateFromTopicBody(BaseModel):
    topic: Any = None
    questionCount: Any = None
    questionTypes: Any = ["mcq"]


class QuestionsResponse(BaseModel):
    questions: List[GeneratedQuestion]


class SubmitQuizBody(BaseModel):
    topic: str = "Untitled"
    questions: List[GeneratedQuestion]
    answers: Dict[int, str] = Field(default_factory=dict)


class SubmitQuizResponse(BaseModel):
    result: TestResult
    message: str
    review: List[ReviewRecord]
    saved: bool
    result_id: Optional[str] = None
    save_error: Optional[str] = None
