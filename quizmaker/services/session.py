"""Quiz session state machine.

A session moves setup -> in_progress -> completed. Answers may be recorded
for any question while in progress; the final ``advance()`` grades every
question, not just the current one, and hands back the annotated list once.
``retake()`` never touches a completed session, it returns a new one.
"""
from enum import Enum
from typing import List, Optional, Sequence

from ..errors import InvalidInput, SessionStateError
from ..schemas import GeneratedQuestion, QuizQuestion
from .checker import AnswerChecker, default_checker

_BASE_FIELDS = set(GeneratedQuestion.model_fields)


class Phase(str, Enum):
    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class QuizSession:
    def __init__(self, checker: Optional[AnswerChecker] = None):
        self.checker = checker or default_checker
        self.phase = Phase.SETUP
        self.questions: List[QuizQuestion] = []
        self.answers: dict[int, str] = {}
        self.current_index = 0

    def _require(self, phase: Phase, action: str) -> None:
        if self.phase != phase:
            raise SessionStateError(f"Cannot {action} while the quiz is {self.phase.value}.")

    def start(self, questions: Sequence[GeneratedQuestion]) -> List[QuizQuestion]:
        self._require(Phase.SETUP, "start")
        if not questions:
            raise InvalidInput("A quiz needs at least one question.")
        self.questions = [
            QuizQuestion(**q.model_dump(include=_BASE_FIELDS), question_number=i)
            for i, q in enumerate(questions, start=1)
        ]
        self.current_index = 0
        self.phase = Phase.IN_PROGRESS
        return list(self.questions)

    @property
    def current_question(self) -> QuizQuestion:
        self._require(Phase.IN_PROGRESS, "read the current question")
        return self.questions[self.current_index]

    @property
    def is_last(self) -> bool:
        return bool(self.questions) and self.current_index == len(self.questions) - 1

    @property
    def current_answer(self) -> str:
        return self.answers.get(self.current_index, "")

    @property
    def can_advance(self) -> bool:
        """Whether a "next" control should be enabled for the current question."""
        return self.phase == Phase.IN_PROGRESS and bool(self.current_answer)

    def record_answer(self, index: int, value: str) -> None:
        self._require(Phase.IN_PROGRESS, "record an answer")
        if not 0 <= index < len(self.questions):
            raise InvalidInput(f"No question at index {index}.")
        self.answers[index] = value

    def advance(self) -> Optional[List[QuizQuestion]]:
        self._require(Phase.IN_PROGRESS, "advance")
        if not self.is_last:
            self.current_index += 1
            return None

        completed = []
        for i, q in enumerate(self.questions):
            answer = self.answers.get(i) or ""
            completed.append(q.model_copy(update={
                "user_answer": answer,
                "is_correct": self.checker.check(q, answer),
            }))
        self.questions = completed
        self.phase = Phase.COMPLETED
        return list(completed)

    def retreat(self) -> None:
        self._require(Phase.IN_PROGRESS, "go back")
        self.current_index = max(0, self.current_index - 1)

    def retake(self) -> "QuizSession":
        return QuizSession(checker=self.checker)


def play_through(questions: Sequence[GeneratedQuestion], answers: dict[int, str],
                 checker: Optional[AnswerChecker] = None) -> List[QuizQuestion]:
    """Run a whole session non-interactively: record every answer, then step to the end."""
    session = QuizSession(checker=checker)
    session.start(questions)
    for index, value in answers.items():
        session.record_answer(index, value)
    completed = None
    while completed is None:
        completed = session.advance()
    return completed
