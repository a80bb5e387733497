"""Answer checking for generated questions.

MCQ answers must match the correct option exactly after trimming and
lower-casing. Free-text answers (VSA/LSA) are graded with a keyword
heuristic: at least 30% of the correct answer's significant words must
appear inside the submitted answer's tokens.
"""
import math
from typing import List, Protocol

from ..schemas import GeneratedQuestion, normalize

MIN_SIGNIFICANT_LEN = 3
KEYWORD_THRESHOLD = 0.3


class AnswerChecker(Protocol):
    def check(self, question: GeneratedQuestion, answer: str) -> bool: ...


def significant_words(text: str) -> List[str]:
    return [w for w in (text or "").lower().split() if len(w) > MIN_SIGNIFICANT_LEN]


class KeywordAnswerChecker:
    def __init__(self, threshold: float = KEYWORD_THRESHOLD):
        self.threshold = threshold

    def check(self, question: GeneratedQuestion, answer: str) -> bool:
        answer = answer or ""
        if question.question_type == "mcq":
            return normalize(answer) == normalize(question.correct_answer)

        keywords = significant_words(question.correct_answer)
        tokens = answer.lower().split()
        matched = sum(1 for w in keywords if any(w in t for t in tokens))
        # A correct answer with no significant words gives a threshold of 0,
        # so every answer (empty included) passes.
        return matched >= math.ceil(len(keywords) * self.threshold)


default_checker = KeywordAnswerChecker()


def check(question: GeneratedQuestion, answer: str) -> bool:
    return default_checker.check(question, answer)
