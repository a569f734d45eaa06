"""
Module: questions

Purpose:
    Provides the Question and CanonicalExam dataclasses - the canonical exam
    that the generator randomizes and the analyzer audits against.
    Both are immutable; neither component ever mutates the exam.

Key Classes:
    - QuestionType: MULTIPLE_CHOICE or TRUE_FALSE
    - Question: One exam question with its canonical option order
    - CanonicalExam: Ordered questions of one exam

Dependencies:
    - dataclasses (std)
    - enum (std)
    - functools (std)

Used By:
    - core.models.variants
    - core.utils.serialization
    - generator.generator
    - analysis.analyzer
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Any, Dict, Optional


TRUE_FALSE_OPTIONS = ("True", "False")


class QuestionType(Enum):
    """
    Question kinds understood by the randomizer.

    Only MULTIPLE_CHOICE questions carry an option permutation;
    TRUE_FALSE questions keep their options fixed.
    """

    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    TRUE_FALSE = "TRUE_FALSE"


@dataclass(frozen=True)
class Question:
    """
    Single canonical question (immutable).

    Attributes:
        id: Unique identifier within the exam
        type: QuestionType
        correct_answer: Correct option text (MC) or "True"/"False" (TF)
        options: Canonical option order (MC only; TF may omit them)
        text: Question stem, informational only
        points: Score weight, informational only

    Invariants:
        - MC questions have at least one option, no duplicate options,
          and correct_answer matches one option (case-insensitive)
        - TF questions have either no options or exactly two

    Example:
        >>> q = Question("q1", QuestionType.MULTIPLE_CHOICE, "Paris",
        ...              options=("London", "Paris", "Rome"))
        >>> q.correct_index
        1
    """

    id: str
    type: QuestionType
    correct_answer: str
    options: tuple[str, ...] = ()
    text: str = ""
    points: int = 1

    def __post_init__(self) -> None:
        """Validate question on construction."""
        if not self.id:
            raise ValueError("Question id must be non-empty")
        if not isinstance(self.type, QuestionType):
            raise ValueError(f"Invalid question type for {self.id}: {self.type!r}")

        if self.type is QuestionType.MULTIPLE_CHOICE:
            if not self.options:
                raise ValueError(f"Multiple choice question {self.id} must have options")
            if len(set(self.options)) != len(self.options):
                raise ValueError(f"Duplicate options in question {self.id}")
            if self._find_option(self.correct_answer) is None:
                raise ValueError(
                    f"Correct answer {self.correct_answer!r} not found in options "
                    f"for question {self.id}"
                )
        elif self.options and len(self.options) != 2:
            raise ValueError(
                f"True/false question {self.id} must have exactly two options, "
                f"got {len(self.options)}"
            )

    def _find_option(self, answer: str) -> Optional[int]:
        wanted = answer.strip().lower()
        for index, option in enumerate(self.options):
            if option.strip().lower() == wanted:
                return index
        return None

    # ─────────────────────────────────────────────────────────────────────────
    # Calculated Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def is_multiple_choice(self) -> bool:
        """True for questions whose options can be shuffled."""
        return self.type is QuestionType.MULTIPLE_CHOICE

    @property
    def option_count(self) -> int:
        """Number of canonical options (0 for TF without stored options)."""
        return len(self.options)

    @property
    def display_options(self) -> tuple[str, ...]:
        """Options as shown on paper; TF falls back to True/False."""
        if self.type is QuestionType.TRUE_FALSE and not self.options:
            return TRUE_FALSE_OPTIONS
        return self.options

    @property
    def correct_index(self) -> Optional[int]:
        """
        Canonical index of the correct option.

        Returns:
            Index into display_options, or None if the answer is not listed
        """
        if self.type is QuestionType.TRUE_FALSE and not self.options:
            wanted = self.correct_answer.strip().lower()
            for index, option in enumerate(TRUE_FALSE_OPTIONS):
                if option.lower() == wanted:
                    return index
            return None
        return self._find_option(self.correct_answer)

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "correct_answer": self.correct_answer,
        }
        if self.options:
            data["options"] = list(self.options)
        if self.text:
            data["text"] = self.text
        if self.points != 1:
            data["points"] = self.points
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Question:
        return cls(
            id=data["id"],
            type=QuestionType(data["type"]),
            correct_answer=data["correct_answer"],
            options=tuple(data.get("options", ())),
            text=data.get("text", ""),
            points=data.get("points", 1),
        )


@dataclass(frozen=True)
class CanonicalExam:
    """
    The canonical (un-randomized) exam.

    Attributes:
        id: Exam identifier
        questions: Questions in canonical order
        title: Optional display title

    Invariants:
        - Question ids are unique
        - An exam with zero questions can be built; the generator rejects it

    Example:
        >>> exam = CanonicalExam("exam-1", (q1, q2))
        >>> exam.question_index("q2")
        1
    """

    id: str
    questions: tuple[Question, ...]
    title: str = ""

    def __post_init__(self) -> None:
        """Validate exam on construction."""
        if not self.id:
            raise ValueError("Exam id must be non-empty")
        ids = [q.id for q in self.questions]
        if len(ids) != len(set(ids)):
            duplicates = sorted({qid for qid in ids if ids.count(qid) > 1})
            raise ValueError(f"Duplicate question ids in exam {self.id}: {duplicates}")

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @cached_property
    def _index_by_id(self) -> Dict[str, int]:
        return {q.id: i for i, q in enumerate(self.questions)}

    @property
    def multiple_choice_questions(self) -> tuple[Question, ...]:
        """MC questions in canonical order."""
        return tuple(q for q in self.questions if q.is_multiple_choice)

    def question_index(self, question_id: str) -> int:
        """
        Canonical index of a question.

        Raises:
            KeyError: If the question is not part of the exam
        """
        return self._index_by_id[question_id]

    def get_question(self, question_id: str) -> Optional[Question]:
        index = self._index_by_id.get(question_id)
        return None if index is None else self.questions[index]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id}
        if self.title:
            data["title"] = self.title
        data["questions"] = [q.to_dict() for q in self.questions]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CanonicalExam:
        return cls(
            id=data["id"],
            questions=tuple(Question.from_dict(q) for q in data.get("questions", [])),
            title=data.get("title", ""),
        )

    def __repr__(self) -> str:
        return (
            f"CanonicalExam({self.id}, questions={self.question_count}, "
            f"mc={len(self.multiple_choice_questions)})"
        )
