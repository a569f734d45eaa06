import pytest
import sys
from pathlib import Path

# Add src to sys.path so we can import exam_variants
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from exam_variants.core.models import (  # noqa: E402
    CanonicalExam,
    Question,
    QuestionPlacement,
    QuestionType,
    Variant,
)


# ─────────────────────────────────────────────────────────────────────────────
# Builders
# ─────────────────────────────────────────────────────────────────────────────

def mc(qid: str, options, answer: str, **kwargs) -> Question:
    """Build a multiple choice question."""
    return Question(qid, QuestionType.MULTIPLE_CHOICE, answer, options=tuple(options), **kwargs)


def tf(qid: str, answer: str = "True", **kwargs) -> Question:
    """Build a true/false question."""
    return Question(qid, QuestionType.TRUE_FALSE, answer, **kwargs)


def make_variant(number: int, order, permutations=None) -> Variant:
    """
    Build a variant from an explicit question order.

    Args:
        number: 1-based variant number
        order: Question ids in display order
        permutations: Optional {question_id: option permutation}
    """
    permutations = permutations or {}
    placements = tuple(
        QuestionPlacement(
            question_id=qid,
            position=position,
            option_permutation=(
                tuple(permutations[qid]) if qid in permutations else None
            ),
        )
        for position, qid in enumerate(order)
    )
    return Variant(id=f"variant_{number}", number=number, placements=placements)


class ScriptedSource:
    """RandomSource returning a fixed function of the bound, recording each bound."""

    def __init__(self, pick=lambda bound: 0):
        self.pick = pick
        self.bounds = []

    def next_int(self, bound: int) -> int:
        self.bounds.append(bound)
        return self.pick(bound)


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def sample_exam() -> CanonicalExam:
    """5 questions: 3 MC with 4 options each, 2 TF."""
    return CanonicalExam(
        id="exam-1",
        title="Sample Exam",
        questions=(
            mc("q1", ["Paris", "London", "Rome", "Madrid"], "Paris", text="Capital of France?"),
            tf("q2", "True", text="The sky is blue."),
            mc("q3", ["2", "3", "4", "5"], "4", text="2 + 2?", points=2),
            mc("q4", ["H2O", "CO2", "O2", "N2"], "H2O", text="Water?"),
            tf("q5", "False", text="Fish can fly."),
        ),
    )


@pytest.fixture
def true_false_exam() -> CanonicalExam:
    """4 TF questions, no multiple choice."""
    return CanonicalExam(
        id="exam-tf",
        questions=(tf("t1"), tf("t2", "False"), tf("t3"), tf("t4", "False")),
    )


@pytest.fixture
def mixed_exam() -> CanonicalExam:
    """One MC with 4 options, then two TF questions."""
    return CanonicalExam(
        id="exam-mixed",
        questions=(
            mc("m1", ["a", "b", "c", "d"], "b"),
            tf("t1", "False"),
            tf("t2", "True"),
        ),
    )


@pytest.fixture
def exam_document() -> dict:
    """Minimal valid exam document."""
    return {
        "schema_version": 1,
        "id": "exam-doc",
        "title": "Doc Exam",
        "questions": [
            {
                "id": "q1",
                "type": "MULTIPLE_CHOICE",
                "text": "Pick B",
                "options": ["A", "B", "C"],
                "correct_answer": "B",
            },
            {"id": "q2", "type": "TRUE_FALSE", "correct_answer": "False"},
        ],
    }
