"""
Exam Variants Core Package

Shared data models, document schemas and serialization used by both the
generator and the analyzer.

1. **Immutable Data Models**
   - Frozen dataclasses; new instances are created for any change
   - A Generation is never edited; regeneration produces a new one

2. **Calculated Statistics (Never Stored)**
   - Unique orderings, possible variations and answer keys are properties

3. **Validated Documents**
   - Structural checks on every load, JSON Schema checks on request
"""

from .models import CanonicalExam, Generation, Question, QuestionType, Variant
from .models.report import SimilarityReport

__all__ = [
    "CanonicalExam",
    "Generation",
    "Question",
    "QuestionType",
    "Variant",
    "SimilarityReport",
]
