"""
Module: generator.config

Purpose:
    Configuration dataclass for variant generation.
    Immutable configuration with validation on construction.

Key Classes:
    - GenerationConfig: Variant count, shuffle switches, seed
    - InvalidConfiguration: Raised for caller input errors

Dependencies:
    - dataclasses (std)

Used By:
    - generator.generator: Variant generator
    - core.utils.serialization: Generation documents
    - cli: Command line front end
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


Seed = Union[int, str]


class InvalidConfiguration(ValueError):
    """Generation request rejected before any computation."""
    pass


@dataclass(frozen=True)
class GenerationConfig:
    """
    Configuration for variant generation (immutable).

    Attributes:
        variant_count: Number of variants to produce (>= 1)
        shuffle_questions: Randomize question order per variant
        shuffle_answers: Randomize MC option order per variant
        seed: Optional seed; makes the whole batch reproducible
        max_workers: Threads used to build variants (1 = sequential)

    Invariants:
        - variant_count >= 1
        - max_workers >= 1
        - Both shuffles disabled is valid (every variant is identical);
          the analyzer flags it

    Example:
        >>> config = GenerationConfig(variant_count=4, seed=42)
        >>> config.is_randomized
        True
    """

    variant_count: int
    shuffle_questions: bool = True
    shuffle_answers: bool = True
    seed: Optional[Seed] = None
    max_workers: int = 1

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if isinstance(self.variant_count, bool) or not isinstance(self.variant_count, int):
            raise InvalidConfiguration(
                f"variant_count must be an integer: {self.variant_count!r}"
            )
        if self.variant_count < 1:
            raise InvalidConfiguration(f"variant_count must be >= 1: {self.variant_count}")
        for name in ("shuffle_questions", "shuffle_answers"):
            if not isinstance(getattr(self, name), bool):
                raise InvalidConfiguration(f"{name} must be a bool: {getattr(self, name)!r}")
        if self.seed is not None and (
            isinstance(self.seed, bool) or not isinstance(self.seed, (int, str))
        ):
            raise InvalidConfiguration(f"seed must be an int or str: {self.seed!r}")
        if isinstance(self.max_workers, bool) or not isinstance(self.max_workers, int):
            raise InvalidConfiguration(f"max_workers must be an integer: {self.max_workers!r}")
        if self.max_workers < 1:
            raise InvalidConfiguration(f"max_workers must be >= 1: {self.max_workers}")

    @property
    def is_randomized(self) -> bool:
        """False when every variant will be identical by construction."""
        return self.shuffle_questions or self.shuffle_answers

    @property
    def is_seeded(self) -> bool:
        return self.seed is not None

    def variant_seed(self, index: int) -> Optional[str]:
        """
        Seed for the variant at 0-based index, derived from the batch seed.

        Returns:
            "{seed}_v{index}", or None for unseeded configs
        """
        if self.seed is None:
            return None
        return f"{self.seed}_v{index}"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "variant_count": self.variant_count,
            "shuffle_questions": self.shuffle_questions,
            "shuffle_answers": self.shuffle_answers,
        }
        if self.seed is not None:
            data["seed"] = self.seed
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> GenerationConfig:
        return cls(
            variant_count=data["variant_count"],
            shuffle_questions=data.get("shuffle_questions", True),
            shuffle_answers=data.get("shuffle_answers", True),
            seed=data.get("seed"),
        )
