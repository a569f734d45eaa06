"""
Module: generator

Purpose:
    Variant generator. Randomizes question order and/or MC option order to
    produce N independent variants of one canonical exam.

Key Functions:
    - generate(): Main entry point
    - recreate_variant(): Rebuild a single seeded variant
    - fisher_yates(): Uniform permutation from a RandomSource

Key Classes:
    - GenerationConfig: Configuration for generation
    - RandomSource / SeededRandomSource: Randomness capability
    - InvalidConfiguration: Caller input error

Used By:
    - cli: generate command
"""

from .config import GenerationConfig, InvalidConfiguration
from .random_source import RandomSource, SeededRandomSource, fisher_yates, seeded_source_factory
from .generator import generate, recreate_variant, VariantGenerator

__all__ = [
    # Config
    "GenerationConfig",
    "InvalidConfiguration",
    # Randomness
    "RandomSource",
    "SeededRandomSource",
    "fisher_yates",
    "seeded_source_factory",
    # Generation
    "generate",
    "recreate_variant",
    "VariantGenerator",
]
