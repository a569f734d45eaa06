"""Top-level package for exam variant generation and similarity analysis.

Provides subpackages:
- exam_variants.core – models, document schemas and serialization
- exam_variants.generator – randomized variant generation
- exam_variants.analysis – similarity report over a generation
- exam_variants.common – shared thresholds
"""

from importlib.metadata import PackageNotFoundError, version as _pkg_version


def _get_version() -> str:
    """Get version from the installed distribution metadata."""
    try:
        return _pkg_version("exam-variants")
    except PackageNotFoundError:
        # Running from a source checkout without an install
        return "0.0.0"


__version__ = _get_version()
__all__: list[str] = ["__version__"]
