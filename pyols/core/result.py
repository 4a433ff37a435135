"""
Generic result container for pyols computations.

The Result class is the envelope every backend returns. It keeps the
numerical payload apart from the metadata about how it was produced
(method, rank, condition number, timing, library versions).

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (method, rank, condition number)
    - timing is optional (don't burden unit tests)
    - provenance for reproducibility (library versions)
    - Immutable (frozen=True) for reproducibility
    - Equality compares the payload and metadata, never timing or provenance
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


def _default_provenance() -> dict[str, Any]:
    """Generate minimal provenance metadata."""
    import numpy as np
    import scipy

    from pyols import __version__

    return {
        'pyols_version': __version__,
        'numpy_version': np.__version__,
        'scipy_version': scipy.__version__,
    }


@dataclass(frozen=True, eq=False)
class Result(Generic[P]):
    """
    Immutable result envelope for statistical computations.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific parameters (coefficients, statistics, etc.)
        info: Structured metadata (method, rank, diagnostics)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation
        provenance: Library versions used to produce the result

    Examples:
        >>> Result(
        ...     params=OLSParams(...),
        ...     info={'method': 'qr', 'rank': 3},
        ...     timing={'total_seconds': 0.01},
        ...     backend_name='cpu_qr'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    provenance: dict[str, Any] = field(default_factory=_default_provenance)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return (
            self.backend_name == other.backend_name
            and self.info == other.info
            and self.warnings == other.warnings
            and self.params == other.params
        )

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
