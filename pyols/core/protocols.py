"""
Core protocols for pyols.

These define structural interfaces rather than base classes, so callers
can plug in their own record types and backends without inheriting from
anything in this package.
"""

from typing import Protocol, TypeVar, runtime_checkable

from pyols.core.result import Result

# Type variables for generic payloads
P = TypeVar('P')  # Parameter payload type
D = TypeVar('D')  # Design type


@runtime_checkable
class NumericRecord(Protocol):
    """
    An observation that can look up a named field as a number.

    This is the explicit form of the record capability. Mappings and
    objects with plain attributes (dataclasses, namedtuples) are also
    accepted by the design builder; implement this protocol when a record
    needs custom lookup (computed fields, renamed columns, lazy parsing).

    Unknown names raise FieldNotFoundError (KeyError is also accepted);
    the design builder re-raises either with the formula attached.
    """

    def get_numeric_field(self, name: str) -> float:
        """Return the value of field ``name``."""
        ...


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for computational backends.

    Each backend takes a design and produces a parameter payload wrapped
    in a Result. Backends are stateless; all configuration is passed at
    construction time.

    Type Parameters:
        D: The design type this backend accepts
        P: The parameter payload type this backend produces
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{algorithm}'
        Examples: 'cpu_qr', 'cpu_cholesky'
        """
        ...

    def solve(self, design: D) -> Result[P]:
        """
        Execute the statistical computation.

        Args:
            design: Validated design

        Returns:
            Result envelope containing parameter payload and metadata

        Raises:
            NumericalError: If numerical issues prevent solution (singularity, etc.)
        """
        ...
