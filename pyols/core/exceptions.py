"""
Exception hierarchy for pyols.

All exceptions inherit from PyOLSError to allow catching any
library-specific error. Each stage of the pipeline raises its own
class: parse time (FormulaError), build time (FieldNotFoundError),
fit time (InsufficientDataError, SingularDesignMatrixError).

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyOLSError(Exception):
    """Base exception for all pyols errors."""
    pass


class ValidationError(PyOLSError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when array shapes don't match expected dimensions or
    when multiple arrays have inconsistent shapes.
    """
    pass


class FormulaError(ValidationError):
    """
    Formula text could not be parsed.

    Raised when no response variable can be identified, when a character
    is not part of the formula grammar, or when the response variable is
    also listed as a predictor.

    Attributes:
        formula: The formula text being parsed
        position: Index of the offending character, if any
        character: The offending character, if any
    """

    def __init__(
        self,
        message: str,
        formula: str | None = None,
        position: int | None = None,
        character: str | None = None,
    ):
        super().__init__(message)
        self.formula = formula
        self.position = position
        self.character = character


class FieldNotFoundError(ValidationError):
    """
    A formula references a field the observations do not have.

    Attributes:
        field_name: The missing field
        formula: The formula text that referenced it
        row: Index of the observation lacking the field, if known
    """

    def __init__(
        self,
        message: str,
        field_name: str,
        formula: str | None = None,
        row: int | None = None,
    ):
        super().__init__(message)
        self.field_name = field_name
        self.formula = formula
        self.row = row


class InsufficientDataError(ValidationError):
    """
    Not enough observations to estimate the model.

    Raised at fit time when the residual degrees of freedom
    (observations minus design columns) are not positive.

    Attributes:
        n_observations: Number of observations available
        n_columns: Number of design-matrix columns to estimate
    """

    def __init__(self, message: str, n_observations: int, n_columns: int):
        super().__init__(message)
        self.n_observations = n_observations
        self.n_columns = n_columns


class NumericalError(PyOLSError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.

    Raised when a matrix operation requires invertibility but the matrix
    is singular or numerically rank-deficient.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        condition_number: Estimated condition number, if available
        rank: Numerical rank, if computed
        expected_rank: Expected rank (typically min(n, p))
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        condition_number: float | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.condition_number = condition_number
        self.rank = rank
        self.expected_rank = expected_rank


class NotPositiveDefiniteError(NumericalError):
    """
    Matrix is not positive definite.

    Raised when an operation requires a positive definite matrix
    (e.g., Cholesky decomposition) but the matrix fails this requirement.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        min_eigenvalue: Minimum eigenvalue, if computed
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        min_eigenvalue: float | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.min_eigenvalue = min_eigenvalue


class SingularDesignMatrixError(SingularMatrixError):
    """
    Design matrix columns are collinear.

    Raised instead of returning meaningless standard errors: no
    pseudo-inverse fallback is attempted.

    Attributes:
        column_name: First design column found to be a linear combination
            of the columns before it, if identified
    """

    def __init__(
        self,
        message: str,
        column_name: str | None = None,
        condition_number: float | None = None,
        rank: int | None = None,
        expected_rank: int | None = None,
    ):
        super().__init__(
            message,
            matrix_name='X',
            condition_number=condition_number,
            rank=rank,
            expected_rank=expected_rank,
        )
        self.column_name = column_name
