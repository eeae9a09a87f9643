"""Exceptions raised while composing or applying transforms."""


class TransformError(Exception):
    """Base class for all errors raised by voltransform."""
    pass


class ValidationError(TransformError, ValueError):
    """Invalid or incomplete combination of inputs.

    Raised for malformed matrix files, options that require a transform
    when none was provided, and invalid oversampling factors,
    interpolation methods or data types.
    """
    pass


class SingularMatrixError(TransformError, ArithmeticError):
    """A matrix that must be inverted is singular."""
    pass
