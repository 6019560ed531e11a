# mini_corot/errors.py
"""Exceptions and warnings raised by the corotational transformation."""


class TransformError(RuntimeError):
    """Base class for all transformation failures."""
    pass


class TopologyError(TransformError):
    """Raised when a required node reference is missing at initialization."""
    pass


class DegenerateGeometryError(TransformError, ValueError):
    """Raised when a reference or deformed length (or the triad) degenerates."""
    pass


class StaleStateError(TransformError):
    """Raised when forces or stiffness are pushed before update() has run."""
    pass


class UnsupportedOperationWarning(UserWarning):
    """Issued for queries the transformation does not implement."""
    pass
