"""
Exceptions raised by the claim frequency toolkit.
"""


class ClaimsGLMError(Exception):
    """Base class for all package errors."""


class DatasetUnavailableError(ClaimsGLMError):
    """The reference dataset could not be read or lacks required columns."""


class DataValidationError(ClaimsGLMError):
    """Loaded records violate an assumption of the transform (e.g. exposure <= 0)."""


class ModelFitError(ClaimsGLMError):
    """A GLM failed to converge or produced a non-finite fit."""
