"""
Error Taxonomy

Precondition failures raised at the boundary of the offending operation.
"""


class VolumeFractionError(Exception):
    """Base class for all volume fraction errors."""


class InvalidRangeError(VolumeFractionError, ValueError):
    """Threshold bounds violate 0 <= min <= max <= type bound."""


class InvalidRegionError(VolumeFractionError, ValueError):
    """A region references a slice outside the volume."""


class InvalidParameterError(VolumeFractionError, ValueError):
    """Bad resampling factor, empty volume or misuse of the region collection."""


class UninitializedInputError(VolumeFractionError, RuntimeError):
    """The pipeline was run before its required inputs were set."""
