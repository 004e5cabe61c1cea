class HistogramError(ValueError):
    """Base class for every error raised by the histogram."""


class InvalidConfiguration(HistogramError):
    """Bad constructor arguments (max_bins <= 0, alpha outside (0, 1))."""


class InvalidArgument(HistogramError):
    """Bad call argument: non-finite observation or q outside [0, 1]."""


class EmptyHistogram(HistogramError):
    """A query needs at least one observation."""
