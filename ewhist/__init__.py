"""ewhist package: exponentially weighted streaming histogram.

Main entry points:
- WeightedHistogram(max_bins, alpha) for in-process quantile tracking
- python ewhist.py <values.txt>
- python -m ewhist.cli <values.txt>
"""

from .errors import EmptyHistogram, HistogramError, InvalidArgument, InvalidConfiguration
from .histogram import WeightedHistogram, estimate_alpha

__all__ = [
    "WeightedHistogram",
    "estimate_alpha",
    "HistogramError",
    "InvalidConfiguration",
    "InvalidArgument",
    "EmptyHistogram",
    "cli",
    "config_ini",
    "constants",
    "histogram",
    "report_writer",
    "stats",
    "stream_reader",
]
