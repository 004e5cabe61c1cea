"""Exponentially weighted streaming histogram.

Bins hold a representative value and a decayed weight. Every insertion is one
tick of time: the bin that receives the observation gains a full unit of
weight, every other bin shrinks by the factor ``alpha``. When the number of
bins exceeds ``max_bins`` the two closest neighbours are merged, so memory
stays bounded while quantiles keep favouring recent data.
"""

import math

from .constants import BAR_WIDTH
from .errors import EmptyHistogram, InvalidArgument, InvalidConfiguration


class Bin:
    __slots__ = ("value", "weight")

    def __init__(self, value: float, weight: float):
        self.value = value
        self.weight = weight

    def __repr__(self):
        return f"Bin(value={self.value!r}, weight={self.weight!r})"


def ewma(existing: float, new: float, alpha: float) -> float:
    return new * (1 - alpha) + existing * alpha


def estimate_alpha(window: float) -> float:
    """Decay factor whose samples have an average age of `window` insertions.

    A 60-insertion window with an average age of 30 gives alpha = 2 / 31.
    """
    try:
        window = float(window)
    except (TypeError, ValueError, OverflowError):
        raise InvalidConfiguration(f"window must be a number, got {window!r}") from None
    if not math.isfinite(window) or window <= 0:
        raise InvalidConfiguration(f"window must be > 0, got {window!r}")
    return 2.0 / (window + 1.0)


def _finite_float(x, what: str) -> float:
    if isinstance(x, (bool, str, bytes)):
        raise InvalidArgument(f"{what} must be a real number, got {x!r}")
    try:
        f = float(x)
    except (TypeError, ValueError, OverflowError):
        raise InvalidArgument(f"{what} must be a real number, got {x!r}") from None
    if not math.isfinite(f):
        raise InvalidArgument(f"{what} must be finite, got {x!r}")
    return f


class WeightedHistogram:
    """Approximate quantiles over a stream, with recency factored in.

    Not thread-safe: callers sharing an instance must serialize ``add`` and
    every query themselves.
    """

    def __init__(self, max_bins: int, alpha: float):
        if isinstance(max_bins, bool) or not isinstance(max_bins, int) or max_bins <= 0:
            raise InvalidConfiguration(f"max_bins must be a positive integer, got {max_bins!r}")
        try:
            alpha_f = float(alpha)
        except (TypeError, ValueError, OverflowError):
            raise InvalidConfiguration(f"alpha must be a number in (0, 1), got {alpha!r}") from None
        if not (0.0 < alpha_f < 1.0):
            raise InvalidConfiguration(f"alpha must be in (0, 1), got {alpha!r}")

        self._bins: list[Bin] = []
        self._max_bins = max_bins
        self._alpha = alpha_f
        self._total = 0.0

    @property
    def max_bins(self) -> int:
        return self._max_bins

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def bins(self) -> list[tuple[float, float]]:
        """Snapshot of the bins as (value, weight) pairs, ascending by value."""
        return [(b.value, b.weight) for b in self._bins]

    def __len__(self):
        return len(self._bins)

    def _scale_down(self, except_index: int):
        for i, b in enumerate(self._bins):
            if i != except_index:
                b.weight = ewma(b.weight, 0.0, self._alpha)

    def add(self, n):
        """Insert one observation. NaN and infinities raise InvalidArgument."""
        n = _finite_float(n, "observation")

        touched = len(self._bins)
        for i, b in enumerate(self._bins):
            if b.value == n:
                b.weight += 1.0
                touched = i
                break
            if b.value > n:
                self._bins.insert(i, Bin(n, 1.0))
                touched = i
                break
        else:
            self._bins.append(Bin(n, 1.0))

        self._scale_down(touched)
        self._total = sum(b.weight for b in self._bins)
        self._trim()

    def _trim(self):
        # Merge the closest adjacent pair until the bin budget holds.
        # Merging conserves weight, so total stays valid.
        bins = self._bins
        while len(bins) > self._max_bins:
            min_delta = math.inf
            min_index = 1
            for i in range(1, len(bins)):
                delta = bins[i].value - bins[i - 1].value
                if delta < min_delta:
                    min_delta = delta
                    min_index = i

            lo = bins[min_index - 1]
            hi = bins[min_index]
            # Plain average of the two values, not weighted by mass.
            bins[min_index - 1 : min_index + 1] = [Bin((lo.value + hi.value) / 2, lo.weight + hi.weight)]

    def _require_data(self):
        if not self._bins:
            raise EmptyHistogram("histogram has no observations")

    def quantile(self, q) -> float:
        """Value of the first bin at which the cumulative weight reaches q * total."""
        q = _finite_float(q, "q")
        if q < 0.0 or q > 1.0:
            raise InvalidArgument(f"q must be in [0, 1], got {q!r}")
        self._require_data()

        count = q * self._total
        for b in self._bins:
            count -= b.weight
            if count <= 0:
                return b.value
        # Rounding can leave a sliver of weight unaccounted for near q = 1.
        return self._bins[-1].value

    def cdf(self, x) -> float:
        """Fraction of the total weight held by bins with value <= x."""
        x = _finite_float(x, "x")
        self._require_data()
        count = 0.0
        for b in self._bins:
            if b.value <= x:
                count += b.weight
        return count / self._total

    def count(self) -> float:
        return self._total

    def mean(self) -> float:
        if self._total == 0:
            return 0.0
        return sum(b.value * b.weight for b in self._bins) / self._total

    def variance(self) -> float:
        if self._total == 0:
            return 0.0
        m = self.mean()
        return sum(b.weight * (b.value - m) ** 2 for b in self._bins) / self._total

    def __str__(self):
        lines = [f"Total: {self._total}"]
        for b in self._bins:
            dots = int(b.weight / self._total * BAR_WIDTH) if self._total > 0 else 0
            lines.append(f"{b.value}\t{'.' * dots}")
        return "\n".join(lines) + "\n"

    def __repr__(self):
        return (
            f"WeightedHistogram(max_bins={self._max_bins}, alpha={self._alpha}, "
            f"bins={len(self._bins)}, total={self._total})"
        )
