import math

from .errors import InvalidArgument


def quantile_label(q: float) -> str:
    """Column label for a quantile: 0.5 -> "p50", 0.999 -> "p99.9"."""
    pct = round(float(q) * 100.0, 6)
    if math.isclose(pct, round(pct)):
        return f"p{int(round(pct))}"
    return "p" + f"{pct:f}".rstrip("0").rstrip(".")


def parse_quantiles(text) -> list[float]:
    """Parse "0.5, 0.9,0.99" into a sorted list, one entry per label.

    Accepts a list/tuple of numbers as well.
    """
    if text is None:
        raise InvalidArgument("no quantiles given")
    if isinstance(text, (list, tuple)):
        parts = list(text)
    else:
        parts = [p.strip() for p in str(text).split(",") if p.strip()]
    if not parts:
        raise InvalidArgument(f"no quantiles in {text!r}")

    qs = []
    for p in parts:
        try:
            q = float(p)
        except (TypeError, ValueError, OverflowError):
            raise InvalidArgument(f"quantile {p!r} is not a number") from None
        if not (0.0 <= q <= 1.0):
            raise InvalidArgument(f"quantile {p!r} must be in [0, 1]")
        qs.append(q)

    # Snapshot rows are keyed by label, so keep one quantile per label.
    by_label = {}
    for q in sorted(qs):
        by_label.setdefault(quantile_label(q), q)
    return list(by_label.values())


def _snapshot(n: int, hist, quantiles):
    row = {"n": n}
    for q in quantiles:
        row[quantile_label(q)] = hist.quantile(q)
    row["total_weight"] = hist.count()
    row["bins"] = len(hist)
    row["mean"] = hist.mean()
    return row


def track_quantiles(values, hist, quantiles, snapshot_every: int):
    """Feed `values` into `hist`, recording quantile snapshots along the way.

    A row is taken every `snapshot_every` observations and once more after the
    last one (unless that point was already captured).
    """
    if snapshot_every < 1:
        raise InvalidArgument(f"snapshot_every must be >= 1, got {snapshot_every!r}")

    rows = []
    n = 0
    for v in values:
        hist.add(v)
        n += 1
        if n % snapshot_every == 0:
            rows.append(_snapshot(n, hist, quantiles))
    if n and (not rows or rows[-1]["n"] != n):
        rows.append(_snapshot(n, hist, quantiles))
    return rows
