import math
import re

_re_split = re.compile(r"[\s,]+")


def _split_fields(line: str, delimiter):
    if delimiter is None:
        return [f for f in _re_split.split(line.strip()) if f]
    return [f.strip() for f in line.split(delimiter)]


def parse_observations(
    path: str,
    column: int = 0,
    delimiter=None,
    status_cb=None,
    status_every_lines: int = 0,
):
    """Read numeric observations from a text file.

    One record per line; blank lines and `#` comments are ignored. The value is
    taken from field `column` (fields split on whitespace/commas unless a
    delimiter is given). Lines whose field is missing, unparseable or
    non-finite are counted as skipped, so a CSV header is harmless.

    Returns (values, skipped).
    """
    if column < 0:
        raise ValueError(f"column must be >= 0, got {column}")

    values = []
    skipped = 0
    line_no = 0

    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for raw in f:
            line_no += 1
            if status_cb is not None and status_every_lines and line_no % status_every_lines == 0:
                status_cb(f"  read {line_no:,} lines ({len(values):,} values)")

            line = raw.strip()
            if not line or line.startswith("#"):
                continue

            fields = _split_fields(line, delimiter)
            if column >= len(fields):
                skipped += 1
                continue
            try:
                v = float(fields[column])
            except ValueError:
                skipped += 1
                continue
            if not math.isfinite(v):
                skipped += 1
                continue
            values.append(v)

    return values, skipped
