import pytest

from ewhist import InvalidArgument, WeightedHistogram
from ewhist.stats import parse_quantiles, quantile_label, track_quantiles


def test_quantile_label():
    assert quantile_label(0.5) == "p50"
    assert quantile_label(0.99) == "p99"
    assert quantile_label(0.999) == "p99.9"
    assert quantile_label(0.0) == "p0"
    assert quantile_label(1.0) == "p100"


def test_parse_quantiles_sorts_and_dedupes():
    assert parse_quantiles("0.99, 0.5,0.9,0.5") == [0.5, 0.9, 0.99]
    assert parse_quantiles([0.9, 0.1]) == [0.1, 0.9]


@pytest.mark.parametrize("text", ["", " , ", "0.5,abc", "1.5", "-0.1", None])
def test_parse_quantiles_rejects_bad_input(text):
    with pytest.raises(InvalidArgument):
        parse_quantiles(text)


def test_track_quantiles_snapshots():
    h = WeightedHistogram(8, 0.99)
    rows = track_quantiles(range(1, 26), h, [0.5, 0.9], snapshot_every=10)
    # Every 10th observation plus the tail.
    assert [r["n"] for r in rows] == [10, 20, 25]
    assert set(rows[0]) == {"n", "p50", "p90", "total_weight", "bins", "mean"}
    for r in rows:
        assert r["p50"] <= r["p90"]
        assert r["bins"] <= 8
    assert rows[-1]["total_weight"] == pytest.approx(h.count())


def test_track_quantiles_no_duplicate_tail():
    h = WeightedHistogram(8, 0.9)
    rows = track_quantiles([1.0, 2.0, 3.0, 4.0], h, [0.5], snapshot_every=2)
    assert [r["n"] for r in rows] == [2, 4]


def test_track_quantiles_empty_stream():
    h = WeightedHistogram(8, 0.9)
    assert track_quantiles([], h, [0.5], snapshot_every=5) == []


def test_track_quantiles_rejects_bad_interval():
    h = WeightedHistogram(8, 0.9)
    with pytest.raises(InvalidArgument):
        track_quantiles([1.0], h, [0.5], snapshot_every=0)


def test_parse_quantiles_one_per_label():
    qs = parse_quantiles("0.5,0.5000000001,0.9")
    assert qs == [0.5, 0.9]
    assert [quantile_label(q) for q in qs] == ["p50", "p90"]


def test_track_quantiles_keeps_every_label():
    h = WeightedHistogram(8, 0.9)
    qs = parse_quantiles("0.9,0.90000000001,0.1")
    rows = track_quantiles([1.0, 2.0, 3.0], h, qs, snapshot_every=3)
    assert set(rows[0]) == {"n", "p10", "p90", "total_weight", "bins", "mean"}
