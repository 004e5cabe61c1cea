import pytest

from ewhist.stream_reader import parse_observations


def test_parse_observations_skips_comments_and_junk(tmp_path):
    src = tmp_path / "latency.txt"
    src.write_text(
        """
# request latency (ms)
12.5
  7

abc
nan
inf
-3e-1
""".lstrip(),
        encoding="utf-8",
    )

    values, skipped = parse_observations(str(src))
    assert values == [12.5, 7.0, -0.3]
    assert skipped == 3


def test_parse_observations_csv_column(tmp_path):
    src = tmp_path / "requests.csv"
    src.write_text("ts,latency_ms\n1,10.0\n2,12.5\n3,\n", encoding="utf-8")

    values, skipped = parse_observations(str(src), column=1, delimiter=",")
    assert values == [10.0, 12.5]
    # Header row and the empty field.
    assert skipped == 2


def test_parse_observations_status_callback(tmp_path):
    src = tmp_path / "v.txt"
    src.write_text("\n".join(str(i) for i in range(10)) + "\n", encoding="utf-8")

    msgs = []
    values, _ = parse_observations(str(src), status_cb=msgs.append, status_every_lines=4)
    assert len(values) == 10
    assert len(msgs) == 2


def test_parse_observations_rejects_negative_column(tmp_path):
    src = tmp_path / "v.txt"
    src.write_text("1\n", encoding="utf-8")
    with pytest.raises(ValueError):
        parse_observations(str(src), column=-1)
