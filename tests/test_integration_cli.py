import json
import subprocess
import sys
from pathlib import Path

from openpyxl import load_workbook

ROOT = Path(__file__).resolve().parents[1]
SCRIPT = str(ROOT / "ewhist.py")


def _write_values(path, n=500):
    # Slow sawtooth so the quantiles move over the run.
    path.write_text("\n".join(str((i % 100) + (i // 100)) for i in range(n)) + "\n", encoding="utf-8")


def test_cli_produces_xlsx(tmp_path):
    values = tmp_path / "latency.txt"
    _write_values(values)
    out = values.with_suffix(".xlsx")

    proc = subprocess.run(
        [sys.executable, SCRIPT, str(values), "--quiet", "--snapshot-every", "100", "--max-bins", "16"],
        cwd=str(ROOT),
        check=True,
        capture_output=True,
        text=True,
    )

    assert out.exists()
    assert "p50\t" in proc.stdout
    assert proc.stdout.strip().splitlines()[-1].startswith("Wrote 500 observations")

    wb = load_workbook(out)
    assert "Dashboard" in wb.sheetnames
    assert "Snapshots" in wb.sheetnames
    assert "Bins" in wb.sheetnames
    ws_snap = wb["Snapshots"]
    assert [c.value for c in ws_snap[1]] == ["n", "p50", "p90", "p99", "total_weight", "bins", "mean"]
    assert ws_snap.max_row == 6
    ws_bins = wb["Bins"]
    assert 2 <= ws_bins.max_row <= 17


def test_cli_sidecar_exports_with_config(tmp_path):
    values = tmp_path / "requests.csv"
    values.write_text("ts,latency_ms\n" + "".join(f"{i},{(i * 7) % 50}\n" for i in range(200)), encoding="utf-8")
    cfg = tmp_path / "hist.ini"
    cfg.write_text("max_bins = 8\nwindow = 99\nquantiles = 0.25,0.75\nsnapshot_every = 50\n", encoding="utf-8")
    out = tmp_path / "report.xlsx"

    subprocess.check_call(
        [
            sys.executable,
            SCRIPT,
            str(values),
            "--config",
            str(cfg),
            "--column",
            "1",
            "--delimiter",
            ",",
            "--output",
            str(out),
            "--csv",
            "--json",
            "--quiet",
        ],
        cwd=str(ROOT),
    )

    assert out.exists()
    assert (tmp_path / "report_snapshots.csv").exists()
    assert (tmp_path / "report_bins.csv").exists()

    summary = json.loads((tmp_path / "report.summary.json").read_text(encoding="utf-8"))
    assert summary["observations"] == 200
    assert summary["skipped_lines"] == 1
    assert summary["max_bins"] == 8
    assert abs(summary["alpha"] - 0.02) < 1e-12
    assert summary["bins"] <= 8
    assert set(summary["quantiles"]) == {"p25", "p75"}
    assert summary["quantiles"]["p25"] <= summary["quantiles"]["p75"]

    meta = json.loads((tmp_path / "report.run.json").read_text(encoding="utf-8"))
    assert meta["max_bins"] == 8
    assert len(meta["run_hash"]) == 64


def test_cli_rejects_alpha_with_window(tmp_path):
    values = tmp_path / "v.txt"
    _write_values(values, n=10)

    proc = subprocess.run(
        [sys.executable, SCRIPT, str(values), "--alpha", "0.9", "--window", "10", "--quiet"],
        cwd=str(ROOT),
        capture_output=True,
        text=True,
    )
    assert proc.returncode != 0
    assert "mutually exclusive" in proc.stderr


def test_cli_invalid_alpha_fails(tmp_path):
    values = tmp_path / "v.txt"
    _write_values(values, n=10)

    proc = subprocess.run(
        [sys.executable, SCRIPT, str(values), "--alpha", "1.5", "--quiet"],
        cwd=str(ROOT),
        capture_output=True,
        text=True,
    )
    assert proc.returncode != 0
    assert "InvalidConfiguration" in proc.stderr
