import csv
import math
from pathlib import Path

from openpyxl import Workbook
from openpyxl.chart import BarChart, Reference, ScatterChart
from openpyxl.chart.series_factory import SeriesFactory
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from .stats import quantile_label


def set_basic_column_widths(ws, widths):
    for col, w in widths.items():
        ws.column_dimensions[col].width = w


def _snapshot_headers(quantiles):
    return ["n"] + [quantile_label(q) for q in quantiles] + ["total_weight", "bins", "mean"]


def _bin_rows(hist):
    total = hist.count()
    rows = []
    for value, weight in hist.bins:
        rows.append(
            {
                "value": value,
                "weight": weight,
                "weight_pct": (weight / total) if total > 0 else None,
            }
        )
    return rows


def build_json_summary(snapshots, hist, quantiles, observations: int, skipped: int = 0):
    """Build a small, regression-friendly summary object."""
    final = {}
    if len(hist):
        for q in quantiles:
            final[quantile_label(q)] = hist.quantile(q)
    return {
        "observations": observations,
        "skipped_lines": skipped,
        "snapshots": len(snapshots),
        "max_bins": hist.max_bins,
        "alpha": hist.alpha,
        "bins": len(hist),
        "total_weight": hist.count(),
        "mean": hist.mean(),
        "variance": hist.variance(),
        "quantiles": final,
    }


def write_xlsx(
    snapshots,
    hist,
    out_path: str,
    quantiles,
    run_label: str = "A",
    summary: dict | None = None,
    status_cb=None,
):
    def _status(msg: str):
        if status_cb is not None:
            status_cb(msg)

    _status("Creating workbook")
    wb = Workbook()

    ws_dash = wb.active
    ws_dash.title = "Dashboard"

    # Snapshots sheet
    _status("Populating Snapshots")
    ws_snap = wb.create_sheet("Snapshots")
    headers = _snapshot_headers(quantiles)
    ws_snap.append(headers)
    for row in snapshots:
        ws_snap.append([row.get(h) for h in headers])
    set_basic_column_widths(ws_snap, {get_column_letter(i): 14 for i in range(1, len(headers) + 1)})
    max_snap_row = ws_snap.max_row

    # Bins sheet
    _status("Populating Bins")
    ws_bins = wb.create_sheet("Bins")
    ws_bins.append(["value", "weight", "weight_pct"])
    for r in _bin_rows(hist):
        ws_bins.append([r["value"], r["weight"], r["weight_pct"]])
    for cell in ws_bins["C"][1:]:
        cell.number_format = "0.00%"
    set_basic_column_widths(ws_bins, {"A": 16, "B": 14, "C": 12})
    max_bin_row = ws_bins.max_row

    # Dashboard: key/value summary on the left, charts on the right.
    _status("Building Dashboard")
    ws_dash.append(["EWHist run", run_label])
    ws_dash["A1"].font = Font(bold=True)
    for k, v in (summary or {}).items():
        if isinstance(v, dict):
            for kk, vv in v.items():
                ws_dash.append([f"{k}.{kk}", vv])
        else:
            ws_dash.append([k, v])
    for cell in ws_dash["A"]:
        cell.alignment = Alignment(vertical="top")
    set_basic_column_widths(ws_dash, {"A": 22, "B": 18})

    if max_snap_row >= 2:
        ch = ScatterChart()
        ch.title = "Quantile trend"
        ch.x_axis.title = "observations"
        ch.y_axis.title = "value"
        ch.style = 13
        xvalues = Reference(ws_snap, min_col=1, min_row=2, max_row=max_snap_row)
        for col_idx in range(2, 2 + len(quantiles)):
            yvalues = Reference(ws_snap, min_col=col_idx, min_row=2, max_row=max_snap_row)
            # SeriesFactory keeps this working across openpyxl versions.
            s = SeriesFactory(
                yvalues,
                xvalues=xvalues,
                title=ws_snap.cell(row=1, column=col_idx).value,
                title_from_data=False,
            )
            ch.series.append(s)
        # A handful of x-axis labels stays readable for long runs.
        n = max(1, int(snapshots[-1]["n"]))
        ch.x_axis.majorUnit = max(1, int(math.ceil(n / 6.0)))
        ch.x_axis.textRotation = 0
        ch.width = 18
        ch.height = 8
        ws_dash.add_chart(ch, "D2")

    if max_bin_row >= 2:
        bc = BarChart()
        bc.type = "col"
        bc.title = "Bin weights"
        bc.x_axis.title = "bin value"
        bc.y_axis.title = "weight"
        bc.legend = None
        data = Reference(ws_bins, min_col=2, min_row=1, max_row=max_bin_row)
        cats = Reference(ws_bins, min_col=1, min_row=2, max_row=max_bin_row)
        bc.add_data(data, titles_from_data=True)
        bc.set_categories(cats)
        bc.width = 18
        bc.height = 8
        ws_dash.add_chart(bc, "D20")

    _status(f"Saving {out_path}")
    wb.save(out_path)


def write_csv_exports(snapshots, hist, out_xlsx_path: str, quantiles):
    """Write CSV exports next to the XLSX (snapshots + final bins)."""
    out_xlsx = Path(out_xlsx_path)
    base = out_xlsx.with_suffix("")

    snap_path = base.with_name(base.name + "_snapshots.csv")
    headers = _snapshot_headers(quantiles)
    with open(snap_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=headers)
        w.writeheader()
        w.writerows(snapshots)

    bins_path = base.with_name(base.name + "_bins.csv")
    with open(bins_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=["value", "weight", "weight_pct"])
        w.writeheader()
        w.writerows(_bin_rows(hist))

    return snap_path, bins_path
