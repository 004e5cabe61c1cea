import argparse
import hashlib
import json
import sys
import time
from pathlib import Path

from .config_ini import load_histogram_config
from .constants import DEFAULT_ALPHA, DEFAULT_MAX_BINS, DEFAULT_QUANTILES, DEFAULT_SNAPSHOT_EVERY
from .histogram import WeightedHistogram, estimate_alpha
from .report_writer import build_json_summary, write_csv_exports, write_xlsx
from .stats import parse_quantiles, quantile_label, track_quantiles
from .stream_reader import parse_observations

_T0 = time.time()


def status(msg: str, enabled: bool = True):
    """Emit a lightweight progress message to stderr."""
    if not enabled:
        return
    dt = time.time() - _T0
    print(f"[{dt:6.1f}s] {msg}", file=sys.stderr, flush=True)


def _first_set(*vals):
    for v in vals:
        if v is not None:
            return v
    return None


def resolve_settings(args, config_info: dict | None) -> dict:
    """Merge CLI flags over config.ini values over built-in defaults."""
    cfg = config_info or {}

    if args.alpha is not None and args.window is not None:
        raise ValueError("--alpha and --window are mutually exclusive")

    if args.alpha is not None:
        alpha = float(args.alpha)
    elif args.window is not None:
        alpha = estimate_alpha(args.window)
    elif cfg.get("alpha") is not None:
        alpha = float(cfg["alpha"])
    elif cfg.get("window") is not None:
        alpha = estimate_alpha(cfg["window"])
    else:
        alpha = DEFAULT_ALPHA

    return {
        "max_bins": int(_first_set(args.max_bins, cfg.get("max_bins"), DEFAULT_MAX_BINS)),
        "alpha": alpha,
        "quantiles": parse_quantiles(_first_set(args.quantiles, cfg.get("quantiles"), DEFAULT_QUANTILES)),
        "snapshot_every": int(_first_set(args.snapshot_every, cfg.get("snapshot_every"), DEFAULT_SNAPSHOT_EVERY)),
    }


def build_parser():
    parser = argparse.ArgumentParser(
        description="EWHist: track recency-weighted approximate quantiles over a stream of numbers and export an Excel report."
    )
    parser.add_argument("values", help="Input text/CSV file with one observation per line")
    parser.add_argument("--config", help="Optional config.ini (key=value) with histogram settings")
    parser.add_argument("--max-bins", type=int, help=f"Maximum number of bins (default: {DEFAULT_MAX_BINS})")
    parser.add_argument("--alpha", type=float, help=f"Decay factor in (0, 1) (default: {DEFAULT_ALPHA})")
    parser.add_argument(
        "--window",
        type=float,
        help="Average sample age in observations; sets alpha = 2 / (window + 1). Cannot be combined with --alpha.",
    )
    parser.add_argument(
        "--quantiles",
        help=f"Comma-separated quantiles to track (default: {DEFAULT_QUANTILES})",
    )
    parser.add_argument(
        "--snapshot-every",
        type=int,
        help=f"Record quantiles every N observations (default: {DEFAULT_SNAPSHOT_EVERY})",
    )
    parser.add_argument("--column", type=int, default=0, help="Zero-based field index holding the value (default: 0)")
    parser.add_argument("--delimiter", help="Field delimiter (default: whitespace or comma)")
    parser.add_argument("--output", help="Optional output .xlsx path (defaults to <input>.xlsx)")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument("--csv", action="store_true", help="Also write CSV exports next to the .xlsx")
    parser.add_argument("--json", action="store_true", help="Also write a small JSON summary next to the .xlsx")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    status_enabled = not bool(args.quiet)

    values_path = Path(args.values)
    if not values_path.exists():
        raise FileNotFoundError(f"Values file not found: {values_path}")

    out_xlsx = Path(args.output) if args.output else values_path.with_suffix(".xlsx")

    config_info = None
    if args.config:
        cfg_path = Path(args.config)
        if not cfg_path.exists():
            raise FileNotFoundError(f"Config file not found: {cfg_path}")
        config_info = load_histogram_config(str(cfg_path))

    settings = resolve_settings(args, config_info)
    hist = WeightedHistogram(settings["max_bins"], settings["alpha"])
    quantiles = settings["quantiles"]

    status(f"Reading observations ({values_path.name})", status_enabled)
    values, skipped = parse_observations(
        str(values_path),
        column=int(args.column),
        delimiter=args.delimiter,
        status_cb=(lambda m: status(m, status_enabled)),
        status_every_lines=250_000,
    )
    if skipped:
        status(f"Skipped {skipped} unparseable lines", status_enabled)

    status(f"Tracking {len(values):,} observations (max_bins={hist.max_bins}, alpha={hist.alpha:g})", status_enabled)
    snapshots = track_quantiles(values, hist, quantiles, settings["snapshot_every"])

    summary = build_json_summary(snapshots, hist, quantiles, observations=len(values), skipped=skipped)

    status("Building Excel workbook", status_enabled)
    write_xlsx(
        snapshots,
        hist,
        str(out_xlsx),
        quantiles,
        run_label=values_path.stem,
        summary=summary,
        status_cb=(lambda m: status(m, status_enabled)),
    )

    # Optional sidecar exports
    if args.csv:
        write_csv_exports(snapshots, hist, str(out_xlsx), quantiles)
    if args.json:
        with open(out_xlsx.with_suffix(".summary.json"), "w", encoding="utf-8") as f:
            json.dump(summary, f, indent=2)

        # Run metadata helps trace which settings produced a report.
        meta = {
            "input_values": str(values_path),
            "config": str(args.config) if args.config else None,
            "output_xlsx": str(out_xlsx),
            "max_bins": hist.max_bins,
            "alpha": hist.alpha,
            "quantiles": quantiles,
            "snapshot_every": settings["snapshot_every"],
        }
        meta_bytes = json.dumps(meta, sort_keys=True).encode("utf-8")
        meta["run_hash"] = hashlib.sha256(meta_bytes).hexdigest()
        with open(out_xlsx.with_suffix(".run.json"), "w", encoding="utf-8") as f:
            json.dump(meta, f, indent=2)

    if len(hist):
        for q in quantiles:
            print(f"{quantile_label(q)}\t{hist.quantile(q):g}")

    status(f"Done -> {out_xlsx}", status_enabled)
    print(f"Wrote {len(values)} observations to {out_xlsx}")


if __name__ == "__main__":
    main()
