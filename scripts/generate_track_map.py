"""Generate a track map JSON file from calibration lap CSVs.

Usage:
  python scripts/generate_track_map.py \\
      --input calibration/algarve \\
      --output trackmaps/algarve_gp.json \\
      --left lap5.csv \\
      --right lap7.csv

  # list the CSV files of a calibration folder
  python scripts/generate_track_map.py --input calibration/algarve --list

When --output is omitted the map is written to
``$TRACKMAP_OUTPUT_DIR/<track_id>.json`` (default directory: ``trackmaps``).
A ``.env`` file in the working directory is honoured.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from trackmap.calibration.loader import CalibrationLoader  # noqa: E402
from trackmap.config import GeneratorConfig  # noqa: E402
from trackmap.errors import DataError  # noqa: E402
from trackmap.export.exporter import export_track_map, generate_summary  # noqa: E402
from trackmap.pipeline import GenerationResult, TrackMapGenerator  # noqa: E402

DEFAULT_OUTPUT_DIR = "trackmaps"

_STAGE_LABELS = {
    "resample": "[2/9] Resampling laps onto a shared grid...",
    "spline": "[3/9] Extracting spline-based centerline...",
    "validate": "[4/9] Validating centerline...",
    "smooth": "[5/9] Smoothing centerline...",
    "geometry": "[6/9] Computing tangents and normals...",
    "widths": "[7/9] Calculating track widths...",
    "edges": "[8/9] Generating edge polylines...",
}


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Generate a track map from calibration laps")
    ap.add_argument("-i", "--input", required=True, help="Directory holding calibration CSVs")
    ap.add_argument("-o", "--output", help="Output JSON path (default: $TRACKMAP_OUTPUT_DIR)")
    ap.add_argument("--left", nargs="+", help="Left-limit lap CSV(s)")
    ap.add_argument("--center", nargs="+", help="Center / racing-line lap CSV(s)")
    ap.add_argument("--right", nargs="+", help="Right-limit lap CSV(s)")
    ap.add_argument("--samples", type=int, help="Grid sample count (overrides --spacing)")
    ap.add_argument("--spacing", type=float, default=0.5, help="Target sample spacing in metres")
    ap.add_argument("--smooth", type=int, default=9, help="Centerline smoothing window")
    ap.add_argument("--point-target", type=int, default=40, help="Spline anchors per edge")
    ap.add_argument("--tension", type=float, default=0.5, help="Bézier tension")
    ap.add_argument(
        "--track-width",
        type=float,
        default=12.0,
        help="Offset for the synthesised edge in --single-side mode (metres)",
    )
    ap.add_argument("--single-side", action="store_true", help="Allow a single edge lap")
    ap.add_argument("--list", action="store_true", help="List CSV files in --input and exit")
    ap.add_argument("--preview", action="store_true", help="Write a preview JSON next to output")
    ap.add_argument(
        "--spline-dump", action="store_true", help="Write the inside spline as CSV next to output"
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Log pipeline details")
    return ap


def _list_files(directory: str) -> int:
    print(f"\nCalibration files in {Path(directory).resolve()}:\n")
    try:
        files = CalibrationLoader.list_files(directory)
    except FileNotFoundError as exc:
        print(f"Error listing files: {exc}", file=sys.stderr)
        return 1
    if not files:
        print("  (no CSV files found)")
    for name in files:
        print(f"  {name}")
    return 0


def _resolve_output(output: str | None, track_id: str) -> Path:
    if output:
        return Path(output)
    return Path(os.environ.get("TRACKMAP_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)) / f"{track_id}.json"


def _write_preview(result: GenerationResult, output: Path) -> Path:
    path = output.with_name(output.name + ".preview.json")
    track_map = result.track_map
    blob = {
        "trackId": track_map.track_id,
        "trackName": track_map.track_name,
        "centerline": track_map.centerline,
        "insideSpline": result.spline.inside,
        "metadata": track_map.metadata,
    }
    path.write_text(json.dumps(blob, indent=2), encoding="utf-8")
    return path


def _write_spline_dump(result: GenerationResult, output: Path) -> Path:
    path = output.with_name(output.name + ".inside.csv")
    lines = ["index,x,y"]
    lines += [f"{i},{x:.4f},{y:.4f}" for i, (x, y) in enumerate(result.spline.inside)]
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if args.list:
        return _list_files(args.input)

    if not args.left and not args.right:
        print("Error: at least one of --left / --right is required", file=sys.stderr)
        return 1

    try:
        config = GeneratorConfig(
            sample_count=args.samples,
            spacing_m=args.spacing,
            smoothing_window=args.smooth,
            point_target=args.point_target,
            tension=args.tension,
            allow_single_side=args.single_side,
            default_track_width_m=args.track_width,
        )

        print("[1/9] Loading calibration laps...")
        calibration = CalibrationLoader().load(
            args.input,
            {"left": args.left, "center": args.center, "right": args.right},
            require_both_sides=not args.single_side,
        )
        for lap in calibration.laps:
            print(f"  {lap.role:<6} {lap.filename}: {len(lap.samples)} samples")

        result = TrackMapGenerator(config).generate(
            calibration.laps,
            track_id=calibration.track_id,
            track_name=calibration.track_name,
            on_stage=lambda stage: print(_STAGE_LABELS[stage]),
        )
    except (DataError, ValueError, OSError) as exc:
        print(f"\nError: {exc}", file=sys.stderr)
        return 1

    track_map = result.track_map
    if not result.centerline_validation.valid:
        for message in result.centerline_validation.warnings:
            print(f"  [!] {message}")
    print(f"  Closure: {result.centerline_validation.closure_distance:.2f}m")
    if result.outliers.outliers:
        print(f"  [!] {len(result.outliers.outliers)} width outliers (showing first 5):")
        for outlier in result.outliers.outliers[:5]:
            print(f"    - Point {outlier.index}: {outlier.reason}")
    guardrail = result.guardrail
    if guardrail.left_clamped or guardrail.right_clamped:
        print(
            f"  Guardrails: adjusted {guardrail.left_clamped} left / "
            f"{guardrail.right_clamped} right samples"
        )
    for message in result.edge_validation.warnings:
        print(f"  [!] {message}")

    output = _resolve_output(args.output, track_map.track_id)
    print(f"[9/9] Exporting track map → {output}")
    try:
        export_track_map(track_map, output)
        if args.preview:
            print(f"  Preview written to {_write_preview(result, output)}")
        if args.spline_dump:
            print(f"  Inside spline dumped to {_write_spline_dump(result, output)}")
    except OSError as exc:
        print(f"\nError: {exc}", file=sys.stderr)
        return 1

    print()
    print(generate_summary(track_map))
    print(f"\n[OK] Done: {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
