"""Command-line entry point.

Run:
    python -m trailwalk distance --fixes walk.csv
    python -m trailwalk search --lat 37.5665 --lng 126.978
"""

from __future__ import annotations

import argparse
import json
import logging
from typing import Sequence

from .distance import path_distance, resolve_gate, resolve_rounding, step_distances
from .errors import FixFormatError, WalkwayAPIError
from .fixes_io import load_fixes
from .models import NoiseGate, RoundingPolicy, WalkwaySearchParams
from .utils import format_duration
from .walkway_api import get_default_client


def _setup_logging(verbose: bool = False) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def _cmd_distance(args: argparse.Namespace) -> int:
    points = load_fixes(args.fixes)
    steps = step_distances(points, gate=args.gate, rounding=args.rounding)
    total = path_distance(points, gate=args.gate, rounding=args.rounding)
    dropped = int(sum(1 for step in steps if step == 0.0))
    if args.json:
        payload = {
            "fixes": len(points),
            "steps": len(steps),
            "zero_steps": dropped,
            "distance_m": total,
            "gate": resolve_gate(args.gate).value,
            "rounding": resolve_rounding(args.rounding).value,
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0
    print(f"fixes={len(points)} steps={len(steps)} zero_steps={dropped}")
    print(f"distance={total:.2f} m ({total / 1000.0:.3f} km)")
    return 0


def _cmd_search(args: argparse.Namespace) -> int:
    params = WalkwaySearchParams(
        latitude=args.lat,
        longitude=args.lng,
        distance=args.radius,
        sort=args.sort,
        last_id=args.last_id,
        size=args.size,
    )
    page = get_default_client().search_walkways(params)
    if not page.walkways:
        print("No walkways found.")
        return 0
    for walkway in page.walkways:
        rating = f"{walkway.rating:.1f}" if walkway.rating is not None else "-"
        print(
            f"{walkway.walkway_id}\t{walkway.name or '?'}\t"
            f"distance={walkway.distance if walkway.distance is not None else '-'}\t"
            f"rating={rating}"
        )
    if page.has_next:
        print(f"(more results: --last-id {page.last_id})")
    return 0


def _cmd_detail(args: argparse.Namespace) -> int:
    detail = get_default_client().get_walkway_detail(args.walkway_id)
    print(f"{detail.walkway_id}: {detail.name or '?'}")
    if detail.memo:
        print(detail.memo)
    if detail.time is not None:
        print(f"time={format_duration(detail.time)}")
    print(
        f"distance={detail.distance} rating={detail.rating} "
        f"reviews={detail.review_count} likes={detail.like_count} liked={detail.liked}"
    )
    if detail.hashtags:
        print(" ".join(f"#{tag}" for tag in detail.hashtags))
    return 0


def _cmd_submit_history(args: argparse.Namespace) -> int:
    points = load_fixes(args.fixes)
    distance = path_distance(points, gate=args.gate, rounding=args.rounding)
    if resolve_rounding(args.rounding) is RoundingPolicy.METERS:
        distance = int(distance)
    result = get_default_client().create_walkway_history(
        args.walkway_id, time=args.time, distance=distance
    )
    print(
        f"history={result.walkway_history_id} distance={distance} "
        f"time={format_duration(args.time)} can_review={result.can_review}"
    )
    return 0


def _add_distance_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--fixes", required=True, help="CSV or JSON file with lat/lng fixes")
    parser.add_argument(
        "--gate",
        choices=[gate.value for gate in NoiseGate],
        default=None,
        help="Noise gate: 'or' keeps steps with either axis under the threshold, "
        "'and' needs both (default: NOISE_GATE_MODE)",
    )
    parser.add_argument(
        "--rounding",
        choices=[policy.value for policy in RoundingPolicy],
        default=None,
        help="Per-step rounding (default: DISTANCE_ROUNDING)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trailwalk", description="Walking-trail tracking and backend client"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_dist = sub.add_parser("distance", help="Walked distance of a recorded fix file")
    _add_distance_options(p_dist)
    p_dist.add_argument("--json", action="store_true", help="Print a JSON summary")
    p_dist.set_defaults(func=_cmd_distance)

    p_search = sub.add_parser("search", help="Search walkways around a location")
    p_search.add_argument("--lat", type=float, required=True)
    p_search.add_argument("--lng", type=float, required=True)
    p_search.add_argument("--radius", type=float, default=None, help="Search distance")
    p_search.add_argument("--sort", default=None, help="Backend sort key")
    p_search.add_argument("--size", type=int, default=None, help="Page size")
    p_search.add_argument(
        "--last-id", type=int, default=None, help="Continue after this walkway id"
    )
    p_search.set_defaults(func=_cmd_search)

    p_detail = sub.add_parser("detail", help="Show a walkway")
    p_detail.add_argument("walkway_id", type=int)
    p_detail.set_defaults(func=_cmd_detail)

    p_submit = sub.add_parser(
        "submit-history", help="Record a walk from a fix file as walkway history"
    )
    p_submit.add_argument("walkway_id", type=int)
    _add_distance_options(p_submit)
    p_submit.add_argument("--time", type=int, required=True, help="Walk duration in seconds")
    p_submit.set_defaults(func=_cmd_submit_history)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    try:
        return int(args.func(args))
    except (FixFormatError, FileNotFoundError) as exc:
        logging.error("Failed to load fixes: %s", exc)
        return 1
    except WalkwayAPIError as exc:
        logging.error("%s", exc)
        return 1
