#!/usr/bin/env python3

# This file performs multiple runs of layout generation, collecting and reporting metrics.
# Used for testing both performance of the algorithm and quality of resulting layouts.

from __future__ import annotations

import argparse
import contextlib
import datetime
import io
import json
import math
import random
import statistics
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

import networkx as nx

from connectivity import build_room_graph
from layout_builder import LayoutBuilder
from layout_config import LayoutConfig

# Default layout configuration mirrors the console setup from main.py.
DEFAULT_CONFIG_KWARGS = dict(
    width=120,
    height=80,
    corridor_width=6,
    min_room_size=10,
    adjusted_min_room_size=6,
    split_chance=0.2,
    min_iterations_before_chance_applies=5,
    collect_metrics=True,
)

DEFAULT_CONNECTED_FRACTION_THRESHOLD = 1.0

PERCENTILES = [1.0, 5.0] + [float(value) for value in range(10, 100, 10)] + [99.0]


def build_config(seed: int) -> LayoutConfig:
    return LayoutConfig(random_seed=seed, **DEFAULT_CONFIG_KWARGS)  # type: ignore


@dataclass
class GenerationRunResult:
    seed: int
    duration: float
    total_rooms: int
    total_corridors: int
    total_doors: int
    stitched_doors: int
    rooms_without_doors: int
    disconnected_rooms: int
    largest_component_fraction: float
    tree_depth: int
    cycle_count: int
    graph_diameter: int
    stage_metrics: Dict[str, Dict[str, float | int]]


def percentile(values: List[float], pct: float) -> float:
    if not values:
        return float("nan")
    if pct <= 0:
        return min(values)
    if pct >= 100:
        return max(values)
    ordered = sorted(values)
    rank = (len(ordered) - 1) * (pct / 100.0)
    lower = math.floor(rank)
    upper = math.ceil(rank)
    if lower == upper:
        return ordered[int(rank)]
    fraction = rank - lower
    return ordered[lower] + (ordered[upper] - ordered[lower]) * fraction


def fraction_at_least(values: List[float], threshold: float) -> float:
    if not values:
        return float("nan")
    return sum(1 for value in values if value >= threshold) / len(values)


def format_value(value: float, formatter: Callable[[float], str] | None = None) -> str:
    numeric = float(value)
    if math.isnan(numeric):
        return "nan"
    if formatter is None:
        return f"{numeric:.3f}"
    return formatter(numeric)


def format_seconds(value: float) -> str:
    if value >= 1.0:
        return f"{value:.3f}s"
    return f"{value * 1000:.1f}ms"


def json_safe_number(value: float | int | None) -> float | int | None:
    if value is None:
        return None
    numeric = float(value)
    if math.isnan(numeric) or math.isinf(numeric):
        return None
    if isinstance(value, int):
        return value
    return numeric


def compute_basic_stats(values: List[float]) -> Dict[str, float]:
    return {
        "mean": statistics.mean(values),
        "median": statistics.median(values),
        "min": min(values),
        "max": max(values),
        "stdev": statistics.stdev(values) if len(values) > 1 else float("nan"),
    }


def percentile_label(pct: float) -> str:
    return f"p{int(pct)}" if float(pct).is_integer() else f"p{pct:g}"


@dataclass
class MetricDefinition:
    key: str
    name: str
    values: List[float]
    value_formatter: Callable[[float], str] | None = None
    success_threshold: float | None = None
    success_label: str | None = None


def report_metric(definition: MetricDefinition) -> None:
    values = definition.values
    print(definition.name + ":")
    if not values:
        print("  (no data)")
        return

    stats = compute_basic_stats(values)
    fmt = definition.value_formatter
    print(
        f"  Count {len(values)}, mean {format_value(stats['mean'], fmt)},"
        f" median {format_value(stats['median'], fmt)}, min {format_value(stats['min'], fmt)},"
        f" max {format_value(stats['max'], fmt)}, stdev {format_value(stats['stdev'], fmt)}"
    )
    parts = [
        f"{percentile_label(pct)}={format_value(percentile(values, pct), fmt)}"
        for pct in PERCENTILES
    ]
    print("  Percentiles: " + ", ".join(parts))

    if definition.success_threshold is not None:
        success_rate = fraction_at_least(values, definition.success_threshold)
        label = definition.success_label or ">= " + format_value(definition.success_threshold, fmt)
        print(f"  Success rate {success_rate:.1%} ({label})")


def summarize_metric_for_json(definition: MetricDefinition) -> Dict[str, Any]:
    values = definition.values
    summary: Dict[str, Any] = {"count": len(values)}
    if values:
        stats = compute_basic_stats(values)
        summary.update({key: json_safe_number(value) for key, value in stats.items()})
    else:
        summary.update({"mean": None, "median": None, "min": None, "max": None, "stdev": None})

    summary["percentiles"] = {
        percentile_label(pct): json_safe_number(percentile(values, pct)) if values else None
        for pct in PERCENTILES
    }
    if definition.success_threshold is not None:
        success_rate = fraction_at_least(values, definition.success_threshold)
        summary["success_rate"] = json_safe_number(success_rate)
        summary["success_threshold"] = json_safe_number(definition.success_threshold)
    return summary


def run_single_generation(seed: int, quiet: bool = True) -> GenerationRunResult:
    """Run one layout generation with the provided seed and collect metrics."""
    builder = LayoutBuilder(build_config(seed))

    start = time.perf_counter()
    if quiet:
        with contextlib.redirect_stdout(io.StringIO()):
            layout = builder.generate()
    else:
        layout = builder.generate()
    end = time.perf_counter()

    graph = build_room_graph(layout.grid, layout.rooms, layout.doors)
    cycle_count = len(nx.cycle_basis(graph))
    graph_diameter = 0
    largest_nodes = layout.connectivity.largest_component_rooms
    if len(largest_nodes) >= 2:
        subgraph = graph.subgraph(largest_nodes).copy()
        try:
            graph_diameter = int(nx.diameter(subgraph))
        except nx.NetworkXError:
            graph_diameter = 0

    return GenerationRunResult(
        seed=seed,
        duration=end - start,
        total_rooms=len(layout.rooms),
        total_corridors=len(layout.corridors),
        total_doors=len(layout.doors),
        stitched_doors=sum(1 for door in layout.doors if door.connected_room_index is not None),
        rooms_without_doors=len(layout.rooms_without_doors),
        disconnected_rooms=len(layout.disconnected_rooms),
        largest_component_fraction=layout.connectivity.largest_component_fraction,
        tree_depth=layout.root.depth(),
        cycle_count=cycle_count,
        graph_diameter=graph_diameter,
        stage_metrics=layout.metrics.snapshot() if layout.metrics else {},
    )


def run_benchmark(num_runs: int, seed: int | None, quiet: bool = True) -> List[GenerationRunResult]:
    """Run the generator multiple times and collect run-level metrics."""
    rng = random.Random(seed)
    return [run_single_generation(rng.randint(0, 1_000_000), quiet=quiet) for _ in range(num_runs)]


def aggregate_stage_metrics(results: List[GenerationRunResult]) -> Dict[str, Dict[str, float]]:
    totals: Dict[str, Dict[str, float]] = {}
    for result in results:
        for name, metrics in result.stage_metrics.items():
            aggregate = totals.setdefault(name, {"invocations": 0.0, "total_time": 0.0})
            aggregate["invocations"] += float(metrics.get("invocations", 0))
            aggregate["total_time"] += float(metrics.get("total_time", 0.0))
    for aggregate in totals.values():
        invocations = aggregate["invocations"]
        aggregate["average_time"] = aggregate["total_time"] / invocations if invocations else 0.0
    return totals


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run the layout generator multiple times and report timing and quality statistics."
    )
    parser.add_argument(
        "-n",
        "--runs",
        type=int,
        default=20,
        help="Number of layout generations to execute (default: 20)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Optional seed for the benchmark harness RNG; keeps run seeds reproducible",
    )
    parser.add_argument(
        "--connected-fraction-threshold",
        type=float,
        default=DEFAULT_CONNECTED_FRACTION_THRESHOLD,
        help="Fraction of rooms that must share one walkable component for a run to count as a success",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Optional path of a JSON file to write the aggregated results to",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show the generator's own progress output for every run",
    )
    args = parser.parse_args()

    if args.runs <= 0:
        raise SystemExit("Number of runs must be a positive integer")
    if not (0.0 <= args.connected_fraction_threshold <= 1.0):
        raise SystemExit("Connected fraction threshold must be within [0, 1]")

    results = run_benchmark(args.runs, args.seed, quiet=not args.verbose)

    for idx, result in enumerate(results, start=1):
        print(
            f"Run {idx:02d}: {format_seconds(result.duration)} (seed {result.seed}) |"
            f" rooms {result.total_rooms}, doors {result.total_doors}"
            f" ({result.stitched_doors} stitched), depth {result.tree_depth} |"
            f" connected {result.largest_component_fraction:.1%}"
        )

    durations = [result.duration for result in results]
    worst_index = durations.index(max(durations))

    metrics_to_report = [
        MetricDefinition(
            key="generation_time",
            name="Generation time",
            values=durations,
            value_formatter=lambda value: f"{value:.4f}s",
        ),
        MetricDefinition(
            key="rooms",
            name="Rooms",
            values=[float(r.total_rooms) for r in results],
            value_formatter=lambda value: f"{value:.0f}",
        ),
        MetricDefinition(
            key="doors",
            name="Doors",
            values=[float(r.total_doors) for r in results],
            value_formatter=lambda value: f"{value:.0f}",
        ),
        MetricDefinition(
            key="rooms_without_doors",
            name="Rooms without doors",
            values=[float(r.rooms_without_doors) for r in results],
            value_formatter=lambda value: f"{value:.1f}",
        ),
        MetricDefinition(
            key="disconnected_rooms",
            name="Disconnected rooms",
            values=[float(r.disconnected_rooms) for r in results],
            value_formatter=lambda value: f"{value:.1f}",
        ),
        MetricDefinition(
            key="largest_component_fraction",
            name="Largest component coverage",
            values=[r.largest_component_fraction for r in results],
            value_formatter=lambda value: f"{value:.1%}",
            success_threshold=args.connected_fraction_threshold,
        ),
        MetricDefinition(
            key="tree_depth",
            name="Partition tree depth",
            values=[float(r.tree_depth) for r in results],
            value_formatter=lambda value: f"{value:.0f}",
        ),
        MetricDefinition(
            key="cycle_count",
            name="Room graph cycle count",
            values=[float(r.cycle_count) for r in results],
            value_formatter=lambda value: f"{value:.1f}",
        ),
        MetricDefinition(
            key="graph_diameter",
            name="Room graph diameter",
            values=[float(r.graph_diameter) for r in results],
            value_formatter=lambda value: f"{value:.0f}",
        ),
    ]

    print()
    print(f"Config runs: {args.runs}")
    print(
        f"Worst-case generation time: {format_seconds(durations[worst_index])}"
        f" (seed {results[worst_index].seed})"
    )

    aggregated: Dict[str, Any] = {}
    for metric in metrics_to_report:
        print()
        report_metric(metric)
        aggregated[metric.key] = summarize_metric_for_json(metric)

    stage_totals = aggregate_stage_metrics(results)
    if stage_totals:
        print()
        print("Stage performance summary:")
        for name, metrics in sorted(stage_totals.items(), key=lambda item: item[1]["total_time"], reverse=True):
            print(
                f"  {name}: invocations={int(metrics['invocations'])},"
                f" total_time={format_seconds(metrics['total_time'])},"
                f" avg_time={format_seconds(metrics['average_time'])}"
            )

    if args.output:
        benchmark_data = {
            "timestamp": datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0).isoformat(),
            "parameters": {"runs": args.runs, "seed": args.seed, **DEFAULT_CONFIG_KWARGS},
            "aggregated_results": aggregated,
            "worst_case_run": {
                "duration_seconds": json_safe_number(durations[worst_index]),
                "seed": results[worst_index].seed,
                "run_id": worst_index + 1,
            },
            "stage_summary": stage_totals,
            "results": [
                {
                    "run_id": idx,
                    "seed": result.seed,
                    "total_time_seconds": result.duration,
                    "rooms": result.total_rooms,
                    "doors": result.total_doors,
                    "disconnected_rooms": result.disconnected_rooms,
                    "largest_component_fraction": result.largest_component_fraction,
                    "tree_depth": result.tree_depth,
                }
                for idx, result in enumerate(results, start=1)
            ],
        }
        with open(args.output, "w", encoding="utf-8") as handle:
            json.dump(benchmark_data, handle, indent=2)
        print()
        print(f"Wrote benchmark results to {args.output}")


if __name__ == "__main__":
    main()
