#!/usr/bin/env python3
"""
Ripple Propagation Benchmarks

Measures how fast values travel through subscription trees on the asyncio
event loop and prints the results with rich.

Usage:
    python scripts/benchmark.py                   # Run all benchmarks
    python scripts/benchmark.py --rounds 500      # More emits per benchmark
    python scripts/benchmark.py --config          # Show benchmark configuration

Configuration:
    Adjust the constants at the top of the file to change benchmark parameters.
"""

import argparse
import asyncio
import sys
import time
from dataclasses import dataclass
from typing import Callable, List

# Add the project root to the Python path
sys.path.insert(0, ".")

import numpy as np
from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table, box

from ripple import Observable

# Configuration
ROUNDS = 200
CHAIN_DEPTH = 100
FANOUT_WIDTH = 1000
AGGREGATE_SOURCES = 100


@dataclass
class BenchmarkResult:
    """Latencies of one benchmark, in seconds per emit."""

    name: str
    workload: str
    latencies: np.ndarray

    @property
    def emits_per_second(self) -> float:
        return 1.0 / float(self.latencies.mean())

    def percentile_us(self, q: float) -> float:
        return float(np.percentile(self.latencies, q)) * 1e6


async def _time_rounds(build: Callable[[], tuple], rounds: int) -> np.ndarray:
    """
    Emit ``rounds`` values and time each one until it has fully propagated.

    ``build`` returns (emit, arm) where arm() gives a fresh future that is
    resolved once the emitted value reaches the end of the tree.
    """
    emit, arm = build()
    latencies = []
    for value in range(rounds):
        finished = arm()
        start = time.perf_counter()
        emit(value)
        await finished
        latencies.append(time.perf_counter() - start)
    return np.array(latencies)


def _waiter(expected: int):
    """Future factory resolving after ``expected`` calls of the returned hit()."""
    loop = asyncio.get_running_loop()
    state = {"future": None, "remaining": 0}

    def arm():
        state["future"] = loop.create_future()
        state["remaining"] = expected
        return state["future"]

    def hit(_value=None):
        state["remaining"] -= 1
        if state["remaining"] == 0:
            state["future"].set_result(None)

    return arm, hit


def build_chain(depth: int):
    def build():
        root = Observable()
        node = root
        for _ in range(depth):
            node = node.subscribe(lambda v: v + 1)
        arm, hit = _waiter(1)
        node.subscribe(hit)
        return root.emit, arm

    return build


def build_fanout(width: int):
    def build():
        root = Observable()
        arm, hit = _waiter(width)
        for _ in range(width):
            root.subscribe(hit)
        return root.emit, arm

    return build


def build_aggregate(sources: int):
    def build():
        root = Observable()
        branches = [root.subscribe(lambda v, i=i: v + i) for i in range(sources)]
        arm, hit = _waiter(1)
        Observable.all(branches).subscribe(hit)
        return root.emit, arm

    return build


class RippleBenchmark:
    """Rich-formatted display for ripple propagation benchmarks."""

    def __init__(self, rounds: int):
        self.console = Console()
        self.rounds = rounds
        self.results: List[BenchmarkResult] = []

    def run(self):
        start_time = time.time()
        self._display_header()

        suite = [
            ("Chain Propagation", f"{CHAIN_DEPTH}-link chain", build_chain(CHAIN_DEPTH)),
            ("Fan-out", f"{FANOUT_WIDTH} subscribers", build_fanout(FANOUT_WIDTH)),
            ("Observable.all", f"{AGGREGATE_SOURCES} sources", build_aggregate(AGGREGATE_SOURCES)),
        ]
        for name, workload, build in suite:
            self.console.print(f"[yellow]Running {name}...[/yellow]")
            latencies = asyncio.run(_time_rounds(build, self.rounds))
            result = BenchmarkResult(name, workload, latencies)
            self.results.append(result)
            self.console.print(
                f"[green]✓[/green] {name}: {result.emits_per_second:,.0f} emits/sec ({workload})"
            )

        self._display_results()
        self.console.print()
        self.console.print(f"[dim]Benchmark completed in {time.time() - start_time:.2f} seconds[/dim]")

    def _display_header(self):
        header = Panel(
            Align.center("Ripple Propagation Benchmark Suite"),
            title="Ripple Benchmarks",
            border_style="blue",
        )
        self.console.print(header)
        self.console.print()

    def _display_results(self):
        table = Table(title="Latency per emit", box=box.DOUBLE, header_style="bold cyan")
        table.add_column("Benchmark", style="cyan", no_wrap=True)
        table.add_column("Workload", style="magenta")
        table.add_column("Emits/sec", style="green", justify="right")
        table.add_column("p50", style="green", justify="right")
        table.add_column("p95", style="yellow", justify="right")
        table.add_column("p99", style="red", justify="right")

        for result in self.results:
            table.add_row(
                result.name,
                result.workload,
                f"{result.emits_per_second:,.0f}",
                f"{result.percentile_us(50):.1f}μs",
                f"{result.percentile_us(95):.1f}μs",
                f"{result.percentile_us(99):.1f}μs",
            )

        self.console.print()
        self.console.print(table)


def show_config(console: Console):
    table = Table(title="Benchmark Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Rounds", str(ROUNDS))
    table.add_row("Chain depth", str(CHAIN_DEPTH))
    table.add_row("Fan-out width", str(FANOUT_WIDTH))
    table.add_row("Aggregate sources", str(AGGREGATE_SOURCES))
    console.print(table)


def main():
    parser = argparse.ArgumentParser(description="Ripple propagation benchmarks")
    parser.add_argument("--rounds", type=int, default=ROUNDS, help="emits per benchmark")
    parser.add_argument("--config", action="store_true", help="show configuration and exit")
    args = parser.parse_args()

    if args.config:
        show_config(Console())
        return

    RippleBenchmark(args.rounds).run()


if __name__ == "__main__":
    main()
