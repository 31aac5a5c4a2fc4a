#!/usr/bin/env python3
"""Latency and space benchmark for PyLogKV."""

import argparse
import json
import os
import time
from pathlib import Path
from typing import Dict, List, Tuple

import numpy as np
import plotly.graph_objects as go
from tqdm import tqdm

import pylogkv

class Metrics:
    def __init__(self):
        self.write_latencies: List[float] = []
        self.read_latencies: List[float] = []
        self.iter_seconds: float = 0.0
        self.size_on_disk: List[Tuple[int, int]] = []  # (live_bytes, file_size)

    def to_dict(self) -> Dict:
        return {
            "write_latencies": {
                "p50": np.percentile(self.write_latencies, 50),
                "p95": np.percentile(self.write_latencies, 95),
                "p99": np.percentile(self.write_latencies, 99),
            },
            "read_latencies": {
                "p50": np.percentile(self.read_latencies, 50),
                "p95": np.percentile(self.read_latencies, 95),
                "p99": np.percentile(self.read_latencies, 99),
            },
            "iteration_seconds": self.iter_seconds,
            "space_amplification": self._calculate_space_amplification(),
        }

    def _calculate_space_amplification(self) -> float:
        # no compaction: every overwrite stays on disk
        if not self.size_on_disk:
            return 0.0
        live, size = self.size_on_disk[-1]
        return size / live if live else 0.0

    def plot_latencies(self, title: str, output_path: Path):
        fig = go.Figure()

        fig.add_trace(go.Box(
            y=self.write_latencies,
            name="Put Latency",
            boxpoints="outliers"
        ))

        fig.add_trace(go.Box(
            y=self.read_latencies,
            name="Get Latency",
            boxpoints="outliers"
        ))

        fig.update_layout(
            title=title,
            yaxis_title="Latency (ms)",
            boxmode="group"
        )

        fig.write_html(output_path)

class BenchmarkSuite:
    def __init__(self, db_path: Path, num_entries: int, value_size: int, rounds: int, sync: bool):
        self.db_path = db_path
        self.num_entries = num_entries
        self.value_size = value_size
        self.rounds = rounds
        self.sync = sync
        self.metrics = Metrics()
        self._keys = [f"key_{i}".encode() for i in range(num_entries)]
        # hex keeps values clear of the record separator and terminator
        self._values = [os.urandom(value_size // 2).hex().encode() for _ in range(num_entries)]

    def run(self):
        with pylogkv.open(self.db_path / "data.log", truncate=True, sync=self.sync) as db:
            # each round overwrites every key
            for r in range(self.rounds):
                for i in tqdm(range(self.num_entries), desc=f"Put round {r + 1}"):
                    start = time.perf_counter()
                    db.put(self._keys[i], self._values[i])
                    self.metrics.write_latencies.append((time.perf_counter() - start) * 1000)

            for i in tqdm(range(self.num_entries), desc="Get"):
                start = time.perf_counter()
                db.get(self._keys[i])
                self.metrics.read_latencies.append((time.perf_counter() - start) * 1000)

            start = time.perf_counter()
            for _ in db:
                pass
            self.metrics.iter_seconds = time.perf_counter() - start

            live = sum(len(k) + len(v) + 2 for k, v in zip(self._keys, self._values))
            self.metrics.size_on_disk.append((live, db.size))

def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--size", type=int, default=100000, help="Number of entries")
    parser.add_argument("--value-size", type=int, default=1024, help="Size of values in bytes")
    parser.add_argument("--rounds", type=int, default=2, help="Times every key is written")
    parser.add_argument("--sync", action="store_true", help="fsync after every put")
    parser.add_argument("--output", type=Path, default=Path("benchmark_results"), help="Output directory")
    args = parser.parse_args()

    args.output.mkdir(parents=True, exist_ok=True)

    suite = BenchmarkSuite(args.output, args.size, args.value_size, args.rounds, args.sync)
    suite.run()

    suite.metrics.plot_latencies(
        "PyLogKV Latency Distribution",
        args.output / "pylogkv_latencies.html"
    )

    with open(args.output / "metrics.json", "w") as f:
        json.dump({"pylogkv": suite.metrics.to_dict()}, f, indent=2, default=float)

if __name__ == "__main__":
    main()
