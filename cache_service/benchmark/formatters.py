"""Output formatters for benchmark reports."""

import json
from pathlib import Path

from tabulate import tabulate

from cache_service.benchmark.results import BenchmarkReport


class JSONFormatter:
    """Format reports as JSON."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def format(self, report: BenchmarkReport) -> str:
        return json.dumps(report.to_dict(), indent=self.indent, default=str)

    def save(self, report: BenchmarkReport, path: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.format(report))


class TableFormatter:
    """Format reports as a plain-text table."""

    headers = ["policy", "max_size", "lr", "weights (q/r/f)", "hit_rate", "throughput/s", "evictions"]

    def __init__(self, tablefmt: str = "grid"):
        self.tablefmt = tablefmt

    def format(self, report: BenchmarkReport) -> str:
        rows = []
        for result in report.results:
            weights = ""
            if result.quality_weight is not None:
                weights = f"{result.quality_weight:g}/{result.recency_weight:g}/{result.frequency_weight:g}"
            rows.append([
                result.eviction_policy,
                result.max_size,
                "" if result.learning_rate is None else f"{result.learning_rate:g}",
                weights,
                f"{result.hit_rate:.4f}",
                f"{result.throughput:,.0f}",
                result.evictions,
            ])

        table = tabulate(rows, headers=self.headers, tablefmt=self.tablefmt)
        best = report.best_policy()
        if best is None:
            return table

        summary = f"Best policy: {best['policy']} (mean hit rate {best['rate']:.4f}"
        if best["improvement_percent"] is not None:
            summary += f", {best['improvement_percent']:+.1f}% vs runner-up"
        return f"{table}\n\n{summary})"

    def save(self, report: BenchmarkReport, path: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.format(report))


def get_formatter(output_format: str):
    if output_format == "json":
        return JSONFormatter()
    if output_format == "table":
        return TableFormatter()
    raise ValueError(f"Unsupported output format: {output_format}")
