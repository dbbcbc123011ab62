# hexfence/prof.py
from time import perf_counter
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Optional
import csv
import os


@dataclass
class Prof:
    """Stage timer for the CLI: with prof.section("index"): ..."""
    enabled: bool = True
    events: List[Tuple[str, float]] = field(default_factory=list)
    accum: Dict[str, float] = field(default_factory=dict)

    @contextmanager
    def section(self, name: str):
        if not self.enabled:
            yield
            return
        t0 = perf_counter()
        try:
            yield
        finally:
            dt = perf_counter() - t0
            self.events.append((name, dt))
            self.accum[name] = self.accum.get(name, 0.0) + dt

    def total(self) -> float:
        return sum(self.accum.values())

    def report_lines(self) -> List[str]:
        if not self.enabled or not self.events:
            return []
        lines = ["=== timings ==="]
        for k, v in sorted(self.accum.items(), key=lambda kv: -kv[1]):
            lines.append(f"{k:<32s} {v:8.3f} s")
        lines.append(f"{'total':<32s} {self.total():8.3f} s")
        return lines

    def report_console(self):
        for line in self.report_lines():
            print(line)

    def dump_csv(self, path: Optional[str]):
        if not self.enabled or not path:
            return
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["name", "dt_sec"])
            for name, dt in self.events:
                w.writerow([name, f"{dt:.6f}"])
