"""
Per-image latency records and run summary
"""

import json
import os
import statistics
import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import psutil


@contextmanager
def timer(clock=time.perf_counter):
    """Context manager for timing code blocks"""
    start = clock()
    yield lambda: clock() - start


def current_rss_mb() -> float:
    """Resident set size of this process in MB"""
    return psutil.Process(os.getpid()).memory_info().rss / 1024 / 1024


@dataclass
class ImageResult:
    """Outcome of evaluating one dataset image"""
    image_id: int
    file_name: str
    num_detections: int
    num_ground_truth: int
    latency_s: float

    @property
    def latency_ms(self) -> float:
        return self.latency_s * 1000


@dataclass
class EvaluationReport:
    """All image results of one evaluation run"""
    results: List[ImageResult] = field(default_factory=list)
    peak_rss_mb: float = 0.0

    def add(self, result: ImageResult, rss_mb: Optional[float] = None):
        self.results.append(result)
        if rss_mb is not None:
            self.peak_rss_mb = max(self.peak_rss_mb, rss_mb)

    def __len__(self) -> int:
        return len(self.results)

    def summary(self) -> Dict[str, Any]:
        """
        Latency statistics over the run

        Returns:
            Dictionary with image count, detection totals and latency stats in ms
        """
        times = [r.latency_s for r in self.results]
        if not times:
            return {'images_evaluated': 0, 'total_detections': 0}

        avg_time = statistics.mean(times)
        std_time = statistics.stdev(times) if len(times) > 1 else 0

        return {
            'images_evaluated': len(times),
            'total_detections': sum(r.num_detections for r in self.results),
            'total_ground_truth': sum(r.num_ground_truth for r in self.results),
            'avg_time_ms': avg_time * 1000,
            'std_time_ms': std_time * 1000,
            'min_time_ms': min(times) * 1000,
            'max_time_ms': max(times) * 1000,
            'fps': 1.0 / avg_time if avg_time > 0 else None,
            'peak_rss_mb': self.peak_rss_mb,
        }

    def save(self, output_dir: str, filename: str = 'evaluation_results.json') -> str:
        """Write per-image results and the summary as JSON"""
        os.makedirs(output_dir, exist_ok=True)
        output_path = os.path.join(output_dir, filename)
        payload = {
            'images': [asdict(r) for r in self.results],
            'summary': self.summary(),
            'timestamp': time.strftime('%Y-%m-%d %H:%M:%S'),
        }
        with open(output_path, 'w') as f:
            json.dump(payload, f, indent=2)
        return output_path
