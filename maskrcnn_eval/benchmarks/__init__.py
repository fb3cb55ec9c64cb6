"""Latency reporting"""

from .latency import EvaluationReport, ImageResult, timer

__all__ = ['EvaluationReport', 'ImageResult', 'timer']
