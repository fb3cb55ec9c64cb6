"""
Observations returned by one inference call
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class Observation:
    """Base class for a single inference output"""
    name: str


@dataclass(frozen=True)
class FeatureValueObservation(Observation):
    """Raw feature-value tensor output"""
    value: np.ndarray


@dataclass(frozen=True)
class ClassificationObservation(Observation):
    """Class label output"""
    confidence: float


@dataclass(frozen=True)
class InferenceResponse:
    """Ordered outputs of one inference call"""
    observations: Tuple[Observation, ...] = ()

    @classmethod
    def from_observations(cls, observations: Sequence[Observation]) -> 'InferenceResponse':
        return cls(tuple(observations))

    def __len__(self) -> int:
        return len(self.observations)

    def __iter__(self):
        return iter(self.observations)
