"""
Pull the detections and mask tensors out of an inference response
"""

from dataclasses import dataclass
from typing import Callable, List

import numpy as np

from ..errors import ExtractionError
from ..models.observations import FeatureValueObservation, InferenceResponse
from .decoder import Detection, decode_detections


@dataclass(frozen=True)
class DetectionOutputs:
    """Paired raw outputs of one inference call"""
    detections: np.ndarray
    mask: np.ndarray


def extract_outputs(response: InferenceResponse) -> DetectionOutputs:
    """
    Select the detections (first) and mask (last) tensors

    Raises:
        ExtractionError: If the response is empty, holds a non-tensor
            observation, or has a single output
    """
    observations = list(response)
    if not observations:
        raise ExtractionError("Inference response has no outputs")

    for observation in observations:
        if not isinstance(observation, FeatureValueObservation):
            raise ExtractionError(
                f"Output '{observation.name}' is a {type(observation).__name__}, expected a feature value tensor"
            )

    if len(observations) < 2:
        raise ExtractionError(
            f"Inference response has a single output '{observations[0].name}'; "
            f"detections and mask tensors are required"
        )

    return DetectionOutputs(detections=observations[0].value, mask=observations[-1].value)


def extract_detections(response: InferenceResponse,
                       decoder: Callable[..., List[Detection]] = decode_detections,
                       **decoder_kwargs) -> List[Detection]:
    """Extract the tensor pair and decode it into detections"""
    outputs = extract_outputs(response)
    try:
        return decoder(outputs.detections, outputs.mask, **decoder_kwargs)
    except ValueError as e:
        raise ExtractionError(f"Could not decode detections: {e}") from e
