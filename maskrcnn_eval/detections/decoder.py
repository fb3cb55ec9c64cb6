"""
Decode raw detection and mask tensors into Detection objects
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np


@dataclass
class Detection:
    """One object instance predicted by the model"""
    class_id: int
    score: float
    box: Tuple[float, float, float, float]  # y1, x1, y2, x2 normalized to the model input
    mask: Optional[np.ndarray] = None
    class_name: Optional[str] = None

    def to_dict(self):
        return {
            'class_id': self.class_id,
            'class_name': self.class_name,
            'score': self.score,
            'box': list(self.box),
        }


def _squeeze_batch(array: np.ndarray, ndim: int) -> np.ndarray:
    while array.ndim > ndim and array.shape[0] == 1:
        array = array[0]
    return array


def decode_detections(detections: np.ndarray, mask: np.ndarray,
                      min_confidence: float = 0.0,
                      class_names: Optional[Sequence[str]] = None) -> List[Detection]:
    """
    Decode the detections tensor and its masks

    Args:
        detections: (N, 6) rows of [y1, x1, y2, x2, class_id, score]
        mask: (N, h, w) class-agnostic or (N, h, w, num_classes) masks,
            the latter optionally with a leading batch axis
        min_confidence: Drop detections scoring below this
        class_names: Optional names indexed by class id

    Returns:
        Detections in tensor row order

    Raises:
        ValueError: If tensor shapes do not match
    """
    detections = _squeeze_batch(np.asarray(detections), 2)
    mask = np.asarray(mask)
    if mask.ndim == 5 and mask.shape[0] == 1:
        mask = mask[0]

    if detections.ndim != 2 or detections.shape[1] != 6:
        raise ValueError(f"Detections tensor must be (N, 6), got {detections.shape}")
    if mask.ndim not in (3, 4):
        raise ValueError(f"Mask tensor must be (N, h, w) or (N, h, w, C), got {mask.shape}")
    if mask.shape[0] < detections.shape[0]:
        raise ValueError(f"Mask tensor has {mask.shape[0]} entries for {detections.shape[0]} detections")

    results = []
    for i, row in enumerate(detections):
        y1, x1, y2, x2, class_id, score = (float(v) for v in row)
        class_id = int(class_id)
        # Zero rows pad the fixed-size output
        if class_id <= 0 or score <= 0.0 or score < min_confidence:
            continue

        if mask.ndim == 4:
            if class_id >= mask.shape[3]:
                raise ValueError(f"Class id {class_id} out of range for mask tensor {mask.shape}")
            instance_mask = mask[i, :, :, class_id]
        else:
            instance_mask = mask[i]

        class_name = None
        if class_names is not None and class_id < len(class_names):
            class_name = class_names[class_id]

        results.append(Detection(class_id=class_id, score=score, box=(y1, x1, y2, x2),
                                 mask=instance_mask, class_name=class_name))

    return results
