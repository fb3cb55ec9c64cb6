"""
Mask R-CNN Evaluation Harness

Evaluates a three-stage Mask R-CNN inference pipeline against COCO-style data:
- Compiles the main, classifier and mask TorchScript models
- Runs one cascaded inference per dataset image in ascending id order
- Reports per-image detection counts and latency
"""

__version__ = "1.0.0"

from .eval_pipeline import EvaluationLoop, EvaluationPipeline
from .models.pipeline import InferenceRequest, MaskRCNNPipeline, prepare_pipeline
from .datasets.coco import CocoDataset
from .detections.extractor import extract_outputs, extract_detections

__all__ = [
    'EvaluationLoop',
    'EvaluationPipeline',
    'InferenceRequest',
    'MaskRCNNPipeline',
    'prepare_pipeline',
    'CocoDataset',
    'extract_outputs',
    'extract_detections',
]
