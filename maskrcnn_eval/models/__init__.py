"""Model artifacts, compilation and the cascaded inference pipeline"""

from .artifacts import ModelArtifact, PipelineArtifacts, resolve_artifacts, load_anchors
from .compiler import ModelCompiler
from .observations import FeatureValueObservation, ClassificationObservation, InferenceResponse
from .pipeline import (
    PipelineConfig,
    MaskRCNNPipeline,
    InferenceRequest,
    ImageRequestHandler,
    prepare_pipeline
)

__all__ = [
    'ModelArtifact',
    'PipelineArtifacts',
    'resolve_artifacts',
    'load_anchors',
    'ModelCompiler',
    'FeatureValueObservation',
    'ClassificationObservation',
    'InferenceResponse',
    'PipelineConfig',
    'MaskRCNNPipeline',
    'InferenceRequest',
    'ImageRequestHandler',
    'prepare_pipeline'
]
