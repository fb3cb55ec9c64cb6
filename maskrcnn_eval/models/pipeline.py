"""
Three-stage Mask R-CNN inference pipeline

The main model produces region proposals and feature maps from an image and
the anchors. The classifier sub-model turns proposals into detections and the
mask sub-model predicts one mask per detection. Sub-models are compiled first
and handed to the pipeline through an explicit PipelineConfig.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

import numpy as np
import torch

from ..datasets.transforms import ScaleOption, TransformMeta, fit_image, to_input_tensor
from ..errors import InferenceError
from .artifacts import PipelineArtifacts, load_anchors
from .compiler import ModelCompiler
from .observations import FeatureValueObservation, InferenceResponse


DEFAULT_INPUT_SIZE = (1024, 1024)


@dataclass(frozen=True)
class PipelineConfig:
    """Anchors and compiled sub-model locations consumed by the main model"""
    anchors_path: Path
    anchors: np.ndarray
    compiled_classifier_path: Path
    compiled_mask_path: Path


class MaskRCNNPipeline:
    """Main model bound to its classifier and mask sub-models"""

    def __init__(self, model, config: PipelineConfig, compiler: ModelCompiler):
        """
        Args:
            model: Loaded main model
            config: Populated pipeline configuration
            compiler: Loader for the compiled sub-models
        """
        self.model = model
        self.config = config
        self.device = compiler.device
        self.classifier = compiler.load(config.compiled_classifier_path)
        self.mask = compiler.load(config.compiled_mask_path)
        self.anchors = torch.from_numpy(config.anchors).to(self.device)

    def infer(self, image_tensor: torch.Tensor) -> InferenceResponse:
        """
        Run the cascade on one preprocessed image

        Args:
            image_tensor: (1, 3, H, W) float tensor

        Returns:
            InferenceResponse with 'detections' and 'mask' outputs
        """
        try:
            with torch.no_grad():
                outputs = self.model(image_tensor.to(self.device), self.anchors)
                if not isinstance(outputs, (tuple, list)) or len(outputs) != 2:
                    raise InferenceError("Main model must return (proposals, features)")
                proposals, features = outputs
                detections = self.classifier(proposals, features)
                masks = self.mask(detections, features)
        except RuntimeError as e:
            raise InferenceError(f"Inference failed: {e}") from e

        return InferenceResponse.from_observations([
            FeatureValueObservation('detections', detections.detach().cpu().numpy()),
            FeatureValueObservation('mask', masks.detach().cpu().numpy()),
        ])


class InferenceRequest:
    """Shared request: a ready pipeline plus how images are fit to its input"""

    def __init__(self, pipeline: MaskRCNNPipeline, input_size: Tuple[int, int] = DEFAULT_INPUT_SIZE,
                 scale_option: ScaleOption = ScaleOption.SCALE_FIT):
        self.pipeline = pipeline
        self.input_size = input_size
        self.scale_option = scale_option

    def preprocess(self, image: np.ndarray) -> Tuple[torch.Tensor, TransformMeta]:
        fitted, meta = fit_image(image, self.input_size, self.scale_option)
        return to_input_tensor(fitted), meta


class ImageRequestHandler:
    """Per-image handler that executes a request"""

    def __init__(self, image: np.ndarray):
        self.image = image
        self.meta = None

    def perform(self, request: InferenceRequest) -> InferenceResponse:
        if self.image is None or self.image.ndim != 3:
            raise InferenceError("Handler image must be an HWC array")
        tensor, self.meta = request.preprocess(self.image)
        return request.pipeline.infer(tensor)


def prepare_pipeline(artifacts: PipelineArtifacts,
                     compiler: ModelCompiler,
                     input_size: Tuple[int, int] = DEFAULT_INPUT_SIZE,
                     scale_option: ScaleOption = ScaleOption.SCALE_FIT) -> InferenceRequest:
    """
    Compile and load the three models into a ready inference request

    The classifier and mask models are compiled and recorded in the
    PipelineConfig before the main model is compiled or loaded.

    Args:
        artifacts: Resolved artifact locations
        compiler: Model compiler
        input_size: Model input (width, height)
        scale_option: How images are fit to the input

    Returns:
        InferenceRequest wrapping the ready pipeline

    Raises:
        SetupError: If any artifact is missing or fails to compile
    """
    anchors = load_anchors(artifacts.anchors_path)

    compiled_classifier = compiler.compile(artifacts.classifier)
    compiled_mask = compiler.compile(artifacts.mask)
    config = PipelineConfig(
        anchors_path=artifacts.anchors_path,
        anchors=anchors,
        compiled_classifier_path=compiled_classifier,
        compiled_mask_path=compiled_mask,
    )

    compiled_main = compiler.compile(artifacts.main)
    model = compiler.load(compiled_main)

    pipeline = MaskRCNNPipeline(model, config, compiler)
    print(f"Pipeline ready: {len(anchors)} anchors, input {input_size[0]}x{input_size[1]}, "
          f"{scale_option.value}")
    return InferenceRequest(pipeline, input_size, scale_option)
