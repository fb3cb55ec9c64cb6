"""
Model artifact references and products directory layout
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import numpy as np

from ..errors import CompilationError, SetupError


MAIN_MODEL_FILENAME = 'MaskRCNN.pt'
CLASSIFIER_MODEL_FILENAME = 'Classifier.pt'
MASK_MODEL_FILENAME = 'Mask.pt'
ANCHORS_FILENAME = 'anchors.bin'


@dataclass
class ModelArtifact:
    """On-disk model artifact and its compiled location, once compiled"""
    name: str
    path: Path
    compiled_path: Optional[Path] = field(default=None)

    @property
    def is_compiled(self) -> bool:
        return self.compiled_path is not None

    def mark_compiled(self, compiled_path: Path):
        """Record the compiled location. An artifact compiles once per run."""
        if self.is_compiled:
            raise CompilationError(f"{self.name} model already compiled at {self.compiled_path}")
        self.compiled_path = Path(compiled_path)


@dataclass
class PipelineArtifacts:
    """The three model artifacts and the anchors blob of one products directory"""
    main: ModelArtifact
    classifier: ModelArtifact
    mask: ModelArtifact
    anchors_path: Path

    def missing(self):
        """Paths that do not exist on disk"""
        paths = [self.main.path, self.classifier.path, self.mask.path, self.anchors_path]
        return [p for p in paths if not p.exists()]


def default_products_dir(model_name: str, working_dir: Union[str, Path, None] = None) -> Path:
    working_dir = Path(working_dir or os.getcwd())
    return working_dir / '.maskrcnn' / 'models' / model_name / 'products'


def resolve_artifacts(model_name: str,
                      products_dir: Union[str, Path, None] = None,
                      working_dir: Union[str, Path, None] = None) -> PipelineArtifacts:
    """
    Compute artifact locations for a model

    Args:
        model_name: Name of the model under .maskrcnn/models
        products_dir: Explicit products directory, relative to working_dir
        working_dir: Base directory, defaults to the current directory

    Returns:
        PipelineArtifacts, nothing is checked on disk
    """
    working_dir = Path(working_dir or os.getcwd())
    if products_dir is None:
        products = default_products_dir(model_name, working_dir)
    else:
        products = Path(os.path.normpath(working_dir / Path(products_dir)))

    return PipelineArtifacts(
        main=ModelArtifact('MaskRCNN', products / MAIN_MODEL_FILENAME),
        classifier=ModelArtifact('Classifier', products / CLASSIFIER_MODEL_FILENAME),
        mask=ModelArtifact('Mask', products / MASK_MODEL_FILENAME),
        anchors_path=products / ANCHORS_FILENAME,
    )


def load_anchors(path: Union[str, Path]) -> np.ndarray:
    """Read the anchors blob: raw float32 rows of (y1, x1, y2, x2)"""
    path = Path(path)
    if not path.exists():
        raise SetupError(f"Anchors file not found: {path}")

    anchors = np.fromfile(str(path), dtype='<f4')
    if anchors.size == 0 or anchors.size % 4 != 0:
        raise SetupError(f"Anchors file {path} holds {anchors.size} floats, expected a multiple of 4")

    return anchors.reshape(-1, 4).astype(np.float32)
