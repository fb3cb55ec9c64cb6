"""
Evaluation run configuration
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .errors import SetupError


@dataclass
class ModelConfig:
    """Model settings read from a Mask R-CNN config JSON"""
    image_max_dim: int = 1024
    num_classes: int = 81
    detection_min_confidence: float = 0.7
    class_names: Optional[List[str]] = None

    @property
    def input_size(self):
        return (self.image_max_dim, self.image_max_dim)

    @classmethod
    def from_file(cls, path) -> 'ModelConfig':
        path = Path(path)
        if not path.exists():
            raise SetupError(f"Config file not found: {path}")
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise SetupError(f"Invalid config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise SetupError(f"Config file {path} must hold a JSON object")

        defaults = cls()
        try:
            return cls(
                image_max_dim=int(data.get('IMAGE_MAX_DIM', defaults.image_max_dim)),
                num_classes=int(data.get('NUM_CLASSES', defaults.num_classes)),
                detection_min_confidence=float(data.get('DETECTION_MIN_CONFIDENCE',
                                                        defaults.detection_min_confidence)),
                class_names=data.get('CLASS_NAMES'),
            )
        except (TypeError, ValueError) as e:
            raise SetupError(f"Invalid value in config file {path}: {e}") from e


@dataclass
class EvaluateConfig:
    """Arguments of the evaluate command and the paths derived from them"""
    model_name: str
    dataset_name: str
    config_path: Optional[str] = None
    weights_path: Optional[str] = None  # used by conversion, not evaluation
    products_dir: Optional[str] = None
    year: str = '2017'
    type: str = 'val'
    limit: int = 5
    output_dir: Optional[str] = None
    device: Optional[str] = None
    compare: bool = False
    working_dir: Path = field(default_factory=lambda: Path(os.getcwd()))

    @classmethod
    def from_args(cls, args) -> 'EvaluateConfig':
        return cls(
            model_name=args.model_name,
            dataset_name=args.dataset_name,
            config_path=args.config,
            weights_path=args.weights,
            products_dir=args.products_dir,
            year=args.year or '2017',
            type=args.type or 'val',
            limit=args.limit,
            output_dir=args.output_dir,
            device=args.device,
            compare=args.compare,
        )

    @property
    def models_dir(self) -> Path:
        return self.working_dir / '.maskrcnn' / 'models' / self.model_name

    @property
    def data_dir(self) -> Path:
        return self.working_dir / '.maskrcnn' / 'data' / self.dataset_name

    @property
    def annotations_path(self) -> Path:
        return self.data_dir / f"instances_{self.type}{self.year}.json"

    @property
    def images_dir(self) -> Path:
        return self.data_dir / f"{self.type}{self.year}"

    def load_model_config(self) -> ModelConfig:
        if self.config_path is None:
            return ModelConfig()
        return ModelConfig.from_file(self.working_dir / self.config_path)
