"""COCO dataset reader and image transforms"""

from .coco import CocoDataset, CocoImage, CocoAnnotation
from .transforms import ScaleOption, TransformMeta, fit_image, letterbox, load_image, to_input_tensor

__all__ = [
    'CocoDataset',
    'CocoImage',
    'CocoAnnotation',
    'ScaleOption',
    'TransformMeta',
    'fit_image',
    'letterbox',
    'load_image',
    'to_input_tensor'
]
