"""
Image transforms that fit dataset images to the model input geometry
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Tuple, Union

import cv2
import numpy as np
import torch

from ..errors import DatasetError


class ScaleOption(Enum):
    """How an image is fit to the model input"""
    SCALE_FIT = 'scale_fit'      # keep aspect ratio, pad the remainder
    SCALE_FILL = 'scale_fill'    # stretch to the input size
    CENTER_CROP = 'center_crop'  # keep aspect ratio, crop the overflow


@dataclass(frozen=True)
class TransformMeta:
    """Mapping from model input coordinates back to the source image"""
    scale_x: float
    scale_y: float
    pad_x: int
    pad_y: int
    original_size: Tuple[int, int]  # (height, width)


def letterbox(image: np.ndarray, size: Tuple[int, int],
              color: Tuple[int, int, int] = (0, 0, 0)) -> Tuple[np.ndarray, TransformMeta]:
    """
    Resize keeping aspect ratio and pad to size

    Args:
        image: HWC uint8 image
        size: Target (width, height)
        color: Padding color

    Returns:
        Padded image and its TransformMeta
    """
    h, w = image.shape[:2]
    new_w, new_h = size
    r = min(new_w / w, new_h / h)
    nw, nh = max(1, int(round(w * r))), max(1, int(round(h * r)))

    resized = cv2.resize(image, (nw, nh), interpolation=cv2.INTER_LINEAR)
    canvas = np.full((new_h, new_w, 3), color, dtype=np.uint8)
    dw, dh = (new_w - nw) // 2, (new_h - nh) // 2
    canvas[dh:dh + nh, dw:dw + nw] = resized

    return canvas, TransformMeta(r, r, dw, dh, (h, w))


def scale_fill(image: np.ndarray, size: Tuple[int, int]) -> Tuple[np.ndarray, TransformMeta]:
    """Stretch to size, ignoring aspect ratio"""
    h, w = image.shape[:2]
    new_w, new_h = size
    resized = cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_LINEAR)
    return resized, TransformMeta(new_w / w, new_h / h, 0, 0, (h, w))


def center_crop(image: np.ndarray, size: Tuple[int, int]) -> Tuple[np.ndarray, TransformMeta]:
    """Resize so the shorter side fills size, then crop the center"""
    h, w = image.shape[:2]
    new_w, new_h = size
    r = max(new_w / w, new_h / h)
    nw, nh = max(new_w, int(round(w * r))), max(new_h, int(round(h * r)))

    resized = cv2.resize(image, (nw, nh), interpolation=cv2.INTER_LINEAR)
    x0, y0 = (nw - new_w) // 2, (nh - new_h) // 2
    cropped = resized[y0:y0 + new_h, x0:x0 + new_w]

    # Negative padding: the crop offset in resized coordinates
    return cropped, TransformMeta(r, r, -x0, -y0, (h, w))


_TRANSFORMS = {
    ScaleOption.SCALE_FIT: letterbox,
    ScaleOption.SCALE_FILL: scale_fill,
    ScaleOption.CENTER_CROP: center_crop,
}


def fit_image(image: np.ndarray, size: Tuple[int, int],
              option: ScaleOption = ScaleOption.SCALE_FIT) -> Tuple[np.ndarray, TransformMeta]:
    """Apply the transform selected by option"""
    return _TRANSFORMS[option](image, size)


def to_input_tensor(image: np.ndarray) -> torch.Tensor:
    """Convert a BGR uint8 HWC image to an RGB float (1, 3, H, W) tensor in [0, 1]"""
    rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    chw = np.ascontiguousarray(rgb.transpose(2, 0, 1), dtype=np.float32) / 255.0
    return torch.from_numpy(chw).unsqueeze(0)


def load_image(path: Union[str, Path]) -> np.ndarray:
    """Decode an image file as BGR uint8"""
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise DatasetError(f"Could not read image: {path}")
    return image
