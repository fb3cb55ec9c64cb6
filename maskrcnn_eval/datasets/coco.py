"""
COCO instances annotation reader
"""

import json
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from ..errors import DatasetParseError


@dataclass(frozen=True)
class CocoImage:
    id: int
    file_name: str
    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class CocoAnnotation:
    id: int
    image_id: int
    category_id: int
    bbox: Tuple[float, float, float, float]  # x, y, w, h
    area: float = 0.0
    iscrowd: bool = False


@dataclass
class CocoDataset:
    """Images, annotations and categories of one instances_*.json file"""
    images: List[CocoImage]
    annotations: Dict[int, List[CocoAnnotation]] = field(default_factory=dict)
    categories: Dict[int, str] = field(default_factory=dict)
    path: Optional[Path] = None

    @classmethod
    def from_file(cls, annotations_path: Union[str, Path]) -> 'CocoDataset':
        """
        Parse a COCO annotation file

        Raises:
            DatasetParseError: If the file is missing or malformed
        """
        annotations_path = Path(annotations_path)
        if not annotations_path.exists():
            raise DatasetParseError(f"Annotations file not found: {annotations_path}")

        try:
            with open(annotations_path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DatasetParseError(f"Invalid annotations file {annotations_path}: {e}") from e

        dataset = cls.from_dict(data)
        dataset.path = annotations_path
        return dataset

    @classmethod
    def from_dict(cls, data: Dict) -> 'CocoDataset':
        if not isinstance(data, dict) or not isinstance(data.get('images'), list):
            raise DatasetParseError("Annotations must contain an 'images' list")

        try:
            images = [
                CocoImage(id=int(img['id']), file_name=str(img['file_name']),
                          width=int(img.get('width', 0)), height=int(img.get('height', 0)))
                for img in data['images']
            ]

            annotations = defaultdict(list)
            for ann in data.get('annotations', []):
                annotation = CocoAnnotation(
                    id=int(ann['id']),
                    image_id=int(ann['image_id']),
                    category_id=int(ann['category_id']),
                    bbox=tuple(float(v) for v in ann.get('bbox', (0, 0, 0, 0))),
                    area=float(ann.get('area', 0.0)),
                    iscrowd=bool(ann.get('iscrowd', 0)),
                )
                annotations[annotation.image_id].append(annotation)

            categories = {int(cat['id']): str(cat['name']) for cat in data.get('categories', [])}
        except (KeyError, TypeError, ValueError) as e:
            raise DatasetParseError(f"Malformed annotation entry: {e}") from e

        return cls(images=images, annotations=dict(annotations), categories=categories)

    def __len__(self) -> int:
        return len(self.images)

    def category_name(self, category_id: int) -> Optional[str]:
        return self.categories.get(category_id)

    def make_image_iterator(self, limit: Optional[int] = None,
                            sort_by_id: bool = False) -> Iterator[Tuple[CocoImage, List[CocoAnnotation]]]:
        """
        Fresh iterator over (image, annotations) pairs

        Args:
            limit: Maximum number of items, all images if None
            sort_by_id: Yield in ascending image id order
        """
        images = sorted(self.images, key=lambda img: img.id) if sort_by_id else list(self.images)
        if limit is not None:
            images = images[:max(0, limit)]

        for image in images:
            yield image, list(self.annotations.get(image.id, []))

    def get_dataset_info(self) -> Dict[str, object]:
        return {
            'path': str(self.path) if self.path else None,
            'num_images': len(self.images),
            'num_annotations': sum(len(a) for a in self.annotations.values()),
            'num_categories': len(self.categories),
        }
