"""
Unit tests for the COCO dataset reader
"""

import unittest
import tempfile
import json
import os

import sys
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from maskrcnn_eval.datasets.coco import CocoDataset
from maskrcnn_eval.errors import DatasetError, DatasetParseError


def make_coco(image_ids):
    return {
        'images': [{'id': i, 'file_name': f"{i:012d}.jpg", 'width': 640, 'height': 480}
                   for i in image_ids],
        'annotations': [
            {'id': 1, 'image_id': image_ids[0], 'category_id': 1,
             'bbox': [10, 20, 30, 40], 'area': 1200, 'iscrowd': 0},
            {'id': 2, 'image_id': image_ids[0], 'category_id': 3,
             'bbox': [0, 0, 5, 5], 'area': 25, 'iscrowd': 1},
        ],
        'categories': [{'id': 1, 'name': 'person'}, {'id': 3, 'name': 'car'}],
    }


class TestCocoDataset(unittest.TestCase):
    """Test parsing and iteration"""

    def setUp(self):
        """Set up test fixtures"""
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, 'instances_val2017.json')
        with open(self.path, 'w') as f:
            json.dump(make_coco([310, 102, 205, 101, 103, 400]), f)

    def tearDown(self):
        self.tmp.cleanup()

    def test_from_file(self):
        """Images, annotations and categories are parsed"""
        dataset = CocoDataset.from_file(self.path)

        self.assertEqual(len(dataset), 6)
        self.assertEqual(dataset.category_name(3), 'car')
        self.assertIsNone(dataset.category_name(99))
        self.assertEqual(len(dataset.annotations[310]), 2)
        self.assertTrue(dataset.annotations[310][1].iscrowd)

    def test_sorted_iteration_with_limit(self):
        """Limit caps the items and sort_by_id orders them"""
        dataset = CocoDataset.from_file(self.path)
        ids = [image.id for image, _ in dataset.make_image_iterator(limit=5, sort_by_id=True)]

        self.assertEqual(ids, [101, 102, 103, 205, 310])

    def test_unsorted_iteration_keeps_file_order(self):
        dataset = CocoDataset.from_file(self.path)
        ids = [image.id for image, _ in dataset.make_image_iterator(limit=3)]

        self.assertEqual(ids, [310, 102, 205])

    def test_iterator_is_restartable(self):
        """Each call returns a fresh iterator"""
        dataset = CocoDataset.from_file(self.path)
        first = list(dataset.make_image_iterator(limit=2, sort_by_id=True))
        second = list(dataset.make_image_iterator(limit=2, sort_by_id=True))

        self.assertEqual([i.id for i, _ in first], [i.id for i, _ in second])

    def test_annotations_paired_with_images(self):
        dataset = CocoDataset.from_file(self.path)
        items = dict((image.id, anns) for image, anns in dataset.make_image_iterator(sort_by_id=True))

        self.assertEqual(len(items[310]), 2)
        self.assertEqual(items[101], [])

    def test_zero_limit(self):
        dataset = CocoDataset.from_file(self.path)
        self.assertEqual(list(dataset.make_image_iterator(limit=0)), [])

    def test_missing_file(self):
        """Missing annotation file is a DatasetParseError"""
        with self.assertRaises(DatasetParseError):
            CocoDataset.from_file(os.path.join(self.tmp.name, 'missing.json'))

    def test_invalid_json(self):
        bad_path = os.path.join(self.tmp.name, 'bad.json')
        with open(bad_path, 'w') as f:
            f.write('{not json')

        with self.assertRaises(DatasetError):
            CocoDataset.from_file(bad_path)

    def test_missing_images_section(self):
        with self.assertRaises(DatasetParseError):
            CocoDataset.from_dict({'annotations': []})

    def test_malformed_image_entry(self):
        with self.assertRaises(DatasetParseError):
            CocoDataset.from_dict({'images': [{'file_name': 'x.jpg'}]})

    def test_dataset_info(self):
        info = CocoDataset.from_file(self.path).get_dataset_info()

        self.assertEqual(info['num_images'], 6)
        self.assertEqual(info['num_annotations'], 2)
        self.assertEqual(info['num_categories'], 2)


if __name__ == '__main__':
    unittest.main()
