"""
Unit tests for evaluation configuration
"""

import unittest
import tempfile
import json
import os
from argparse import Namespace
from pathlib import Path

import sys
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from maskrcnn_eval.config import EvaluateConfig, ModelConfig
from maskrcnn_eval.errors import SetupError
from maskrcnn_eval.eval_pipeline import build_parser


class TestEvaluateConfig(unittest.TestCase):
    """Test derived paths and argument parsing"""

    def test_derived_paths(self):
        config = EvaluateConfig('coco', 'coco_eval', working_dir=Path('/work'))

        self.assertEqual(config.models_dir, Path('/work/.maskrcnn/models/coco'))
        self.assertEqual(config.annotations_path, Path('/work/.maskrcnn/data/coco_eval/instances_val2017.json'))
        self.assertEqual(config.images_dir, Path('/work/.maskrcnn/data/coco_eval/val2017'))

    def test_from_args_defaults(self):
        args = build_parser().parse_args(['evaluate', 'coco', 'coco_eval'])
        config = EvaluateConfig.from_args(args)

        self.assertEqual(config.year, '2017')
        self.assertEqual(config.type, 'val')
        self.assertEqual(config.limit, 5)
        self.assertFalse(config.compare)
        self.assertIsNone(config.products_dir)

    def test_from_args_options(self):
        args = build_parser().parse_args([
            'evaluate', 'coco', 'coco_eval', '--year', '2014', '--type', 'minival',
            '--products_dir', 'out', '-c', '--limit', '20', '--weights', 'w.h5',
        ])
        config = EvaluateConfig.from_args(args)

        self.assertEqual(config.images_dir.name, 'minival2014')
        self.assertEqual(config.products_dir, 'out')
        self.assertTrue(config.compare)
        self.assertEqual(config.limit, 20)
        self.assertEqual(config.weights_path, 'w.h5')

    def test_from_namespace(self):
        args = Namespace(model_name='m', dataset_name='d', config=None, weights=None,
                         products_dir=None, year=None, type=None, limit=3,
                         output_dir=None, device='cpu', compare=False)
        config = EvaluateConfig.from_args(args)

        self.assertEqual(config.year, '2017')
        self.assertEqual(config.device, 'cpu')


class TestModelConfig(unittest.TestCase):
    """Test reading the model config JSON"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, 'config.json')

    def tearDown(self):
        self.tmp.cleanup()

    def test_defaults_without_file(self):
        config = EvaluateConfig('coco', 'coco_eval').load_model_config()
        self.assertEqual(config.input_size, (1024, 1024))

    def test_reads_keys(self):
        with open(self.path, 'w') as f:
            json.dump({'IMAGE_MAX_DIM': 512, 'NUM_CLASSES': 3,
                       'DETECTION_MIN_CONFIDENCE': 0.5, 'CLASS_NAMES': ['BG', 'a', 'b']}, f)

        config = EvaluateConfig('coco', 'coco_eval', config_path=self.path).load_model_config()

        self.assertEqual(config.input_size, (512, 512))
        self.assertEqual(config.num_classes, 3)
        self.assertEqual(config.detection_min_confidence, 0.5)
        self.assertEqual(config.class_names, ['BG', 'a', 'b'])

    def test_missing_file(self):
        with self.assertRaises(SetupError):
            ModelConfig.from_file(self.path)

    def test_invalid_json(self):
        with open(self.path, 'w') as f:
            f.write('[1, 2')
        with self.assertRaises(SetupError):
            ModelConfig.from_file(self.path)

    def test_invalid_value(self):
        with open(self.path, 'w') as f:
            json.dump({'IMAGE_MAX_DIM': 'large'}, f)
        with self.assertRaises(SetupError):
            ModelConfig.from_file(self.path)


if __name__ == '__main__':
    unittest.main()
