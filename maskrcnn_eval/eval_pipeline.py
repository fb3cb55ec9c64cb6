"""
Main evaluation pipeline orchestrator for the Mask R-CNN inference pipeline
"""

import argparse
import time
from pathlib import Path
from typing import Callable, List, Optional

from .benchmarks.latency import EvaluationReport, ImageResult, current_rss_mb, timer
from .config import EvaluateConfig, ModelConfig
from .datasets.coco import CocoDataset
from .datasets.transforms import load_image
from .detections.decoder import Detection
from .detections.extractor import extract_detections
from .environment import check_preconditions
from .errors import EvaluationError, ExtractionError, PreconditionError
from .models.artifacts import resolve_artifacts
from .models.compiler import ModelCompiler
from .models.pipeline import ImageRequestHandler, InferenceRequest, prepare_pipeline


class EvaluationLoop:
    """
    Runs one inference per dataset image in ascending image id order
    """

    def __init__(self, request: InferenceRequest, dataset: CocoDataset, images_dir,
                 limit: int = 5, min_confidence: float = 0.0,
                 class_names: Optional[List[str]] = None,
                 clock: Callable[[], float] = time.perf_counter):
        """
        Args:
            request: Ready inference request shared by every image
            dataset: Parsed dataset
            images_dir: Directory holding the dataset images
            limit: Maximum number of images to evaluate
            min_confidence: Decoder confidence threshold
            class_names: Optional class names for decoded detections
            clock: Monotonic clock used for latency
        """
        self.request = request
        self.dataset = dataset
        self.images_dir = Path(images_dir)
        self.limit = limit
        self.min_confidence = min_confidence
        self.class_names = class_names
        self.clock = clock

    def run(self) -> EvaluationReport:
        """
        Evaluate up to `limit` images

        Raises:
            ExtractionError: At the first image whose response is malformed
        """
        report = EvaluationReport()
        total = min(self.limit, len(self.dataset))
        iterator = self.dataset.make_image_iterator(limit=self.limit, sort_by_id=True)

        for index, (image_info, annotations) in enumerate(iterator, start=1):
            image_path = self.images_dir / image_info.file_name
            image = load_image(image_path)
            handler = ImageRequestHandler(image)

            with timer(self.clock) as elapsed:
                response = handler.perform(self.request)
                latency = elapsed()

            try:
                detections = self._decode(response)
            except ExtractionError as e:
                print(f"Evaluation aborted at image {image_info.id} ({image_info.file_name}): {e}")
                raise

            result = ImageResult(
                image_id=image_info.id,
                file_name=image_info.file_name,
                num_detections=len(detections),
                num_ground_truth=len(annotations),
                latency_s=latency,
            )
            report.add(result, current_rss_mb())
            print(f"[{index}/{total}] image {image_info.id}: "
                  f"{result.num_detections} detections, {result.latency_ms:.1f} ms")

        return report

    def _decode(self, response) -> List[Detection]:
        return extract_detections(response, min_confidence=self.min_confidence,
                                  class_names=self.class_names)


class EvaluationPipeline:
    """
    Sets up the model pipeline and dataset, then runs the evaluation loop
    """

    def __init__(self, config: EvaluateConfig):
        self.config = config
        self.model_config = None
        self.request = None
        self.dataset = None
        self._owned_compiler = None

    def setup_pipeline(self, compiler: Optional[ModelCompiler] = None) -> InferenceRequest:
        """Resolve, compile and load the three models"""
        artifacts = resolve_artifacts(self.config.model_name, self.config.products_dir,
                                      self.config.working_dir)
        self.model_config = self.config.load_model_config()
        if compiler is None:
            compiler = self._owned_compiler = ModelCompiler(device=self.config.device)

        self.request = prepare_pipeline(artifacts, compiler, self.model_config.input_size)
        return self.request

    def cleanup(self):
        """Remove compiled models written by a compiler this pipeline created"""
        if self._owned_compiler is not None:
            self._owned_compiler.cleanup()
            self._owned_compiler = None

    def setup_dataset(self) -> CocoDataset:
        self.dataset = CocoDataset.from_file(self.config.annotations_path)
        print(f"Dataset setup complete: {self.dataset.get_dataset_info()}")
        return self.dataset

    def evaluate(self, save_results: bool = True) -> EvaluationReport:
        """
        Run the evaluation loop over the dataset

        Args:
            save_results: Whether to save results when an output dir is configured

        Returns:
            EvaluationReport with one result per evaluated image
        """
        if self.request is None:
            raise ValueError("Pipeline not setup. Call setup_pipeline() first.")
        if self.dataset is None:
            raise ValueError("Dataset not setup. Call setup_dataset() first.")

        model_config = self.model_config or ModelConfig()
        loop = EvaluationLoop(
            self.request, self.dataset, self.config.images_dir,
            limit=self.config.limit,
            min_confidence=model_config.detection_min_confidence,
            class_names=model_config.class_names,
        )
        report = loop.run()
        self._print_summary(report)

        if save_results and self.config.output_dir:
            try:
                output_path = report.save(self.config.output_dir)
            except OSError as e:
                raise EvaluationError(f"Could not save results to {self.config.output_dir}: {e}") from e
            print(f"Evaluation results saved to {output_path}")

        return report

    @staticmethod
    def _print_summary(report: EvaluationReport):
        summary = report.summary()
        print("\nSUMMARY:")
        print(f"Images evaluated: {summary['images_evaluated']}")
        print(f"Total detections: {summary['total_detections']}")
        if summary['images_evaluated']:
            print(f"Latency: {summary['avg_time_ms']:.1f} ± {summary['std_time_ms']:.1f} ms "
                  f"(min {summary['min_time_ms']:.1f}, max {summary['max_time_ms']:.1f})")
            if summary['fps'] is not None:
                print(f"FPS: {summary['fps']:.2f}")
            print(f"Peak memory: {summary['peak_rss_mb']:.1f} MB")


def run_evaluate(config: EvaluateConfig) -> Optional[EvaluationReport]:
    """
    Execute the evaluate command

    Returns None without touching any artifact when a precondition fails.
    """
    try:
        check_preconditions()
    except PreconditionError as e:
        print(e)
        return None

    print(f"Evaluating {config.model_name} using {config.dataset_name}")

    pipeline = EvaluationPipeline(config)
    try:
        pipeline.setup_pipeline()
        pipeline.setup_dataset()
        report = pipeline.evaluate()
    finally:
        pipeline.cleanup()

    if config.compare:
        print("Comparison coming soon.")

    return report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='maskrcnn', description='Mask R-CNN model tooling')
    subparsers = parser.add_subparsers(dest='command', required=True)

    evaluate = subparsers.add_parser('evaluate', help='Evaluates a compiled model against validation data')
    evaluate.add_argument('model_name', help='Model name under .maskrcnn/models')
    evaluate.add_argument('dataset_name', help='Dataset name under .maskrcnn/data')
    evaluate.add_argument('--config', type=str, help='Path to config JSON file')
    evaluate.add_argument('--weights', type=str, help='Path to HDF5 weights file')
    evaluate.add_argument('--products_dir', type=str, help='Path to products directory')
    evaluate.add_argument('--year', type=str, help='COCO dataset year')
    evaluate.add_argument('--type', type=str, help='COCO dataset type')
    evaluate.add_argument('-c', '--compare', action='store_true', help='Compare against the reference model')
    evaluate.add_argument('--limit', type=int, default=5, help='Maximum number of images to evaluate')
    evaluate.add_argument('--output-dir', type=str, help='Directory to save evaluation results')
    evaluate.add_argument('--device', choices=['cpu', 'cuda'], help='Inference device')
    return parser


def main(argv=None):
    """
    Command-line interface for running evaluations
    """
    args = build_parser().parse_args(argv)
    config = EvaluateConfig.from_args(args)

    try:
        run_evaluate(config)
    except EvaluationError as e:
        print(f"Error during evaluation: {e}")
        return 1

    return 0


if __name__ == '__main__':
    exit(main())
