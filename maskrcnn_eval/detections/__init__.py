"""Result extraction and detection decoding"""

from .decoder import Detection, decode_detections
from .extractor import DetectionOutputs, extract_outputs, extract_detections

__all__ = ['Detection', 'decode_detections', 'DetectionOutputs', 'extract_outputs', 'extract_detections']
