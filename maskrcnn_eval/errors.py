"""
Exception hierarchy for the evaluation harness
"""


class EvaluationError(Exception):
    """Base class for every fatal evaluation failure"""


class SetupError(EvaluationError):
    """Missing artifact or unusable model configuration"""


class CompilationError(SetupError):
    """A model artifact could not be compiled or loaded"""


class DatasetError(EvaluationError):
    """Annotation file or image could not be read"""


class DatasetParseError(DatasetError):
    """Annotation file is missing or malformed"""


class InferenceError(EvaluationError):
    """The runtime failed while executing an inference call"""


class ExtractionError(EvaluationError):
    """Inference response does not carry the expected tensor outputs"""


class PreconditionError(EvaluationError):
    """Platform or container dependency missing"""
