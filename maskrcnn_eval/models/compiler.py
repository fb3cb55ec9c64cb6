"""
TorchScript model compiler
Freezes and optimizes TorchScript artifacts for inference and loads the result
"""

import tempfile
from pathlib import Path
from typing import Optional, Union

import torch

from ..errors import CompilationError
from .artifacts import ModelArtifact


class ModelCompiler:
    """Compiles model artifacts into a directory of inference-ready TorchScript files"""

    def __init__(self, compiled_dir: Union[str, Path, None] = None, device: Optional[str] = None):
        """
        Initialize model compiler

        Args:
            compiled_dir: Output directory for compiled models. If None, a
                temp dir owned by the compiler and removed by cleanup()
            device: Device compiled models are loaded onto ('cuda' or 'cpu')
        """
        self._temp_dir = None
        if compiled_dir is None:
            self._temp_dir = tempfile.TemporaryDirectory(prefix='maskrcnn-compiled-')
            compiled_dir = self._temp_dir.name
        self.compiled_dir = Path(compiled_dir)
        self.compiled_dir.mkdir(parents=True, exist_ok=True)

        if device is None:
            device = 'cuda' if torch.cuda.is_available() else 'cpu'
        self.device = torch.device(device)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()

    def cleanup(self):
        """Remove the compiled models if the output dir is a temp dir"""
        if self._temp_dir is not None:
            self._temp_dir.cleanup()
            self._temp_dir = None

    def compile(self, artifact: ModelArtifact) -> Path:
        """
        Compile an artifact and record its compiled location

        Args:
            artifact: Uncompiled model artifact

        Returns:
            Path of the compiled model

        Raises:
            CompilationError: If the artifact is missing, already compiled or not TorchScript
        """
        if artifact.is_compiled:
            raise CompilationError(f"{artifact.name} model already compiled at {artifact.compiled_path}")
        if not artifact.path.exists():
            raise CompilationError(f"{artifact.name} model not found: {artifact.path}")

        compiled_path = self.compiled_dir / f"{artifact.path.stem}.compiled.pt"
        try:
            module = torch.jit.load(str(artifact.path), map_location='cpu')
            module = torch.jit.optimize_for_inference(module.eval())
            torch.jit.save(module, str(compiled_path))
        except (RuntimeError, ValueError) as e:
            raise CompilationError(f"Failed to compile {artifact.name} model {artifact.path}: {e}") from e

        artifact.mark_compiled(compiled_path)
        print(f"Compiled {artifact.name} model -> {compiled_path}")
        return compiled_path

    def load(self, compiled_path: Union[str, Path]) -> torch.jit.ScriptModule:
        """Load a compiled model onto the compiler's device"""
        compiled_path = Path(compiled_path)
        if not compiled_path.exists():
            raise CompilationError(f"Compiled model not found: {compiled_path}")

        try:
            module = torch.jit.load(str(compiled_path), map_location=self.device)
        except (RuntimeError, ValueError) as e:
            raise CompilationError(f"Failed to load compiled model {compiled_path}: {e}") from e

        module.eval()
        return module
