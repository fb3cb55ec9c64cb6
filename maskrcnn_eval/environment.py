"""
Preconditions checked once before an evaluation run
"""

import shutil
import subprocess
from typing import Optional

import torch

from .errors import PreconditionError


MIN_TORCH_VERSION = (1, 10)


def _version_tuple(version: str):
    parts = []
    for piece in version.split('+')[0].split('.')[:2]:
        digits = ''.join(ch for ch in piece if ch.isdigit())
        parts.append(int(digits) if digits else 0)
    return tuple(parts)


def check_platform(torch_version: Optional[str] = None) -> Optional[str]:
    """Return a message when the runtime cannot compile models, else None"""
    torch_version = torch_version or torch.__version__
    if _version_tuple(str(torch_version)) < MIN_TORCH_VERSION:
        required = '.'.join(str(v) for v in MIN_TORCH_VERSION)
        return f"evaluate requires torch >= {required}"
    return None


def docker_installed() -> bool:
    """True if the docker CLI is on PATH and runs"""
    if shutil.which('docker') is None:
        return False
    try:
        result = subprocess.run(['docker', '--version'], capture_output=True, timeout=30)
    except (OSError, subprocess.TimeoutExpired):
        return False
    return result.returncode == 0


def check_preconditions():
    """
    Raises:
        PreconditionError: If the platform or docker requirement is not met
    """
    message = check_platform()
    if message:
        raise PreconditionError(message)
    if not docker_installed():
        raise PreconditionError("Docker is required to run this script.")
