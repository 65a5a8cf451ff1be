"""Reproducibility manifest for a training run."""

from __future__ import annotations

import json
import platform
import subprocess
import time
from pathlib import Path
from typing import Mapping

import numpy as np
import yaml


def git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
        return out.decode().strip()
    except (OSError, subprocess.CalledProcessError):  # pragma: no cover - git may be unavailable
        return "unknown"


def _library_versions() -> dict:
    return {
        "python": platform.python_version(),
        "numpy": np.__version__,
        "pyyaml": getattr(yaml, "__version__", "unknown"),
    }


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    dataset_provenance: Mapping[str, object],
    model: Mapping[str, object],
    training: Mapping[str, object],
    outcome: Mapping[str, object],
) -> str:
    """Write ``manifest.json`` describing how a run can be reproduced.

    ``training`` holds the resolved hyper-parameters (after defaults and CLI
    overrides), which can differ from the raw ``config`` mapping, and
    ``outcome`` records how far the session got.
    """

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest = {
        "git_sha": git_sha(),
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": config,
        "dataset": dict(dataset_provenance),
        "model": dict(model),
        "training": dict(training),
        "outcome": dict(outcome),
        "environment": _library_versions(),
    }
    path.write_text(json.dumps(manifest, indent=2))
    return str(path)
