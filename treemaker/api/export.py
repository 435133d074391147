"""
Export utilities for generated trees.

This module writes scenes to binary glTF and generation reports to JSON.
Failures (unwritable paths, exporter errors) propagate to the caller.
"""

from pathlib import Path
from typing import Any, Dict, Union
import json
import logging

from .sink import TrimeshSceneSink

logger = logging.getLogger(__name__)


def export_scene(
    sink: TrimeshSceneSink,
    path: Union[str, Path],
    file_type: str = "glb",
) -> Path:
    """
    Export a sink's scene to disk.

    Parameters
    ----------
    sink : TrimeshSceneSink
        Sink holding the generated tree
    path : str or Path
        Output file; parent directories are created
    file_type : str
        trimesh export format (default: glb)

    Returns
    -------
    Path
        Path to the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return sink.export(path, file_type=file_type)


def write_report(data: Union[Dict[str, Any], Any], path: Union[str, Path]) -> Path:
    """
    Write a report (dict or object with ``to_dict``) as JSON.

    Returns
    -------
    Path
        Path to the saved file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if hasattr(data, "to_dict"):
        data = data.to_dict()

    with open(path, "w") as f:
        json.dump(data, f, indent=2, default=str)

    logger.info(f"Saved report to {path}")
    return path
