"""Application description loader.

Reads a YAML or JSON file describing models, routes and app-level swagger
config into an AppDescriptor.
"""

import json
from pathlib import Path

import yaml

from .base import AppDescriptor


def load_document(file_path: Path) -> dict:
    """Load a YAML or JSON mapping from disk.

    The text is tried as JSON first and read as YAML when that fails.
    """
    text = file_path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = yaml.safe_load(text)
    if not isinstance(data, dict):
        raise ValueError(f"{file_path} does not contain a mapping")
    return data


def load_app(file_path: Path) -> AppDescriptor:
    """Parse an application description file into an AppDescriptor."""
    return AppDescriptor.model_validate(load_document(file_path))
