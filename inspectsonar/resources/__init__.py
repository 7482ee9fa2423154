"""Bundled XML schemas and the default rule override document."""

from importlib.resources import files
from importlib.resources.abc import Traversable
from typing import BinaryIO


def resource_path(name: str) -> Traversable:
    return files(__name__) / name


def open_resource(name: str) -> BinaryIO:
    """Open a bundled resource for binary reading. Raises ``FileNotFoundError``."""
    path = resource_path(name)
    if not path.is_file():
        raise FileNotFoundError(name)
    return path.open("rb")
