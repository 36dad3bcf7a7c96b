"""Generators for diagrams."""

from astrolabe.generators.dot import generate_dot
from astrolabe.generators.mermaid import generate_mermaid

__all__ = [
    "generate_mermaid",
    "generate_dot",
]
