"""Custom exception types for the cloth simulation."""

from __future__ import annotations


class VerletClothError(Exception):
    """Base class for domain-specific errors."""


class ConfigError(VerletClothError, ValueError):
    """Raised when simulation parameters are out of range."""


class DegenerateSpringError(VerletClothError, ValueError):
    """Raised when a spring would connect two coincident vertices."""

    def __init__(self, index: int, head: int, tail: int) -> None:
        super().__init__(
            f"Spring {index} between vertices {head} and {tail} has zero rest length."
        )
        self.index = index


class VertexIndexError(VerletClothError, IndexError):
    """Raised when a vertex index falls outside the vertex array."""

    def __init__(self, index: int, count: int) -> None:
        super().__init__(
            f"Vertex index {index} is invalid for a mesh of {count} vertices."
        )
        self.index = index
        self.count = count


__all__ = [
    "VerletClothError",
    "ConfigError",
    "DegenerateSpringError",
    "VertexIndexError",
]
