from __future__ import annotations
from abc import ABC, abstractmethod

from ..grid import Grid


class LayerGenerator(ABC):
    """Abstract base for layer generators.

    Implementations are pure: the same (width, height, seed) always yields an
    identical Grid, and no state is shared between calls.
    """

    @abstractmethod
    def generate(self, width: int, height: int, seed: int) -> Grid:
        """Generate a grid for one layer."""
        raise NotImplementedError
