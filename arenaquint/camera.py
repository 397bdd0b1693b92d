"""Isometric cameras producing projection matrices."""
from __future__ import annotations

import math
from typing import Any, Optional

import numpy as np

from .transform import INVSQRT_3, orthographic, rotation_axis


def isometric_transform() -> np.ndarray:
    """True isometric view rotation: 45 degrees about z, then arccos(1/sqrt 3) about x."""
    rot_z = rotation_axis(math.radians(45.0), 2)
    rot_x = rotation_axis(math.acos(1.0 / math.sqrt(3.0)), 0)
    return rot_z @ rot_x


def _readonly(matrix: np.ndarray) -> np.ndarray:
    matrix.setflags(write=False)
    return matrix


class Camera:
    """Base isometric camera; ``scale`` is how many units fit in the window."""

    ISOMETRIC = _readonly(isometric_transform())

    def __init__(self, scale: float = 480.0, position=(0.0, 0.0)) -> None:
        self.scale = float(scale)
        self.position = np.array(position, dtype=float)

    def projection_matrix(self) -> np.ndarray:
        """View-projection matrix for row vectors, after updating the position."""
        self.update_position()
        center = np.array([self.position[0], self.position[1], 0.0])
        half = self.scale * INVSQRT_3
        projection = orthographic(center - half, center + half, 1.0, -1.0)
        return self.ISOMETRIC @ projection

    def update_position(self) -> None:
        """Hook for cameras that move; the base camera stays put."""


class FollowCamera(Camera):
    """Camera that keeps its target in the centre of the view."""

    def __init__(self, target: Optional[Any] = None, scale: float = 480.0,
                 position=(0.0, 0.0)) -> None:
        super().__init__(scale, position)
        self.target = target

    def reset_target(self) -> None:
        self.target = None

    def update_position(self) -> None:
        if self.target is None:
            return
        point = np.append(np.asarray(self.target.position, dtype=float), 1.0)
        rotated = point @ self.ISOMETRIC
        self.position = rotated[:2] / rotated[3]