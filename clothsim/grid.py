# --------------------------------------------------------------------------------
# Copyright (c) 2025 Krushang Gabani
# All rights reserved.
#
# Grid indexing for the cloth particle lattice: coordinate <-> linear index
# mapping, bounds checks, and the fixed spring / normal neighbor stencils.
#
# Author: Krushang Gabani
# Date: July 7, 2025
# --------------------------------------------------------------------------------

from dataclasses import dataclass
from enum import IntEnum

import taichi as ti


class SpringType(IntEnum):
    STRUCTURAL = 0
    SHEAR = 1
    BEND = 2


# (dx, dy, category) for the 12 springs attached to every particle
SPRING_LINKS = (
    (1, 0, int(SpringType.STRUCTURAL)),
    (-1, 0, int(SpringType.STRUCTURAL)),
    (0, 1, int(SpringType.STRUCTURAL)),
    (0, -1, int(SpringType.STRUCTURAL)),
    (1, 1, int(SpringType.SHEAR)),
    (1, -1, int(SpringType.SHEAR)),
    (-1, 1, int(SpringType.SHEAR)),
    (-1, -1, int(SpringType.SHEAR)),
    (2, 0, int(SpringType.BEND)),
    (-2, 0, int(SpringType.BEND)),
    (0, 2, int(SpringType.BEND)),
    (0, -2, int(SpringType.BEND)),
)

RIGHT, UP, LEFT, DOWN = (1, 0), (0, 1), (-1, 0), (0, -1)

# scanned in this order by the normal estimator
NORMAL_PAIRS = (
    (RIGHT, UP),
    (UP, LEFT),
    (LEFT, DOWN),
    (DOWN, RIGHT),
)


@dataclass(frozen=True)
class GridShape:
    width: int
    height: int

    @property
    def particle_count(self) -> int:
        return self.width * self.height

    def linear_index(self, x: int, y: int) -> int:
        return y * self.width + x

    def coordinates_of(self, index: int):
        return index % self.width, index // self.width

    def is_valid(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def neighbors(self, x: int, y: int):
        """Yield (nx, ny, SpringType) for every spring whose far end is on the grid."""
        for dx, dy, category in SPRING_LINKS:
            nx, ny = x + dx, y + dy
            if self.is_valid(nx, ny):
                yield nx, ny, SpringType(category)


@ti.func
def flat_index(x, y, width):
    return y * width + x


@ti.func
def in_bounds(x, y, width, height):
    return x >= 0 and x < width and y >= 0 and y < height
