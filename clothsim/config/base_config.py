# --------------------------------------------------------------------------------
# Copyright (c) 2025 Krushang Gabani
# All rights reserved.
#
# Configuration module for the mass-spring cloth simulation, collider,
# and rendering settings.
#
# Author: Krushang Gabani
# Date: July 7, 2025
# --------------------------------------------------------------------------------

import logging
from dataclasses import dataclass, fields
from typing import List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

NORMAL_MODES = ("first_pair", "average")
DTYPES = ("float32", "float64")


@dataclass
class Config:
    """
    Configuration for the cloth simulation. Everything here is owned by the
    host; the simulator only reads it.
    """

    # ------------------------------ Grid --------------------------------------
    width: int = 32  # Particles along the grid x axis
    height: int = 32  # Particles along the grid y axis
    rest_length: float = 0.05  # Structural spacing of the flat sheet (m)
    rest_lengths: Optional[Tuple[float, float, float]] = None
    # Per-category rest lengths (structural, shear, bend). None shares rest_length.
    origin: Tuple[float, float, float] = (-0.775, 1.0, 0.775)
    # World position of particle (0, 0)
    pins: Optional[List[Tuple[int, int]]] = None
    # Pinned grid coordinates. None pins (0, 0) and (width - 1, 0)

    # --------------------------- Spring Model --------------------------------
    stiffness: Tuple[float, float, float] = (2000.0, 500.0, 200.0)
    # (k_structural, k_shear, k_bend)
    min_spring_length: float = 1e-6  # Lower clamp on |p - q| for coincident particles

    # ---------------------------- Dynamics -----------------------------------
    mass: float = 0.01  # Per-particle mass (kg)
    damping: float = 0.01  # Velocity damping coefficient Cd
    gravity: Tuple[float, float, float] = (0.0, -9.8, 0.0)  # Gravity vector (m/s^2)
    wind: Tuple[float, float, float] = (0.0, 0.0, 0.0)  # Wind velocity Uf (m/s)
    viscosity: float = 0.0  # Viscous drag coefficient Cv
    normal_mode: str = "first_pair"  # "first_pair" or "average"

    # ---------------------------- Time Stepping ------------------------------
    dt: float = 5e-4  # Fixed time step size (in seconds)
    n_substeps: int = 30  # Velocity/position pairs per rendered frame

    # ------------------------------ Collider ---------------------------------
    sphere_center: Tuple[float, float, float] = (0.0, 0.4, 0.0)
    sphere_radius: float = 0.3  # 0 disables the collider
    sphere_velocity: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    # Collider motion applied by the environment each substep

    # --------------------------- Engine Settings -----------------------------
    arch: str = "cpu"  # Taichi backend: "cpu", "gpu", "cuda", "vulkan", ...
    dtype: str = "float32"  # Numeric precision: "float32" or "float64"
    block_dim: int = 64  # Work-items per tile (8 x 8)
    check_finite: bool = True  # Warn once if the state stops being finite

    # --------------------------- Rendering Settings --------------------------
    render_model: str = "PyRender"  # "PyRender" or "none"
    offscreen: bool = False  # Render offscreen (needed for recording)
    resolution: Tuple[int, int] = (640, 480)
    camera_pose: Tuple[float, float, float] = (0.0, 1.0, 3.0)
    # Camera position in world coordinates (X, Y, Z)
    camera_rotation: Tuple[float, float] = (0.0, -10.0)
    # Camera orientation: (yaw in degrees, pitch in degrees)
    record_path: Optional[str] = None  # Output file for recorded frames
    record_fps: int = 30

    def resolved_rest_lengths(self) -> Tuple[float, float, float]:
        if self.rest_lengths is None:
            return (self.rest_length, self.rest_length, self.rest_length)
        return tuple(self.rest_lengths)

    def resolved_pins(self) -> List[Tuple[int, int]]:
        if self.pins is None:
            return [(0, 0), (self.width - 1, 0)]
        return [tuple(p) for p in self.pins]

    def validate(self):
        """Raise ValueError if the host supplied an unusable configuration."""
        if self.width < 1 or self.height < 1:
            raise ValueError(f"grid must be at least 1x1, got {self.width}x{self.height}")
        if self.mass <= 0:
            raise ValueError(f"mass must be positive, got {self.mass}")
        if self.dt <= 0:
            raise ValueError(f"dt must be positive, got {self.dt}")
        if self.n_substeps < 1:
            raise ValueError(f"n_substeps must be at least 1, got {self.n_substeps}")
        if any(length <= 0 for length in self.resolved_rest_lengths()):
            raise ValueError(f"rest lengths must be positive, got {self.resolved_rest_lengths()}")
        if len(self.stiffness) != 3:
            raise ValueError(f"stiffness needs three values, got {self.stiffness}")
        if self.sphere_radius < 0:
            raise ValueError(f"sphere_radius must be non-negative, got {self.sphere_radius}")
        if self.normal_mode not in NORMAL_MODES:
            raise ValueError(f"normal_mode must be one of {NORMAL_MODES}, got {self.normal_mode!r}")
        if self.dtype not in DTYPES:
            raise ValueError(f"dtype must be one of {DTYPES}, got {self.dtype!r}")
        for x, y in self.resolved_pins():
            if not (0 <= x < self.width and 0 <= y < self.height):
                raise ValueError(f"pin ({x}, {y}) lies outside the {self.width}x{self.height} grid")


def load_config(path) -> Config:
    """Build a Config from a YAML mapping, keeping defaults for missing keys."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")

    known = {f.name for f in fields(Config)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"{path}: unknown config keys {unknown}")

    for key, value in data.items():
        if key == "pins" and value is not None:
            data[key] = [tuple(p) for p in value]
        elif isinstance(value, list):
            data[key] = tuple(value)

    logger.debug("Loaded %d config keys from %s", len(data), path)
    return Config(**data)
