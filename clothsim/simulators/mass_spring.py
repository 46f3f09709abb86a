# --------------------------------------------------------------------------------
# Copyright (c) 2025 Krushang Gabani
# All rights reserved.
#
# MassSpringCloth: Taichi-based explicit mass-spring cloth solver with
# structural / shear / bending springs, wind drag, and sphere collision.
#
# Author: Krushang Gabani
# Date: July 7, 2025
# --------------------------------------------------------------------------------

import logging

import numpy as np
import taichi as ti

from clothsim.grid import (GridShape, NORMAL_PAIRS, SPRING_LINKS, SpringType,
                           flat_index, in_bounds)

logger = logging.getLogger(__name__)

STRUCTURAL = int(SpringType.STRUCTURAL)


@ti.data_oriented
class MassSpringCloth:
    """
    Particle grid connected by springs, advanced with a two-phase explicit
    step. ``step_velocity`` and ``step_position`` are separate kernels so
    every read inside a phase sees the state committed by the previous one.
    """

    def __init__(self, cfg):

        self.cfg         = cfg
        # grid
        self.grid        = GridShape(cfg.width, cfg.height)
        self.width       = cfg.width
        self.height      = cfg.height
        self.n_particles = self.grid.particle_count

        # numerics
        self.dtype       = ti.f32 if cfg.dtype == "float32" else ti.f64
        self.np_dtype    = np.float32 if cfg.dtype == "float32" else np.float64
        self.block_dim   = cfg.block_dim
        self.min_spring_length = cfg.min_spring_length
        self.average_normals   = cfg.normal_mode == "average"

        # particle state
        n = self.n_particles
        self.x       = ti.Vector.field(3, dtype=self.dtype, shape=n)
        self.v       = ti.Vector.field(3, dtype=self.dtype, shape=n)
        self.normal  = ti.Vector.field(3, dtype=self.dtype, shape=n)
        self.pinned  = ti.field(dtype=ti.i32, shape=n)

        # parameters live in fields so the host can change them between phases
        self.stiffness     = ti.field(dtype=self.dtype, shape=len(SpringType))
        self.rest_length   = ti.field(dtype=self.dtype, shape=len(SpringType))
        self.mass          = ti.field(dtype=self.dtype, shape=())
        self.damping       = ti.field(dtype=self.dtype, shape=())
        self.viscosity     = ti.field(dtype=self.dtype, shape=())
        self.time_step     = ti.field(dtype=self.dtype, shape=())
        self.gravity       = ti.Vector.field(3, dtype=self.dtype, shape=())
        self.wind          = ti.Vector.field(3, dtype=self.dtype, shape=())
        self.origin        = ti.Vector.field(3, dtype=self.dtype, shape=())
        self.sphere_center = ti.Vector.field(3, dtype=self.dtype, shape=())
        self.sphere_radius = ti.field(dtype=self.dtype, shape=())

        self.load_params(cfg)
        self.init()

        logger.info("Cloth grid %dx%d (%d particles), dtype=%s, normals=%s",
                    self.width, self.height, n, cfg.dtype, cfg.normal_mode)

    # ----------------------------------------------------------------- params

    def load_params(self, cfg):
        self.set_stiffness(cfg.stiffness)
        self.set_rest_lengths(cfg.resolved_rest_lengths())
        self.mass[None]    = cfg.mass
        self.damping[None] = cfg.damping
        self.gravity[None] = list(cfg.gravity)
        self.origin[None]  = list(cfg.origin)
        self.set_wind(cfg.wind, cfg.viscosity)
        self.set_time_step(cfg.dt)
        self.set_collider(cfg.sphere_center, cfg.sphere_radius)
        self.set_pins(cfg.resolved_pins())

    def set_stiffness(self, stiffness):
        for spring in SpringType:
            self.stiffness[int(spring)] = float(stiffness[spring])
        logger.debug("stiffness -> %s", tuple(stiffness))

    def set_rest_lengths(self, rest_lengths):
        for spring in SpringType:
            self.rest_length[int(spring)] = float(rest_lengths[spring])

    def set_wind(self, wind, viscosity):
        self.wind[None] = list(wind)
        self.viscosity[None] = viscosity

    def set_time_step(self, dt):
        self.time_step[None] = dt

    def set_collider(self, center, radius):
        self.sphere_center[None] = list(center)
        self.sphere_radius[None] = radius

    def set_pins(self, pins):
        mask = np.zeros(self.n_particles, dtype=np.int32)
        for x, y in pins:
            mask[self.grid.linear_index(x, y)] = 1
        self.pinned.from_numpy(mask)

    # ----------------------------------------------------------------- kernels

    @ti.kernel
    def init(self):
        # flat sheet in the XZ plane, grid +y running towards -z so normals face +Y
        spacing = self.rest_length[STRUCTURAL]
        origin = self.origin[None]
        ti.loop_config(block_dim=self.block_dim)
        for gx, gy in ti.ndrange(self.width, self.height):
            i = flat_index(gx, gy, self.width)
            offset = ti.Vector.zero(self.dtype, 3)
            offset[0] = gx * spacing
            offset[2] = -gy * spacing
            self.x[i] = origin + offset
            self.v[i] = ti.Vector.zero(self.dtype, 3)
            self.normal[i] = ti.Vector([0.0, 1.0, 0.0])

    @ti.func
    def spring_force(self, p, q, spring):
        d = p - q
        length = ti.max(d.norm(), self.min_spring_length)
        return d * self.stiffness[spring] * (self.rest_length[spring] / length - 1.0)

    @ti.func
    def accumulate_force(self, i, gx, gy):
        p = self.x[i]
        v = self.v[i]
        f = ti.Vector.zero(self.dtype, 3)

        for link in ti.static(SPRING_LINKS):
            nx = gx + link[0]
            ny = gy + link[1]
            if in_bounds(nx, ny, self.width, self.height):
                f += self.spring_force(p, self.x[flat_index(nx, ny, self.width)], link[2])

        f += -self.damping[None] * v
        f += self.gravity[None] * self.mass[None]

        # viscous wind drag along the normal from the previous step
        n = self.normal[i]
        f += self.viscosity[None] * n.dot(self.wind[None] - v) * n
        return f

    @ti.func
    def estimate_normal(self, i, gx, gy):
        p = self.x[i]
        acc = ti.Vector.zero(self.dtype, 3)
        found = 0

        for pair in ti.static(NORMAL_PAIRS):
            ax = gx + pair[0][0]
            ay = gy + pair[0][1]
            bx = gx + pair[1][0]
            by = gy + pair[1][1]
            if in_bounds(ax, ay, self.width, self.height) and in_bounds(bx, by, self.width, self.height):
                take = 1
                if ti.static(not self.average_normals):
                    take = 1 - found
                if take == 1:
                    a = self.x[flat_index(ax, ay, self.width)] - p
                    b = self.x[flat_index(bx, by, self.width)] - p
                    c = a.cross(b)
                    c_len = c.norm()
                    if c_len > 0:
                        acc += c / c_len
                    found = 1

        # no usable pair (1-wide grids, collapsed triangles): keep the old normal
        acc_len = acc.norm()
        if acc_len > 0:
            self.normal[i] = acc / acc_len

    @ti.func
    def resolve_collision(self, i):
        rel = self.x[i] - self.sphere_center[None]
        dist = rel.norm()
        penetration = dist - self.sphere_radius[None]
        if penetration < 0:
            e = ti.Vector.zero(self.dtype, 3)
            e[1] = 1.0
            if dist > 0:
                e = rel / dist
            self.x[i] = self.x[i] - penetration * e
            # frictionless slide: drop the normal component, no bounce
            v = self.v[i]
            self.v[i] = v - v.dot(e) * e

    @ti.kernel
    def step_velocity(self):
        ti.loop_config(block_dim=self.block_dim)
        for gx, gy in ti.ndrange(self.width, self.height):
            i = flat_index(gx, gy, self.width)
            a = self.accumulate_force(i, gx, gy) / self.mass[None]
            self.v[i] = self.v[i] + a * self.time_step[None]
            self.estimate_normal(i, gx, gy)

    @ti.kernel
    def step_position(self):
        ti.loop_config(block_dim=self.block_dim)
        for gx, gy in ti.ndrange(self.width, self.height):
            i = flat_index(gx, gy, self.width)
            if self.pinned[i] == 0:
                self.x[i] = self.x[i] + self.v[i] * self.time_step[None]
                self.resolve_collision(i)

    # ----------------------------------------------------------------- host API

    def reset(self):
        self.init()

    def substep(self):
        self.step_velocity()
        ti.sync()
        self.step_position()
        ti.sync()

    def step(self, n_substeps: int = 1):
        for _ in range(n_substeps):
            self.substep()

    def positions(self) -> np.ndarray:
        return self.x.to_numpy()

    def velocities(self) -> np.ndarray:
        return self.v.to_numpy()

    def normals(self) -> np.ndarray:
        return self.normal.to_numpy()

    def pinned_indices(self) -> np.ndarray:
        return np.flatnonzero(self.pinned.to_numpy())

    def set_positions(self, positions):
        self.x.from_numpy(self._as_state(positions, "positions"))

    def set_velocities(self, velocities):
        self.v.from_numpy(self._as_state(velocities, "velocities"))

    def _as_state(self, values, name):
        arr = np.asarray(values, dtype=self.np_dtype)
        if arr.shape != (self.n_particles, 3):
            raise ValueError(f"{name} must have shape ({self.n_particles}, 3), got {arr.shape}")
        return np.ascontiguousarray(arr)
