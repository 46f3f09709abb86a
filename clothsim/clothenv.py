# --------------------------------------------------------------------------------
# Copyright (c) 2025 Krushang Gabani
# All rights reserved.
#
# High-level environment wrapper for the mass-spring cloth simulator
# with optional PyRender-based visualization and frame recording.
#
# Author: Krushang Gabani
# Date: July 7, 2025
# --------------------------------------------------------------------------------

import logging

import numpy as np
import taichi as ti

from clothsim.simulators.mass_spring import MassSpringCloth
from clothsim.visualization.recorder import Recorder

logger = logging.getLogger(__name__)


@ti.data_oriented
class ClothEnv:

    def __init__(self, cfg, init_taichi: bool = True):

        cfg.validate()
        self.cfg = cfg
        self.env_dt = cfg.dt

        if init_taichi:
            ti.init(arch=getattr(ti, cfg.arch),
                    default_fp=ti.f32 if cfg.dtype == "float32" else ti.f64,
                    debug=False)

        self.simulator = MassSpringCloth(cfg)

        self._t = 0.0
        self._step = 0
        self._diverged = False
        self.sphere_center = np.array(cfg.sphere_center, dtype=np.float64)
        self.sphere_velocity = np.array(cfg.sphere_velocity, dtype=np.float64)

        self.renderer = None
        if cfg.render_model == "PyRender":
            # pyrender needs an OpenGL context, only import it when asked to draw
            from clothsim.visualization.PyRenderer import ClothRenderer
            self.renderer = ClothRenderer(cfg)

        self.recorder = None
        if cfg.record_path:
            self.recorder = Recorder(cfg.record_path, fps=cfg.record_fps)

    @property
    def time(self) -> float:
        return self._t

    @property
    def frame(self) -> int:
        return self._step

    def reset(self):
        self.sphere_center = np.array(self.cfg.sphere_center, dtype=np.float64)
        self.simulator.set_collider(self.sphere_center, self.cfg.sphere_radius)
        self.simulator.reset()
        self._t = 0.0
        self._step = 0
        self._diverged = False
        logger.info("Environment reset")

    def step(self, n_substeps=None):
        if n_substeps is None:
            n_substeps = self.cfg.n_substeps
        moving = bool(np.any(self.sphere_velocity))

        for _ in range(n_substeps):
            if moving:
                self.sphere_center = self.sphere_center + self.sphere_velocity * self.env_dt
                self.simulator.set_collider(self.sphere_center, self.cfg.sphere_radius)
            self.simulator.substep()
            self._t += self.env_dt

        self._step += 1
        if self.cfg.check_finite and not self._diverged:
            self._check_finite()

    def _check_finite(self):
        x = self.simulator.positions()
        v = self.simulator.velocities()
        if not (np.isfinite(x).all() and np.isfinite(v).all()):
            # explicit integration blew up; keep running, the host decides what to do
            self._diverged = True
            logger.warning("Non-finite cloth state at t=%.4fs (frame %d); "
                           "reduce dt or stiffness", self._t, self._step)

    @property
    def diverged(self) -> bool:
        return self._diverged

    def render(self):
        if self.renderer is None:
            return
        self.renderer.set_cloth(self.simulator.positions(), self.simulator.normals())
        self.renderer.set_collider(self.sphere_center, self.cfg.sphere_radius)
        frame = self.renderer.render()
        if self.recorder is not None and frame is not None:
            self.recorder.add_frame(frame)

    def close(self):
        if self.recorder is not None:
            self.recorder.save()
        if self.renderer is not None:
            self.renderer.close()
