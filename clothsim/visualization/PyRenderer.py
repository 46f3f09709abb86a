# --------------------------------------------------------------------------------
# Copyright (c) 2025 Krushang Gabani
# All rights reserved.
#
# ClothRenderer: PyRender view of the cloth sheet and its sphere collider,
# either in an interactive viewer or offscreen for frame capture.
#
# Author: Krushang Gabani
# Date: July 7, 2025
# --------------------------------------------------------------------------------

import os
import math
import time
import logging

import numpy as np

# Headless machines have no display, fall back to EGL
if "DISPLAY" not in os.environ:
    os.environ.setdefault('PYOPENGL_PLATFORM', 'egl')

import trimesh
import pyrender

from clothsim.visualization.mesh import build_cloth_mesh

logger = logging.getLogger(__name__)


# Utility: build combined yaw (around Y-axis) and pitch (around X-axis) rotation matrix
def rotation_matrix(yaw: float, pitch: float) -> np.ndarray:
    yaw = math.radians(yaw)
    pitch = math.radians(pitch)
    yaw_mat = np.array([
        [math.cos(yaw), 0, math.sin(yaw)],
        [0, 1, 0],
        [-math.sin(yaw), 0, math.cos(yaw)]
    ], dtype=np.float32)
    pitch_mat = np.array([
        [1, 0, 0],
        [0, math.cos(pitch), -math.sin(pitch)],
        [0, math.sin(pitch),  math.cos(pitch)]
    ], dtype=np.float32)
    return yaw_mat @ pitch_mat


class ClothRenderer:
    """
    3D renderer for the Taichi cloth simulation.
    """

    def __init__(self, cfg):

        self.cfg = cfg
        self.width, self.height = cfg.width, cfg.height
        self.offscreen = cfg.offscreen or cfg.record_path is not None

        # Camera setup
        w, h = cfg.resolution
        self.camera = pyrender.PerspectiveCamera(yfov=np.pi / 4, aspectRatio=w / h)
        self.camera_pose = np.eye(4, dtype=np.float32)
        self.camera_pose[:3, 3] = np.array(cfg.camera_pose, dtype=np.float32)
        yaw, pitch = cfg.camera_rotation
        self.camera_pose[:3, :3] = rotation_matrix(yaw, pitch)

        # Light follows the camera
        self.light = pyrender.DirectionalLight(color=np.ones(3), intensity=3.0)

        self.cloth_material = pyrender.MetallicRoughnessMaterial(
            baseColorFactor=[0.85, 0.35, 0.2, 1.0], doubleSided=True)
        sphere_material = pyrender.MetallicRoughnessMaterial(
            baseColorFactor=[0.5, 0.42, 0.8, 1.0])
        sphere_tm = trimesh.creation.icosphere(subdivisions=3, radius=1.0)
        self.sphere_mesh = pyrender.Mesh.from_trimesh(sphere_tm, smooth=True,
                                                      material=sphere_material)

        # Scene and nodes
        self.scene       = pyrender.Scene(ambient_light=[0.2, 0.2, 0.2])
        self.cam_node    = self.scene.add(self.camera, pose=self.camera_pose)
        self.light_node  = self.scene.add(self.light, pose=self.camera_pose)
        self.cloth_node  = None
        self.sphere_node = None

        self.positions = None
        self.normals = None
        self.sphere_pose = None

        self.viewer = None
        self.offscreen_renderer = None
        if self.offscreen:
            self.offscreen_renderer = pyrender.OffscreenRenderer(w, h)

    def set_cloth(self, positions, normals):
        self.positions = positions
        self.normals = normals

    def set_collider(self, center, radius):
        if radius <= 0:
            self.sphere_pose = None
            return
        # shrink slightly so the contact surface does not z-fight with the cloth
        pose = np.eye(4, dtype=np.float32)
        pose[:3, :3] *= radius * 0.97
        pose[:3, 3] = np.asarray(center, dtype=np.float32)
        self.sphere_pose = pose

    def _cloth_mesh(self):
        tm = build_cloth_mesh(self.positions, self.normals, self.width, self.height)
        return pyrender.Mesh.from_trimesh(tm, smooth=True, material=self.cloth_material)

    def _update_scene(self):
        cloth = self._cloth_mesh()
        if self.cloth_node is None:
            self.cloth_node = self.scene.add(cloth, name="cloth")
        else:
            self.cloth_node.mesh = cloth

        if self.sphere_pose is not None:
            if self.sphere_node is None:
                self.sphere_node = self.scene.add(self.sphere_mesh, name="collider",
                                                  pose=self.sphere_pose)
            else:
                self.scene.set_pose(self.sphere_node, self.sphere_pose)
        elif self.sphere_node is not None:
            self.scene.remove_node(self.sphere_node)
            self.sphere_node = None

    def render(self):
        """Draw the current state. Returns an RGB frame when rendering offscreen."""
        if self.positions is None:
            return None

        if self.offscreen_renderer is not None:
            self._update_scene()
            color, _ = self.offscreen_renderer.render(self.scene)
            return color

        # Initialize viewer once
        if self.viewer is None:
            self.viewer = pyrender.Viewer(
                self.scene,
                use_raymond_lighting=True,
                run_in_thread=True,
                window_title="Cloth"
            )

        with self.viewer.render_lock:
            self._update_scene()

        # Throttle
        time.sleep(1e-3)
        return None

    def close(self):
        if self.offscreen_renderer is not None:
            self.offscreen_renderer.delete()
            self.offscreen_renderer = None
        if self.viewer is not None and self.viewer.is_active:
            self.viewer.close_external()
        self.viewer = None
