import pytest
import taichi as ti

from clothsim.config.base_config import Config


@pytest.fixture(autouse=True)
def taichi_cpu():
    ti.init(arch=ti.cpu, default_fp=ti.f64, debug=False)
    yield
    ti.reset()


@pytest.fixture
def make_config():
    """Quiet unit-spaced sheet: no springs, gravity, damping, wind or collider."""
    def _make(**overrides):
        params = dict(
            width=3,
            height=3,
            rest_length=1.0,
            origin=(0.0, 0.0, 0.0),
            stiffness=(0.0, 0.0, 0.0),
            mass=1.0,
            damping=0.0,
            gravity=(0.0, 0.0, 0.0),
            wind=(0.0, 0.0, 0.0),
            viscosity=0.0,
            dt=0.01,
            sphere_center=(0.0, -100.0, 0.0),
            sphere_radius=0.0,
            dtype="float64",
            render_model="none",
        )
        params.update(overrides)
        return Config(**params)
    return _make
