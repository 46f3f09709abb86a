import imageio.v3 as iio
import numpy as np

from clothsim.simulators.mass_spring import MassSpringCloth
from clothsim.visualization.mesh import build_cloth_mesh, cloth_faces
from clothsim.visualization.recorder import Recorder


def test_cloth_faces_cover_every_cell():
    faces = cloth_faces(4, 3)
    assert faces.shape == (2 * 3 * 2, 3)
    assert faces.min() == 0 and faces.max() == 11
    # every cell contributes its four corners
    assert set(np.unique(faces)) == set(range(12))


def test_degenerate_grids_have_no_faces():
    assert cloth_faces(1, 5).shape == (0, 3)
    assert cloth_faces(6, 1).shape == (0, 3)


def test_flat_sheet_mesh_faces_point_up(make_config):
    sim = MassSpringCloth(make_config(width=5, height=4))
    mesh = build_cloth_mesh(sim.positions(), sim.normals(), 5, 4)

    assert len(mesh.vertices) == 20
    np.testing.assert_allclose(mesh.face_normals, np.tile([0.0, 1.0, 0.0], (24, 1)), atol=1e-12)
    np.testing.assert_allclose(mesh.vertex_normals, sim.normals(), atol=1e-12)


def test_recorder_writes_gif(tmp_path):
    out = tmp_path / "cloth.gif"
    recorder = Recorder(str(out), fps=10)
    for color in ([255, 0, 0], [0, 255, 0], [0, 0, 255]):
        recorder.add_frame(np.full((8, 8, 3), color, dtype=np.uint8))
    assert len(recorder) == 3

    recorder.save()
    assert out.exists()
    assert iio.imread(out, index=None).shape[0] == 3


def test_recorder_without_frames_skips_file(tmp_path, caplog):
    out = tmp_path / "empty.gif"
    Recorder(str(out)).save()
    assert not out.exists()
    assert "No frames recorded" in caplog.text
