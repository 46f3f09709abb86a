import numpy as np
import trimesh


def cloth_faces(width: int, height: int) -> np.ndarray:
    """Two triangles per grid cell, wound so the +Y side of the flat sheet is the front."""
    if width < 2 or height < 2:
        return np.zeros((0, 3), dtype=np.int64)

    gx, gy = np.meshgrid(np.arange(width - 1), np.arange(height - 1), indexing="xy")
    i00 = (gy * width + gx).ravel()
    i10 = i00 + 1
    i01 = i00 + width
    i11 = i01 + 1

    upper = np.stack([i00, i10, i01], axis=1)
    lower = np.stack([i10, i11, i01], axis=1)
    return np.concatenate([upper, lower], axis=0)


def build_cloth_mesh(positions, normals, width: int, height: int) -> trimesh.Trimesh:
    return trimesh.Trimesh(vertices=np.asarray(positions, dtype=np.float64),
                           faces=cloth_faces(width, height),
                           vertex_normals=np.asarray(normals, dtype=np.float64),
                           process=False)
