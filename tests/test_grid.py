import pytest

from clothsim.grid import GridShape, SPRING_LINKS, SpringType


def test_linear_index_is_a_bijection():
    grid = GridShape(5, 4)
    seen = set()
    for y in range(grid.height):
        for x in range(grid.width):
            i = grid.linear_index(x, y)
            assert grid.coordinates_of(i) == (x, y)
            seen.add(i)
    assert seen == set(range(grid.particle_count))


@pytest.mark.parametrize("x, y, valid", [
    (0, 0, True),
    (4, 3, True),
    (-1, 0, False),
    (0, -1, False),
    (5, 0, False),
    (0, 4, False),
])
def test_is_valid(x, y, valid):
    assert GridShape(5, 4).is_valid(x, y) is valid


def test_stencil_has_twelve_links():
    categories = [c for _, _, c in SPRING_LINKS]
    assert len(SPRING_LINKS) == 12
    assert categories.count(SpringType.STRUCTURAL) == 4
    assert categories.count(SpringType.SHEAR) == 4
    assert categories.count(SpringType.BEND) == 4


def test_interior_particle_sees_every_neighbor():
    grid = GridShape(5, 5)
    assert len(list(grid.neighbors(2, 2))) == 12


def test_corner_neighbors_stay_on_grid():
    grid = GridShape(5, 5)
    neighbors = list(grid.neighbors(0, 0))

    assert all(grid.is_valid(x, y) for x, y, _ in neighbors)
    assert sorted((x, y) for x, y, _ in neighbors) == [(0, 1), (0, 2), (1, 0), (1, 1), (2, 0)]
    kinds = [s for _, _, s in neighbors]
    assert kinds.count(SpringType.STRUCTURAL) == 2
    assert kinds.count(SpringType.SHEAR) == 1
    assert kinds.count(SpringType.BEND) == 2


def test_single_row_has_no_vertical_neighbors():
    grid = GridShape(4, 1)
    assert sorted((x, y) for x, y, _ in grid.neighbors(1, 0)) == [(0, 0), (2, 0), (3, 0)]
