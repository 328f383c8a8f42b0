"""Unit tests for scene-level intersection.

Tests cover:
- Primitive table storage and counts
- Empty scene misses
- Closest hit selection across spheres and planes
- Tie-breaking by table order
- Material ID propagation
- Capacity limits
"""

import pytest
import taichi as ti


def _make_scene_kernel():
    from pathtracer.core.ray import make_ray, vec3
    from pathtracer.scene.intersection import intersect_scene

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(origin: vec3, direction: vec3):
        collision = intersect_scene(make_ray(origin, direction))
        hit[None] = collision.hit
        t_val[None] = collision.t
        normal[None] = collision.normal
        material_id[None] = collision.material_id

    def run(origin, direction):
        test_kernel(vec3(*origin), vec3(*direction))
        n = normal[None]
        return hit[None], t_val[None], (n[0], n[1], n[2]), material_id[None]

    return run


class TestPrimitiveStorage:
    """Tests for the primitive table."""

    def test_add_primitives_returns_indices(self):
        """Test that spheres and planes share one ordered table."""
        from pathtracer.scene.intersection import add_plane, add_sphere, get_primitive_count

        assert add_sphere((0.0, 0.0, 5.0), 1.0, 0) == 0
        assert add_plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 0) == 1
        assert add_sphere((2.0, 0.0, 5.0), 0.5, 0) == 2
        assert get_primitive_count() == 3

    def test_clear_scene(self):
        """Test that clearing resets the primitive count."""
        from pathtracer.scene.intersection import add_sphere, clear_scene, get_primitive_count

        add_sphere((0.0, 0.0, 5.0), 1.0)
        clear_scene()
        assert get_primitive_count() == 0

    def test_capacity_exceeded(self):
        """Test that adding past MAX_PRIMITIVES raises RuntimeError."""
        from pathtracer.scene import intersection

        intersection.num_primitives[None] = intersection.MAX_PRIMITIVES
        with pytest.raises(RuntimeError):
            intersection.add_sphere((0.0, 0.0, 0.0), 1.0)
        with pytest.raises(RuntimeError):
            intersection.add_plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0))


class TestSceneIntersection:
    """Tests for intersect_scene."""

    def test_empty_scene_misses(self):
        """Test that every ray misses an empty scene."""
        run = _make_scene_kernel()
        hit, _, _, material_id = run((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))

        assert hit == 0
        assert material_id == -1

    def test_closest_sphere_wins(self):
        """Test that the nearest of several spheres is reported."""
        from pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 10.0), 1.0, 7)
        add_sphere((0.0, 0.0, 5.0), 1.0, 3)

        run = _make_scene_kernel()
        hit, t, normal, material_id = run((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))

        assert hit == 1
        assert t == pytest.approx(4.0, abs=1e-5)
        assert normal == pytest.approx((0.0, 0.0, -1.0), abs=1e-5)
        assert material_id == 3

    def test_sphere_in_front_of_plane(self):
        """Test mixed primitives: a sphere resting on the ground plane."""
        from pathtracer.scene.intersection import add_plane, add_sphere

        add_plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 1)
        add_sphere((0.0, 1.0, 0.0), 1.0, 2)

        run = _make_scene_kernel()

        # Straight down onto the sphere top
        hit, t, _, material_id = run((0.0, 5.0, 0.0), (0.0, -1.0, 0.0))
        assert hit == 1
        assert t == pytest.approx(3.0, abs=1e-5)
        assert material_id == 2

        # Beside the sphere onto the plane
        hit, t, normal, material_id = run((3.0, 5.0, 0.0), (0.0, -1.0, 0.0))
        assert hit == 1
        assert t == pytest.approx(5.0, abs=1e-5)
        assert normal == pytest.approx((0.0, 1.0, 0.0))
        assert material_id == 1

    def test_equal_distance_keeps_first(self):
        """Test that ties are resolved in favour of the earlier primitive."""
        from pathtracer.scene.intersection import add_plane

        add_plane((0.0, 0.0, 2.0), (0.0, 0.0, 1.0), 4)
        add_plane((0.0, 0.0, 2.0), (0.0, 0.0, -1.0), 5)

        run = _make_scene_kernel()
        hit, t, _, material_id = run((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))

        assert hit == 1
        assert t == pytest.approx(2.0)
        assert material_id == 4

    def test_miss_beside_all_geometry(self):
        """Test a ray passing every primitive."""
        from pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 5.0), 1.0, 0)
        add_sphere((0.0, 3.0, 5.0), 1.0, 0)

        run = _make_scene_kernel()
        hit, _, _, _ = run((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0
