"""Unit tests for the material model.

Tests cover:
- Material validation and the material table
- Fresnel reflectance bounds and special cases
- Orientation of the boundary (entering vs leaving)
- The transmit decision (opaque, total internal reflection, Fresnel draw)
- Transmitted and reflected directions
"""

import math

import pytest
import taichi as ti


def _vec(v):
    return (float(v[0]), float(v[1]), float(v[2]))


class TestMaterialTable:
    """Tests for Material validation and the material table."""

    def test_add_material_returns_sequential_ids(self):
        """Test that material IDs are assigned in order."""
        from pathtracer.materials.material import Material, add_material, get_material_count

        assert add_material(Material(colour=(0.5, 0.5, 0.5))) == 0
        assert add_material(Material(luminance=2.0)) == 1
        assert get_material_count() == 2

    def test_is_valid_material_id(self):
        """Test material ID range checks."""
        from pathtracer.materials.material import Material, add_material, is_valid_material_id

        add_material(Material())
        assert is_valid_material_id(0)
        assert not is_valid_material_id(1)
        assert not is_valid_material_id(-1)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"diffusion": -0.1},
            {"diffusion": 1.5},
            {"refractive_index": -1.0},
            {"luminance": -0.5},
            {"colour": (float("nan"), 0.0, 0.0)},
            {"colour": (1.0, 1.0)},
        ],
    )
    def test_invalid_material_rejected(self, kwargs):
        """Test that out-of-range material values raise ValueError."""
        from pathtracer.materials.material import Material, add_material, get_material_count

        with pytest.raises(ValueError):
            add_material(Material(**kwargs))
        assert get_material_count() == 0

    def test_colour_above_one_allowed(self):
        """Test that colours are not clamped to [0, 1]."""
        from pathtracer.materials.material import Material, add_material

        assert add_material(Material(colour=(2.0, 1.0, 0.5))) == 0

    def test_capacity_exceeded(self):
        """Test that adding past MAX_MATERIALS raises RuntimeError."""
        from pathtracer.materials import material

        material.num_materials[None] = material.MAX_MATERIALS
        with pytest.raises(RuntimeError):
            material.add_material(material.Material())

    def test_get_material_and_emission(self):
        """Test reading a material back on the device."""
        from pathtracer.materials.material import (
            Material,
            add_material,
            emitted_radiance,
            get_material,
        )

        add_material(Material())
        mat_id = add_material(
            Material(colour=(0.2, 0.4, 0.8), diffusion=0.25, refractive_index=1.5, luminance=3.0)
        )

        colour = ti.field(dtype=ti.math.vec3, shape=())
        emission = ti.field(dtype=ti.math.vec3, shape=())
        scalars = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel(material_id: ti.i32):
            mat = get_material(material_id)
            colour[None] = mat.colour
            emission[None] = emitted_radiance(mat)
            scalars[0] = mat.diffusion
            scalars[1] = mat.refractive_index
            scalars[2] = mat.luminance

        test_kernel(mat_id)
        assert _vec(colour[None]) == pytest.approx((0.2, 0.4, 0.8))
        assert _vec(emission[None]) == pytest.approx((0.6, 1.2, 2.4), rel=1e-6)
        assert scalars[0] == pytest.approx(0.25)
        assert scalars[1] == pytest.approx(1.5)
        assert scalars[2] == pytest.approx(3.0)


class TestFresnel:
    """Tests for fresnel_reflectance and Snell's law."""

    def test_reflectance_zero_for_matched_media(self):
        """Test R = 0 at normal incidence when n1 == n2."""
        from pathtracer.materials.dielectric import fresnel_reflectance

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = fresnel_reflectance(1.5, 1.5, 0.0, 0.0)

        test_kernel()
        assert result[None] == pytest.approx(0.0, abs=1e-7)

    def test_reflectance_at_normal_incidence(self):
        """Test R = ((n1 - n2) / (n1 + n2))^2 at normal incidence."""
        from pathtracer.materials.dielectric import fresnel_reflectance

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = fresnel_reflectance(1.0, 1.5, 0.0, 0.0)

        test_kernel()
        assert result[None] == pytest.approx(0.04, abs=1e-6)

    @pytest.mark.parametrize("n1, n2", [(1.0, 1.5), (1.5, 1.0), (1.0, 3.0), (3.0, 1.0)])
    def test_reflectance_in_unit_interval(self, n1, n2):
        """Test 0 <= R <= 1 for every non-TIR incidence angle."""
        from pathtracer.materials.dielectric import fresnel_reflectance, transmission_sine

        count = 64
        result = ti.field(dtype=ti.f32, shape=count)
        valid = ti.field(dtype=ti.i32, shape=count)

        half_pi = math.pi / 2.0

        @ti.kernel
        def test_kernel(n1: ti.f32, n2: ti.f32):
            for i in range(count):
                incidence = (ti.cast(i, ti.f32) + 0.5) / count * half_pi
                sin_t = transmission_sine(n1, n2, incidence)
                valid[i] = 0
                result[i] = 0.0
                if sin_t <= 1.0:
                    valid[i] = 1
                    result[i] = fresnel_reflectance(n1, n2, incidence, ti.asin(sin_t))

        test_kernel(n1, n2)
        values = result.to_numpy()[valid.to_numpy() == 1]
        assert len(values) > 0
        assert (values >= 0.0).all()
        assert (values <= 1.0 + 1e-6).all()

    def test_transmission_sine(self):
        """Test Snell's law for the sine of the transmission angle."""
        from pathtracer.materials.dielectric import transmission_sine

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(incidence: ti.f32):
            result[None] = transmission_sine(1.0, 2.0, incidence)

        test_kernel(math.pi / 6.0)
        assert result[None] == pytest.approx(0.25, abs=1e-6)


class TestOrientation:
    """Tests for orient_to_surface."""

    def test_entering_and_leaving(self):
        """Test the media swap between entering and leaving rays."""
        from pathtracer.core.ray import vec3
        from pathtracer.materials.dielectric import orient_to_surface

        media = ti.field(dtype=ti.f32, shape=4)
        normals = ti.Vector.field(3, dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            n1, n2, directed = orient_to_surface(normal, vec3(0.0, -1.0, 0.0), 1.5)
            media[0] = n1
            media[1] = n2
            normals[0] = directed
            m1, m2, flipped = orient_to_surface(normal, vec3(0.0, 1.0, 0.0), 1.5)
            media[2] = m1
            media[3] = m2
            normals[1] = flipped

        test_kernel()
        assert (media[0], media[1]) == pytest.approx((1.0, 1.5))
        assert _vec(normals[0]) == pytest.approx((0.0, -1.0, 0.0))
        assert (media[2], media[3]) == pytest.approx((1.5, 1.0))
        assert _vec(normals[1]) == pytest.approx((0.0, 1.0, 0.0))


def _make_choice_kernel(count):
    from pathtracer.core.ray import vec3
    from pathtracer.materials.dielectric import choose_transmission
    from pathtracer.materials.material import SurfaceMaterial

    transmits = ti.field(dtype=ti.i32, shape=count)

    @ti.kernel
    def test_kernel(ior: ti.f32, normal: vec3, direction: vec3, rng: ti.template()):
        ti.loop_config(serialize=True)
        for i in range(count):
            material = SurfaceMaterial(
                colour=vec3(1.0, 1.0, 1.0),
                diffusion=0.0,
                refractive_index=ior,
                luminance=0.0,
            )
            transmit, angle, directed = choose_transmission(material, normal, direction, rng)
            transmits[i] = transmit

    return test_kernel, transmits


def _make_advance_kernel(count):
    from pathtracer.core.sampler import next_uniform

    out = ti.field(dtype=ti.f32, shape=count)

    @ti.kernel
    def advance(rng: ti.template()):
        ti.loop_config(serialize=True)
        for i in range(count):
            out[i] = next_uniform(rng)

    return advance, out


class TestTransmissionChoice:
    """Tests for choose_transmission."""

    @pytest.mark.parametrize(
        "direction",
        [(0.0, 0.0, 1.0), (0.6, 0.0, 0.8)],
        ids=["head_on", "oblique"],
    )
    def test_entering_opaque_reflects_without_draws(self, direction):
        """Test that a ray entering an opaque surface leaves the stream alone."""
        from pathtracer.core.ray import vec3
        from pathtracer.core.sampler import RandomStream

        stream = RandomStream()
        stream.seed(1)
        before = stream.get_state()

        kernel, transmits = _make_choice_kernel(32)
        kernel(0.0, vec3(0.0, 0.0, -1.0), vec3(*direction), stream.state)

        assert transmits.to_numpy().sum() == 0
        assert stream.get_state() == before

    def test_leaving_opaque_reflects_after_one_draw(self):
        """Test that a ray leaving an opaque surface has R = 1 and draws once."""
        from pathtracer.core.ray import vec3
        from pathtracer.core.sampler import RandomStream

        count = 32
        stream = RandomStream()
        stream.seed(1)
        reference = RandomStream()
        reference.seed(1)

        kernel, transmits = _make_choice_kernel(count)
        kernel(0.0, vec3(0.0, 0.0, 1.0), vec3(0.3, 0.0, 1.0), stream.state)

        advance, _ = _make_advance_kernel(count)
        advance(reference.state)

        assert transmits.to_numpy().sum() == 0
        assert stream.get_state() == reference.get_state()

    def test_opaque_head_on_is_total_reflection(self):
        """Test that n2 = 0 at normal incidence gives sin_t > 1, not NaN."""
        from pathtracer.materials.dielectric import transmission_sine

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = transmission_sine(1.0, 0.0, 0.0)

        test_kernel()
        assert not math.isnan(result[None])
        assert result[None] > 1.0

    def test_total_internal_reflection_always_reflects(self):
        """Test that a grazing ray leaving a dense medium never transmits."""
        from pathtracer.core.ray import vec3
        from pathtracer.core.sampler import RandomStream

        stream = RandomStream()
        stream.seed(2)
        before = stream.get_state()

        # Leaving glass at 60 degrees from the normal: sin_t = 1.5 * 0.866 > 1
        direction = vec3(math.sin(math.pi / 3), math.cos(math.pi / 3), 0.0)
        kernel, transmits = _make_choice_kernel(64)
        kernel(1.5, vec3(0.0, 1.0, 0.0), direction, stream.state)

        assert transmits.to_numpy().sum() == 0
        assert stream.get_state() == before

    def test_normal_incidence_mostly_transmits(self):
        """Test that about 1 - R = 96% of paths enter glass head-on."""
        from pathtracer.core.ray import vec3
        from pathtracer.core.sampler import RandomStream

        stream = RandomStream()
        stream.seed(3)

        kernel, transmits = _make_choice_kernel(4000)
        kernel(1.5, vec3(0.0, 0.0, 1.0), vec3(0.0, 0.0, -1.0), stream.state)

        fraction = transmits.to_numpy().mean()
        assert 0.94 < fraction < 0.98


class TestDirections:
    """Tests for transmitted_direction and reflected_direction."""

    def test_transmitted_direction_normal_incidence(self):
        """Test that a head-on ray continues along the directed normal."""
        from pathtracer.core.ray import vec3
        from pathtracer.materials.dielectric import transmitted_direction

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = transmitted_direction(
                vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, -1.0), 0.0
            )

        test_kernel()
        assert _vec(result[None]) == pytest.approx((0.0, 0.0, -1.0))

    def test_transmitted_direction_angle(self):
        """Test that the transmitted ray makes the refraction angle with the normal."""
        from pathtracer.core.ray import angle_between, vec3
        from pathtracer.materials.dielectric import transmitted_direction

        result = ti.field(dtype=ti.math.vec3, shape=())
        angle = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(refraction_angle: ti.f32):
            directed = vec3(0.0, -1.0, 0.0)
            direction = vec3(1.0, -1.0, 0.0)
            d = transmitted_direction(direction, directed, refraction_angle)
            result[None] = d
            angle[None] = angle_between(d, directed)

        test_kernel(0.3)
        r = result[None]
        assert math.sqrt(r[0] ** 2 + r[1] ** 2 + r[2] ** 2) == pytest.approx(1.0, abs=1e-5)
        assert angle[None] == pytest.approx(0.3, abs=1e-4)
        # The rotation stays in the plane of incidence
        assert r[2] == pytest.approx(0.0, abs=1e-6)

    def test_mirror_reflection_target(self):
        """Test that diffusion = 0 gives direction + 2 * normal."""
        from pathtracer.core.ray import vec3
        from pathtracer.core.sampler import RandomStream
        from pathtracer.materials.reflection import reflected_direction

        stream = RandomStream()
        stream.seed(4)
        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(rng: ti.template()):
            result[None] = reflected_direction(
                vec3(1.0, -1.0, 0.0),
                vec3(0.0, 1.0, 0.0),
                vec3(0.0, 0.0, 0.0),
                vec3(-1.0, 1.0, 0.0),
                0.0,
                rng,
            )

        test_kernel(stream.state)
        assert _vec(result[None]) == pytest.approx((1.0, 1.0, 0.0))

    @pytest.mark.parametrize("ray_origin_y, sign", [(5.0, 1.0), (-5.0, -1.0)])
    def test_diffuse_side_follows_ray_origin(self, ray_origin_y, sign):
        """Test that the diffuse target is pushed towards the incoming side."""
        from pathtracer.core.ray import vec3
        from pathtracer.core.sampler import RandomStream
        from pathtracer.materials.reflection import reflected_direction

        stream = RandomStream()
        stream.seed(5)
        count = 256
        results = ti.Vector.field(3, dtype=ti.f32, shape=count)

        @ti.kernel
        def test_kernel(origin_y: ti.f32, rng: ti.template()):
            ti.loop_config(serialize=True)
            for i in range(count):
                results[i] = reflected_direction(
                    vec3(0.0, -1.0, 0.0),
                    vec3(0.0, 1.0, 0.0),
                    vec3(0.0, 0.0, 0.0),
                    vec3(0.0, origin_y, 0.0),
                    1.0,
                    rng,
                )

        test_kernel(ray_origin_y, stream.state)
        y = results.to_numpy()[:, 1] * sign
        assert (y >= -1e-6).all()
