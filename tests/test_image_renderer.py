from __future__ import annotations

import numpy as np
import pytest

from ctem_dataset_generation.config import DatasetConfig
from ctem_dataset_generation.image_renderer import ImageRenderer, render_image, to_uint8
from ctem_dataset_generation.scene_generator import Circle, sample_scene


def _flat_renderer(width=64, height=64) -> ImageRenderer:
    return ImageRenderer(width, height, add_texture=False, add_background_noise=False)


def test_output_is_single_channel_uint8(rng) -> None:
    cfg = DatasetConfig(img_width=80, img_height=40, radius_min=3, radius_max=12)
    image = render_image(sample_scene(cfg, rng), 80, 40, rng)
    assert image.shape == (40, 80)
    assert image.dtype == np.uint8


def test_empty_scene_is_noise_around_background(rng) -> None:
    image = render_image([], 64, 64, rng)
    assert abs(float(image.mean()) - 180.0) < 2.0
    # blur reduces but does not remove the noise
    assert 3.0 < float(image.std()) < 15.0


def test_flat_background_without_noise(rng) -> None:
    image = render_image([], 32, 32, rng, add_texture=False, add_background_noise=False)
    assert (image == 180).all()


def test_radial_gradient_darker_at_center(rng) -> None:
    renderer = _flat_renderer()
    canvas = renderer.render_background(rng)
    renderer.composite(canvas, [Circle(id=0, x=32, y=32, radius=10, intensity=100)], rng)

    assert canvas[32, 32] == pytest.approx(70.0)
    assert canvas[32, 42] == pytest.approx(100.0)
    assert canvas[32, 37] == pytest.approx(85.0)
    assert canvas[32, 43] == pytest.approx(180.0)
    row = canvas[32, 32:43]
    assert (np.diff(row) > 0).all()


def test_compositing_never_lightens(rng) -> None:
    cfg = DatasetConfig(img_width=96, img_height=96, n_circles_min=10, n_circles_max=20,
                        radius_min=5, radius_max=25)
    renderer = ImageRenderer(96, 96)
    scene = sample_scene(cfg, rng)
    background = renderer.render_background(rng)
    canvas = renderer.composite(background.copy(), scene, rng)

    assert (canvas <= background).all()
    yy, xx = np.mgrid[:96, :96]
    painted = np.zeros((96, 96), dtype=bool)
    for c in scene:
        painted |= (xx - c.x) ** 2 + (yy - c.y) ** 2 <= c.radius ** 2
    np.testing.assert_array_equal(canvas[~painted], background[~painted])


def test_overlap_keeps_darker_value_independent_of_order(rng) -> None:
    dark = Circle(id=0, x=25, y=32, radius=12, intensity=40)
    light = Circle(id=1, x=38, y=32, radius=12, intensity=140)
    renderer = _flat_renderer()

    forward = renderer.composite(renderer.render_background(rng), [dark, light], rng)
    backward = renderer.composite(renderer.render_background(rng), [light, dark], rng)
    np.testing.assert_array_equal(forward, backward)

    # Center of the dark circle lies inside the light circle too
    assert forward[32, 31] == pytest.approx(min(40 * (0.7 + 0.3 * 6 / 12), 140 * (0.7 + 0.3 * 7 / 12)))


def test_texture_clamped_to_byte_range() -> None:
    renderer = ImageRenderer(64, 64, add_texture=True, add_background_noise=False)
    renderer.config = dict(renderer.config, texture_std=500.0)
    rng = np.random.default_rng(3)
    canvas = renderer.composite(renderer.render_background(rng),
                                [Circle(id=0, x=32, y=32, radius=20, intensity=30)], rng)
    assert canvas.min() >= 0.0
    assert canvas.max() <= 180.0


def test_same_seed_same_image() -> None:
    cfg = DatasetConfig(img_width=64, img_height=64, radius_min=4, radius_max=12)
    scene = sample_scene(cfg, np.random.default_rng(5))
    a = render_image(scene, 64, 64, np.random.default_rng(11))
    b = render_image(scene, 64, 64, np.random.default_rng(11))
    np.testing.assert_array_equal(a, b)


def test_to_uint8_rounds_and_saturates() -> None:
    values = np.array([-4.0, 0.4, 0.6, 127.5, 254.6, 300.0])
    np.testing.assert_array_equal(to_uint8(values), np.array([0, 0, 1, 128, 255, 255], dtype=np.uint8))


def test_blur_is_3x3(rng) -> None:
    renderer = _flat_renderer(9, 9)
    impulse = np.zeros((9, 9), dtype=np.uint8)
    impulse[4, 4] = 255
    blurred = renderer.blur(impulse)
    assert blurred[4, 4] > 0
    assert blurred[3:6, 3:6].all()
    assert blurred.sum() - blurred[3:6, 3:6].sum() == 0
