"""
Grayscale image rendering with a CTEM-like look.

Noisy bright background, one radially shaded layer per circle, composited by
pixel-wise minimum ("darker wins"), then a light Gaussian blur.
"""
import numpy as np
from scipy.ndimage import gaussian_filter

from ctem_dataset_generation.config import RENDER_CONFIG
from ctem_dataset_generation.shapes import disk_window, draw_circle_gradient


def to_uint8(image):
    """Round to nearest and saturate to [0, 255]."""
    return np.clip(np.rint(image), 0, 255).astype(np.uint8)


class ImageRenderer:
    """Renders scenes into 8-bit single-channel images."""

    def __init__(self, width, height, add_texture=True, add_background_noise=True):
        self.width = width
        self.height = height
        self.add_texture = add_texture
        self.add_background_noise = add_background_noise
        self.config = RENDER_CONFIG

    def render_background(self, rng):
        """Per-pixel N(180, 15) noise, or flat 180 when noise is disabled."""
        shape = (self.height, self.width)
        if self.add_background_noise:
            return rng.normal(self.config['background_mean'], self.config['background_std'], size=shape)
        return np.full(shape, self.config['background_mean'], dtype=np.float64)

    def composite(self, canvas, scene, rng):
        """
        Composite every circle onto canvas in place, keeping the darker value.

        Only pixels inside a circle's disk are considered, so the result is
        never brighter than the canvas it started from. Min is order
        independent; circle order only matters for the random texture draws.
        """
        for circle in scene:
            window = disk_window(circle, self.width, self.height)
            if window is None:
                continue
            rows, cols, inside, dist = window
            layer = draw_circle_gradient(circle, dist, inside, rng, self.add_texture, self.config)
            region = canvas[rows, cols]
            region[inside] = np.minimum(region[inside], layer[inside])
        return canvas

    def blur(self, image):
        # sigma 0.5 with truncate 2.0 gives a 3x3 kernel; 'mirror' is reflect-101
        blurred = gaussian_filter(image.astype(np.float64),
                                  sigma=self.config['blur_sigma'],
                                  truncate=self.config['blur_truncate'],
                                  mode='mirror')
        return to_uint8(blurred)

    def render(self, scene, rng):
        canvas = self.render_background(rng)
        self.composite(canvas, scene, rng)
        return self.blur(to_uint8(canvas))


def render_image(scene, width, height, rng, add_texture=True, add_background_noise=True):
    """Render scene to a (height, width) uint8 image."""
    renderer = ImageRenderer(width, height, add_texture=add_texture,
                             add_background_noise=add_background_noise)
    return renderer.render(scene, rng)
