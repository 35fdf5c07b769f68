"""
Disk rasterization primitives shared by the mask and image renderers.
"""
import numpy as np


def disk_window(circle, width, height):
    """
    Locate the pixels covered by a filled circle.

    Only the circle's bounding box (clipped to the image) is examined, so
    unrelated pixels are never touched.

    Returns:
        (rows, cols, inside, dist): slices of the bounding box, a boolean
        array marking pixels with dx^2 + dy^2 <= r^2, and the Euclidean
        distance of every box pixel to the center.
        Returns None when the box lies fully outside the image.
    """
    y0 = max(0, circle.y - circle.radius)
    y1 = min(height - 1, circle.y + circle.radius)
    x0 = max(0, circle.x - circle.radius)
    x1 = min(width - 1, circle.x + circle.radius)
    if y0 > y1 or x0 > x1:
        return None

    yy, xx = np.ogrid[y0:y1 + 1, x0:x1 + 1]
    dy = yy - circle.y
    dx = xx - circle.x
    sq_dist = dx * dx + dy * dy
    inside = sq_dist <= circle.radius * circle.radius
    dist = np.sqrt(sq_dist.astype(np.float64))
    return slice(y0, y1 + 1), slice(x0, x1 + 1), inside, dist


def draw_circle_label(mask, circle):
    """Fill the circle with its instance label (later circles overwrite)."""
    height, width = mask.shape
    window = disk_window(circle, width, height)
    if window is None:
        return mask
    rows, cols, inside, _ = window
    mask[rows, cols][inside] = circle.label
    return mask


def draw_circle_gradient(circle, dist, inside, rng, add_texture, render_config):
    """
    Shade the disk of one circle: darker at the center, lighter at the rim.

    pixel = clamp(intensity * (0.7 + 0.3 * dist / r) + N(0, 5), 0, 255)

    Returns a float array of the bounding box shape; pixels outside the disk
    are 0 and must be ignored through `inside`.
    """
    layer = np.zeros(inside.shape, dtype=np.float64)
    normalized_dist = dist[inside] / circle.radius
    gradient_factor = render_config['gradient_center'] + render_config['gradient_slope'] * normalized_dist
    values = circle.intensity * gradient_factor
    if add_texture:
        values = values + rng.normal(0.0, render_config['texture_std'], size=values.shape)
    layer[inside] = np.clip(values, 0.0, 255.0)
    return layer
