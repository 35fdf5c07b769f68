"""
Instance mask rasterization.

Each circle is painted with label id + 1 into a 16-bit image, in scene order,
so that where circles overlap the later circle wins. 0 is background.
"""
import numpy as np

from ctem_dataset_generation.config import MAX_INSTANCES
from ctem_dataset_generation.shapes import draw_circle_label


def render_mask(scene, width, height):
    """Return a (height, width) uint16 instance mask for the scene."""
    if len(scene) > MAX_INSTANCES:
        raise ValueError(f"{len(scene)} circles do not fit in 16-bit labels")
    mask = np.zeros((height, width), dtype=np.uint16)
    for circle in scene:
        draw_circle_label(mask, circle)
    return mask
