"""
Scene sampling: random circle placement with radius-aware bounds.
"""
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from ctem_dataset_generation.config import SCENE_CONFIG, InvalidConfigurationError


@dataclass(frozen=True)
class Circle:
    """One filled circle of a scene. Mask label is id + 1."""
    id: int
    x: int
    y: int
    radius: int
    intensity: int

    @property
    def color(self) -> Tuple[int, int, int]:
        # gray triple, same information as intensity
        return (self.intensity, self.intensity, self.intensity)

    @property
    def label(self) -> int:
        return self.id + 1


Scene = List[Circle]


def _randint(rng, low, high):
    """Inclusive uniform integer in [low, high]."""
    return int(rng.integers(low, high, endpoint=True))


class SceneGenerator:
    """Generates scenes of randomly placed, possibly overlapping circles."""

    def __init__(self, config):
        self.config = config
        self.scene_config = SCENE_CONFIG

    def generate_scene(self, rng: np.random.Generator) -> Scene:
        """Sample the circle count, then each circle in draw order."""
        cfg = self.config
        num_circles = _randint(rng, cfg.n_circles_min, cfg.n_circles_max)
        return [self._place_circle(rng, i) for i in range(num_circles)]

    def _place_circle(self, rng, circle_id):
        cfg = self.config
        radius = _randint(rng, cfg.radius_min, cfg.radius_max)
        intensity = _randint(rng, self.scene_config['intensity_min'],
                             self.scene_config['intensity_max'])

        if radius > cfg.img_width - radius or radius > cfg.img_height - radius:
            raise InvalidConfigurationError(
                f"Circle of radius {radius} cannot be placed in a "
                f"{cfg.img_width}x{cfg.img_height} image")

        # No overlap rejection: overlapping instances are the point of the dataset
        x = _randint(rng, radius, cfg.img_width - radius)
        y = _randint(rng, radius, cfg.img_height - radius)
        return Circle(id=circle_id, x=x, y=y, radius=radius, intensity=intensity)


def sample_scene(config, rng: np.random.Generator) -> Scene:
    return SceneGenerator(config).generate_scene(rng)
