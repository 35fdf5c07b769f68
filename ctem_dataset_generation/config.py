"""
Configuration for synthetic CTEM-style instance segmentation dataset generation.
"""
import json
import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Dict, Optional

# Dataset configuration (canonical dataset)
DATASET_CONFIG = {
    'num_samples': 5000,
    'img_width': 512,
    'img_height': 512,
    'n_circles_min': 10,
    'n_circles_max': 30,
    'radius_min': 15,
    'radius_max': 40,
    'output_dir': 'ctem_instance_dataset',
    'train_split': 0.7,
    'val_split': 0.15,  # test gets the remainder
    'add_realistic_texture': True,
    'add_background_noise': True,
    'seed': None,  # None -> fresh OS entropy
}

# Scene sampling parameters
SCENE_CONFIG = {
    'intensity_min': 30,   # darkest circle
    'intensity_max': 150,  # lightest circle
}

# Rendering parameters (CTEM-like look)
RENDER_CONFIG = {
    'background_mean': 180.0,
    'background_std': 15.0,
    'texture_std': 5.0,
    'gradient_center': 0.7,  # center is 70% of intensity
    'gradient_slope': 0.3,   # edge reaches 100%
    'blur_sigma': 0.5,
    'blur_truncate': 2.0,    # radius 1 -> 3x3 kernel at sigma 0.5
}

SPLITS = ('train', 'val', 'test')
SUBDIRS = ('images', 'masks', 'annotations')

# Mask labels are id + 1 in a 16-bit image
MAX_INSTANCES = 65535


class InvalidConfigurationError(ValueError):
    """Raised when a configuration cannot produce a valid dataset."""


@dataclass(frozen=True)
class DatasetConfig:
    num_samples: int = DATASET_CONFIG['num_samples']
    img_width: int = DATASET_CONFIG['img_width']
    img_height: int = DATASET_CONFIG['img_height']
    n_circles_min: int = DATASET_CONFIG['n_circles_min']
    n_circles_max: int = DATASET_CONFIG['n_circles_max']
    radius_min: int = DATASET_CONFIG['radius_min']
    radius_max: int = DATASET_CONFIG['radius_max']
    output_dir: str = DATASET_CONFIG['output_dir']
    train_split: float = DATASET_CONFIG['train_split']
    val_split: float = DATASET_CONFIG['val_split']
    add_realistic_texture: bool = DATASET_CONFIG['add_realistic_texture']
    add_background_noise: bool = DATASET_CONFIG['add_background_noise']
    seed: Optional[int] = DATASET_CONFIG['seed']

    @classmethod
    def from_dict(cls, values: Dict) -> 'DatasetConfig':
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise InvalidConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**values)

    def to_dict(self) -> Dict:
        return asdict(self)

    @property
    def test_split(self) -> float:
        return max(0.0, 1.0 - self.train_split - self.val_split)

    def validate(self) -> 'DatasetConfig':
        """Check structural constraints; returns self so calls can be chained."""
        for name in ('num_samples', 'img_width', 'img_height', 'n_circles_min',
                     'n_circles_max', 'radius_min', 'radius_max'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfigurationError(f"{name} must be an integer, got {value!r}")

        if self.num_samples <= 0:
            raise InvalidConfigurationError(f"num_samples must be > 0, got {self.num_samples}")
        if self.img_width <= 0 or self.img_height <= 0:
            raise InvalidConfigurationError(
                f"Image size must be positive, got {self.img_width}x{self.img_height}")
        if not 0 <= self.n_circles_min <= self.n_circles_max:
            raise InvalidConfigurationError(
                f"Need 0 <= n_circles_min <= n_circles_max, got {self.n_circles_min}..{self.n_circles_max}")
        if self.n_circles_max > MAX_INSTANCES:
            raise InvalidConfigurationError(
                f"n_circles_max={self.n_circles_max} does not fit 16-bit mask labels (max {MAX_INSTANCES})")
        if not 1 <= self.radius_min <= self.radius_max:
            raise InvalidConfigurationError(
                f"Need 1 <= radius_min <= radius_max, got {self.radius_min}..{self.radius_max}")
        if 2 * self.radius_max > min(self.img_width, self.img_height):
            raise InvalidConfigurationError(
                f"radius_max={self.radius_max} does not fit in a "
                f"{self.img_width}x{self.img_height} image")

        for name in ('train_split', 'val_split'):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or not 0.0 <= value <= 1.0:
                raise InvalidConfigurationError(f"{name} must be within [0, 1], got {value!r}")
        if self.train_split + self.val_split > 1.0:
            raise InvalidConfigurationError(
                f"train_split + val_split must be <= 1, got {self.train_split} + {self.val_split}")

        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int) or self.seed < 0):
            raise InvalidConfigurationError(f"seed must be a non-negative integer, got {self.seed!r}")
        if not str(self.output_dir):
            raise InvalidConfigurationError("output_dir must not be empty")
        return self


def load_config(path=None, overrides=None) -> DatasetConfig:
    """
    Build a DatasetConfig from defaults, an optional JSON file and CLI overrides.

    Args:
        path: JSON file with a subset of DatasetConfig keys (optional).
        overrides: dict of values that win over the file; None values are ignored.

    Returns:
        DatasetConfig: validated configuration.

    Raises:
        InvalidConfigurationError: on unknown keys, malformed JSON or bad values.
        OSError: if the file cannot be read.
    """
    values = {}
    if path is not None:
        with open(Path(path), 'r') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise InvalidConfigurationError(f"Malformed config file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise InvalidConfigurationError(f"Config file {path} must hold a JSON object")
        values.update(data)

    if overrides:
        values.update({k: v for k, v in overrides.items() if v is not None})

    return DatasetConfig.from_dict(values).validate()
