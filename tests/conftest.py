from __future__ import annotations

import numpy as np
import pytest

from ctem_dataset_generation.config import DatasetConfig


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def small_config(tmp_path) -> DatasetConfig:
    return DatasetConfig(
        num_samples=6,
        img_width=64,
        img_height=48,
        n_circles_min=2,
        n_circles_max=5,
        radius_min=4,
        radius_max=10,
        output_dir=str(tmp_path / "dataset"),
        train_split=0.5,
        val_split=0.25,
        seed=7,
    )
