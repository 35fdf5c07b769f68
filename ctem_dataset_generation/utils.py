"""
Utility functions for dataset generation: splits, layout and PNG output.
"""
from pathlib import Path

import numpy as np
from PIL import Image

from ctem_dataset_generation.config import SPLITS, SUBDIRS


class EncoderError(RuntimeError):
    """Raised when an array cannot be encoded as PNG."""


def get_split_name(index, total, train_split, val_split):
    """
    Map a sample index to 'train', 'val' or 'test'.

    Contiguous blocks: ratio = index / total is compared against the
    cumulative split fractions.
    """
    ratio = index / total
    if ratio < train_split:
        return 'train'
    if ratio < train_split + val_split:
        return 'val'
    return 'test'


def create_directory_structure(base_dir):
    """Create <base>/{train,val,test}/{images,masks,annotations}; existing dirs are fine."""
    base_dir = Path(base_dir)
    for split in SPLITS:
        for sub in SUBDIRS:
            (base_dir / split / sub).mkdir(parents=True, exist_ok=True)
    return base_dir


def sample_paths(base_dir, split, index):
    """Image, mask and annotation paths for one sample."""
    split_dir = Path(base_dir) / split
    filename = f'{index:06d}'
    return {
        'image': split_dir / 'images' / f'image_{filename}.png',
        'mask': split_dir / 'masks' / f'mask_{filename}.png',
        'annotation': split_dir / 'annotations' / f'anno_{filename}.json',
    }


def save_png(array, path):
    """
    Save a 2D uint8 (8-bit) or uint16 (16-bit) array as a grayscale PNG.

    Raises:
        EncoderError: If Pillow cannot encode the array.
        OSError: If the file cannot be written.
    """
    if array.ndim != 2 or array.dtype not in (np.uint8, np.uint16):
        raise EncoderError(f"Cannot encode array of shape {array.shape} and dtype {array.dtype} as {path}")
    try:
        img = Image.fromarray(array)
    except (TypeError, ValueError) as exc:
        raise EncoderError(f"Cannot encode {path}: {exc}") from exc

    with open(path, 'wb') as f:
        try:
            img.save(f, format='PNG')
        except (ValueError, KeyError) as exc:
            raise EncoderError(f"PNG encoding failed for {path}: {exc}") from exc
    return path
