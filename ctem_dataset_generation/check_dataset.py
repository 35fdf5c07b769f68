"""
Quick check: validate a generated dataset (images, masks, annotations, splits).
Usage: python -m ctem_dataset_generation.check_dataset --root ctem_instance_dataset
"""
import argparse
import json
import sys
from pathlib import Path

import numpy as np
from PIL import Image

from ctem_dataset_generation.annotations import AnnotationLoader, read_annotations
from ctem_dataset_generation.config import SPLITS
from ctem_dataset_generation.utils import get_split_name, sample_paths


MASK_MODES = ('I;16', 'I')  # older Pillow opens 16-bit PNGs as 'I'


def load_gray_png(path):
    """Return (mode, array) of a PNG, the array in its native bit depth."""
    with Image.open(path) as img:
        if img.format != 'PNG':
            raise ValueError(f"{Path(path).name} is {img.format}, not PNG")
        return img.mode, np.array(img)


def check_sample(root, split, index, width, height, total=None, train_split=None, val_split=None):
    """Return a list of problems found for one sample (empty if consistent)."""
    problems = []
    paths = sample_paths(root, split, index)
    name = f"{split}/{index:06d}"

    for kind, path in paths.items():
        if not path.exists():
            problems.append(f"{name}: missing {kind} file {path.name}")
    if problems:
        return problems

    try:
        image_mode, image = load_gray_png(paths['image'])
        mask_mode, mask = load_gray_png(paths['mask'])
    except (OSError, ValueError) as exc:
        # UnidentifiedImageError is an OSError
        return [f"{name}: unreadable PNG ({exc})"]

    if image_mode != 'L':
        problems.append(f"{name}: image is not 8-bit grayscale (mode {image_mode})")
    if mask_mode not in MASK_MODES:
        problems.append(f"{name}: mask is not 16-bit grayscale (mode {mask_mode})")
    if image.shape != (height, width):
        problems.append(f"{name}: image shape {image.shape} != {(height, width)}")
    if mask.shape != (height, width):
        problems.append(f"{name}: mask shape {mask.shape} != {(height, width)}")

    try:
        scene = read_annotations(paths['annotation'])
    except ValueError as exc:
        # includes JSONDecodeError and UnicodeDecodeError
        return problems + [f"{name}: bad annotation ({exc})"]

    for c in scene:
        if not (c.radius <= c.x <= width - c.radius and c.radius <= c.y <= height - c.radius):
            problems.append(f"{name}: circle {c.id} at ({c.x}, {c.y}) r={c.radius} leaves the image")

    labels = set(np.unique(mask).tolist()) - {0}
    unknown = labels - {c.label for c in scene}
    if unknown:
        problems.append(f"{name}: mask labels {sorted(unknown)} have no annotated circle")

    if total is not None:
        expected = get_split_name(index, total, train_split, val_split)
        if expected != split:
            problems.append(f"{name}: sample belongs to split '{expected}'")
    return problems


def check_dataset(root):
    """
    Check every sample found under root against metadata.json.

    Returns:
        list of problem strings; empty when the dataset is consistent.
    """
    root = Path(root)
    metadata_file = root / 'metadata.json'
    if not metadata_file.exists():
        return [f"metadata.json not found in {root}"]
    with open(metadata_file) as f:
        metadata = json.load(f)

    cfg = metadata['config']
    total = metadata['num_samples']
    problems = []
    seen = set()
    for split in SPLITS:
        for anno in sorted((root / split / 'annotations').glob('anno_*.json')):
            index = AnnotationLoader.extract_index(anno.name)
            seen.add(index)
            problems.extend(check_sample(root, split, index, cfg['img_width'], cfg['img_height'],
                                         total, cfg['train_split'], cfg['val_split']))

    missing = set(range(total)) - seen
    if missing:
        problems.append(f"{len(missing)} samples missing, first: {min(missing):06d}")
    return problems


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Validate a generated instance dataset")
    parser.add_argument("--root", default="ctem_instance_dataset", help="Dataset root")
    args = parser.parse_args()

    found = check_dataset(args.root)
    if found:
        print(f" {len(found)} PROBLEMS:")
        for p in found:
            print(f"  {p}")
        sys.exit(1)
    print(" Dataset consistent!")
