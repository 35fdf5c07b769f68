"""
Preview one generated sample: image, instance mask and annotated outlines.
Usage: python -m ctem_dataset_generation.visualize_sample --root ctem_instance_dataset --index 0
"""
import argparse
from pathlib import Path

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Circle as CirclePatch
from PIL import Image

from ctem_dataset_generation.annotations import AnnotationLoader
from ctem_dataset_generation.utils import sample_paths


def plot_sample(root, index, output_path=None):
    root = Path(root)
    loader = AnnotationLoader(root)
    split = loader.find(index)
    if split is None:
        raise FileNotFoundError(f"Sample {index:06d} not found under {root}")

    paths = sample_paths(root, split, index)
    image = np.array(Image.open(paths['image']))
    mask = np.array(Image.open(paths['mask'])).astype(np.int64)
    scene = loader.get(split, index)

    fig, axes = plt.subplots(1, 3, figsize=(15, 5))

    axes[0].imshow(image, cmap='gray', vmin=0, vmax=255)
    axes[0].set_title(f'{split} / image_{index:06d}')

    # Background transparent, instances cycled through a qualitative map
    masked = np.ma.masked_equal(mask, 0)
    axes[1].imshow(np.zeros_like(image), cmap='gray', vmin=0, vmax=1)
    axes[1].imshow(masked % 20, cmap='tab20', vmin=0, vmax=19, interpolation='nearest')
    axes[1].set_title(f'Instance mask ({len(np.unique(mask)) - 1} visible)')

    axes[2].imshow(image, cmap='gray', vmin=0, vmax=255)
    for c in scene:
        axes[2].add_patch(CirclePatch((c.x, c.y), c.radius, fill=False, edgecolor='red', linewidth=1))
        axes[2].text(c.x, c.y, str(c.id), color='yellow', fontsize=7, ha='center', va='center')
    axes[2].set_title(f'Annotations ({len(scene)} circles)')

    for ax in axes:
        ax.axis('off')
    plt.tight_layout()

    if output_path is None:
        output_path = root / f'preview_{index:06d}.png'
    fig.savefig(output_path, dpi=100)
    plt.close(fig)
    return Path(output_path)


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--root", default="ctem_instance_dataset", help="Dataset root")
    parser.add_argument("--index", type=int, required=True, help="Sample index, e.g. 42")
    parser.add_argument("--out", default=None, help="Output PNG (default: <root>/preview_<index>.png)")
    args = parser.parse_args()
    saved = plot_sample(args.root, args.index, args.out)
    print(f"Preview saved: {saved}")
