"""
Main script to generate the full dataset.
Run: python -m ctem_dataset_generation
Run with custom settings: python -m ctem_dataset_generation --num_samples 200 --seed 7 --workers 4
"""
import argparse
import json
import sys
from multiprocessing import Pool
from pathlib import Path

import numpy as np
from tqdm import tqdm

from ctem_dataset_generation.annotations import write_annotations
from ctem_dataset_generation.config import SPLITS, InvalidConfigurationError, load_config
from ctem_dataset_generation.image_renderer import render_image
from ctem_dataset_generation.instance_mask import render_mask
from ctem_dataset_generation.scene_generator import sample_scene
from ctem_dataset_generation.utils import (
    EncoderError,
    create_directory_structure,
    get_split_name,
    sample_paths,
    save_png,
)

PROGRESS_EVERY = 100


def generate_sample(config, index, seed_seq):
    """
    Sample, render and save one sample.

    The generator built from seed_seq is the only randomness used, so the
    files for a given index depend only on (seed, index, config).

    Returns:
        (index, split)
    """
    rng = np.random.default_rng(seed_seq)
    scene = sample_scene(config, rng)
    mask = render_mask(scene, config.img_width, config.img_height)
    image = render_image(scene, config.img_width, config.img_height, rng,
                         add_texture=config.add_realistic_texture,
                         add_background_noise=config.add_background_noise)

    split = get_split_name(index, config.num_samples, config.train_split, config.val_split)
    paths = sample_paths(config.output_dir, split, index)
    save_png(image, paths['image'])
    save_png(mask, paths['mask'])  # 16-bit
    write_annotations(scene, paths['annotation'])
    return index, split


def _generate_sample_job(job):
    return generate_sample(*job)


def generate_metadata(config, entropy, splits):
    """Write metadata.json describing the generated dataset."""
    metadata = {
        'dataset_name': 'Synthetic CTEM Circle Instance Segmentation Dataset',
        'num_samples': config.num_samples,
        'seed_entropy': entropy,
        'splits': {
            split: {'count': len(indices), 'indices': sorted(indices)}
            for split, indices in splits.items()
        },
        'config': config.to_dict(),
    }
    metadata_file = Path(config.output_dir) / 'metadata.json'
    with open(metadata_file, 'w') as f:
        json.dump(metadata, f, indent=2)
        f.write('\n')
    return metadata_file


def generate_dataset(config, workers=1, show_progress=True):
    """
    Generate every sample of config into config.output_dir.

    Any I/O or encoder error aborts the run; already written samples are left
    in place.

    Returns:
        dict: split name -> list of sample indices.
    """
    config.validate()
    create_directory_structure(config.output_dir)

    root_seq = np.random.SeedSequence(config.seed)
    seed_seqs = root_seq.spawn(config.num_samples)
    print(f"🌱 Seed entropy: {root_seq.entropy}", flush=True)

    jobs = ((config, i, seed_seqs[i]) for i in range(config.num_samples))
    splits = {split: [] for split in SPLITS}

    def record(results):
        bar = tqdm(results, total=config.num_samples, disable=not show_progress)
        for done, (index, split) in enumerate(bar, start=1):
            splits[split].append(index)
            if done % PROGRESS_EVERY == 0:
                tqdm.write(f"Generated {done}/{config.num_samples} samples")

    if workers > 1:
        with Pool(processes=workers) as pool:
            record(pool.imap_unordered(_generate_sample_job, jobs, chunksize=8))
    else:
        record(map(_generate_sample_job, jobs))

    generate_metadata(config, root_seq.entropy, splits)
    print("Dataset generation complete!", flush=True)
    return splits


def build_parser():
    parser = argparse.ArgumentParser(description='Generate a synthetic circle instance segmentation dataset')
    parser.add_argument('--config', type=str, default=None,
                        help='JSON file with configuration values (CLI flags override it)')
    parser.add_argument('--num_samples', type=int, default=None,
                        help='Number of samples to generate (default: 5000)')
    parser.add_argument('--img_width', type=int, default=None, help='Image width (default: 512)')
    parser.add_argument('--img_height', type=int, default=None, help='Image height (default: 512)')
    parser.add_argument('--n_circles_min', type=int, default=None, help='Min circles per image (default: 10)')
    parser.add_argument('--n_circles_max', type=int, default=None, help='Max circles per image (default: 30)')
    parser.add_argument('--radius_min', type=int, default=None, help='Min radius (default: 15)')
    parser.add_argument('--radius_max', type=int, default=None, help='Max radius (default: 40)')
    parser.add_argument('--output_dir', type=str, default=None,
                        help='Output directory (default: ctem_instance_dataset)')
    parser.add_argument('--train_split', type=float, default=None, help='Train fraction (default: 0.7)')
    parser.add_argument('--val_split', type=float, default=None, help='Validation fraction (default: 0.15)')
    parser.add_argument('--no_texture', dest='add_realistic_texture', action='store_false', default=None,
                        help='Disable per-pixel texture noise inside circles')
    parser.add_argument('--no_background_noise', dest='add_background_noise', action='store_false', default=None,
                        help='Use a flat background instead of Gaussian noise')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed (default: fresh entropy, printed for reproduction)')
    parser.add_argument('--workers', type=int, default=1,
                        help='Number of worker processes (default: 1)')
    return parser


def main(argv=None):
    """Main generation pipeline. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    overrides = {k: v for k, v in vars(args).items() if k not in ('config', 'workers')}

    try:
        config = load_config(args.config, overrides)
        if args.workers < 1:
            raise InvalidConfigurationError(f"workers must be >= 1, got {args.workers}")
    except InvalidConfigurationError as exc:
        print(f"❌ Invalid configuration: {exc}", file=sys.stderr)
        return 2
    except OSError as exc:
        print(f"❌ Cannot read config: {exc}", file=sys.stderr)
        return 1

    print("🎨 Starting synthetic instance dataset generation...")
    print(f"📊 Generating {config.num_samples} samples of {config.img_width}x{config.img_height} "
          f"with {config.n_circles_min}-{config.n_circles_max} circles each...")

    try:
        splits = generate_dataset(config, workers=args.workers)
    except EncoderError as exc:
        print(f"❌ Encoder failure: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"❌ I/O failure: {exc}", file=sys.stderr)
        return 1

    output_dir = Path(config.output_dir)
    print(f"📁 Output: {output_dir.absolute()}")
    for split in SPLITS:
        print(f"   - {split}: {len(splits[split])} samples in {output_dir / split}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
