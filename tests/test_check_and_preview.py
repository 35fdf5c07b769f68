from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from ctem_dataset_generation.check_dataset import check_dataset, check_sample
from ctem_dataset_generation.generate_dataset import generate_dataset
from ctem_dataset_generation.visualize_sample import plot_sample


def test_check_reports_foreign_mask_labels(small_config) -> None:
    generate_dataset(small_config, show_progress=False)
    root = Path(small_config.output_dir)
    mask_path = root / "train" / "masks" / "mask_000001.png"
    mask = np.array(Image.open(mask_path)).astype(np.uint16)
    mask[0, 0] = 999
    Image.fromarray(mask).save(mask_path)

    problems = check_dataset(root)
    assert len(problems) == 1
    assert "train/000001" in problems[0] and "999" in problems[0]


def test_check_reports_missing_and_misplaced_samples(small_config) -> None:
    generate_dataset(small_config, show_progress=False)
    root = Path(small_config.output_dir)
    (root / "test" / "images" / "image_000005.png").unlink()

    problems = check_dataset(root)
    assert any("missing image" in p for p in problems)

    misplaced = check_sample(root, "train", 2, small_config.img_width, small_config.img_height,
                             total=small_config.num_samples, train_split=0.1, val_split=0.1)
    assert misplaced == ["train/000002: sample belongs to split 'test'"]


def test_check_requires_metadata(tmp_path) -> None:
    assert check_dataset(tmp_path) == [f"metadata.json not found in {tmp_path}"]


def test_plot_sample_writes_preview(small_config, tmp_path) -> None:
    generate_dataset(small_config, show_progress=False)
    out = plot_sample(small_config.output_dir, 4, tmp_path / "preview.png")
    assert out.exists()
    assert png_is_rgb_like(out)


def png_is_rgb_like(path) -> bool:
    with Image.open(path) as img:
        return img.mode in ("RGB", "RGBA") and img.size[0] > img.size[1]


def test_check_reports_unreadable_mask(small_config) -> None:
    generate_dataset(small_config, show_progress=False)
    root = Path(small_config.output_dir)
    (root / "train" / "masks" / "mask_000000.png").write_bytes(b"garbage")

    problems = check_dataset(root)
    assert len(problems) == 1
    assert problems[0].startswith("train/000000: unreadable PNG")


def test_check_reports_wrong_bit_depth(small_config) -> None:
    generate_dataset(small_config, show_progress=False)
    root = Path(small_config.output_dir)
    mask_path = root / "val" / "masks" / "mask_000003.png"
    Image.fromarray(np.zeros((small_config.img_height, small_config.img_width), dtype=np.uint8)).save(mask_path)

    assert check_dataset(root) == ["val/000003: mask is not 16-bit grayscale (mode L)"]


def test_check_reports_malformed_annotation(small_config) -> None:
    generate_dataset(small_config, show_progress=False)
    root = Path(small_config.output_dir)
    anno_path = root / "train" / "annotations" / "anno_000002.json"
    anno_path.write_text('{"num_instances": 1, "circles": [3]}\n')
    broken_json = root / "test" / "annotations" / "anno_000005.json"
    broken_json.write_text("{not json")

    problems = check_dataset(root)
    assert len(problems) == 2
    assert any(p.startswith("train/000002: bad annotation") and "not an object" in p for p in problems)
    assert any(p.startswith("test/000005: bad annotation") for p in problems)
