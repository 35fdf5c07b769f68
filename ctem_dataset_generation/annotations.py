"""
Annotation serialization and loading.

One JSON document per sample:
    {"num_instances": N, "circles": [{"id", "x", "y", "radius", "intensity"}, ...]}
written with 2-space indentation and a trailing newline.
"""
import json
import re
from pathlib import Path
from typing import Dict, List, Optional, Union

from ctem_dataset_generation.config import SPLITS
from ctem_dataset_generation.scene_generator import Circle

CIRCLE_KEYS = ('id', 'x', 'y', 'radius', 'intensity')


def create_annotation(scene) -> Dict:
    """Create the JSON-ready annotation for a scene."""
    return {
        'num_instances': len(scene),
        'circles': [
            {
                'id': c.id,
                'x': c.x,
                'y': c.y,
                'radius': c.radius,
                'intensity': c.intensity,
            }
            for c in scene
        ],
    }


def write_annotations(scene, path):
    """Write the annotation document for scene to path."""
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(create_annotation(scene), f, indent=2)
        f.write('\n')


def parse_annotation(data: Dict) -> List[Circle]:
    """
    Rebuild the scene from a loaded annotation document.

    Raises:
        ValueError: If the document does not describe a scene.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Annotation must be a JSON object, got {type(data).__name__}")
    circles = data.get('circles')
    if not isinstance(circles, list):
        raise ValueError("Annotation has no 'circles' list")
    scene = []
    for record in circles:
        if not isinstance(record, dict):
            raise ValueError(f"Circle record {record!r} is not an object")
        missing = [k for k in CIRCLE_KEYS if k not in record]
        if missing:
            raise ValueError(f"Circle record {record!r} is missing {', '.join(missing)}")
        bad = [k for k in CIRCLE_KEYS if isinstance(record[k], bool) or not isinstance(record[k], int)]
        if bad:
            raise ValueError(f"Circle record {record!r} has non-integer {', '.join(bad)}")
        scene.append(Circle(**{k: record[k] for k in CIRCLE_KEYS}))
    if 'num_instances' not in data:
        raise ValueError("Annotation is missing num_instances")
    if data['num_instances'] != len(scene):
        raise ValueError(
            f"num_instances={data['num_instances']!r} but {len(scene)} circles listed")
    return scene
    return scene


def read_annotations(path) -> List[Circle]:
    with open(path, 'r', encoding='utf-8') as f:
        return parse_annotation(json.load(f))


class AnnotationLoader:
    def __init__(self, root: Union[str, Path] = "ctem_instance_dataset"):
        """
        Initialize with the dataset root holding train/val/test subdirs.

        Args:
            root (str | Path): Dataset output directory.
        """
        self.root = Path(root)

    @staticmethod
    def extract_index(filename: str) -> int:
        """
        Extract the sample index from a dataset filename.

        Accepts 'image_000042.png', 'mask_000042.png' or 'anno_000042.json'.

        Raises:
            ValueError: If filename doesn't match the expected pattern.
        """
        match = re.search(r'(?:image|mask|anno)_(\d{6})\.(?:png|json)$', Path(filename).name.lower())
        if not match:
            raise ValueError(f"Invalid dataset filename: '{filename}'. Expected format like 'image_000001.png'")
        return int(match.group(1))

    def annotation_path(self, split: str, index: int) -> Path:
        if split not in SPLITS:
            raise ValueError(f"Unknown split '{split}', expected one of {SPLITS}")
        return self.root / split / 'annotations' / f'anno_{index:06d}.json'

    def get(self, split: str, index: int) -> List[Circle]:
        """
        Load the scene of one sample.

        Raises:
            FileNotFoundError: If the annotation file does not exist.
        """
        path = self.annotation_path(split, index)
        if not path.exists():
            raise FileNotFoundError(f"Annotation file not found: {path}. Run generation first?")
        return read_annotations(path)

    def find(self, index_or_filename: Union[int, str]) -> Optional[str]:
        """Return the split holding a sample, or None if it is in none of them."""
        index = index_or_filename
        if isinstance(index_or_filename, str):
            index = self.extract_index(index_or_filename)
        for split in SPLITS:
            if self.annotation_path(split, index).exists():
                return split
        return None
