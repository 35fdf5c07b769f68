"""
Synthetic CTEM-style circle instance segmentation dataset generator.
"""
from ctem_dataset_generation.annotations import AnnotationLoader, read_annotations, write_annotations
from ctem_dataset_generation.config import DatasetConfig, InvalidConfigurationError, load_config
from ctem_dataset_generation.image_renderer import render_image
from ctem_dataset_generation.instance_mask import render_mask
from ctem_dataset_generation.scene_generator import Circle, SceneGenerator, sample_scene
from ctem_dataset_generation.utils import EncoderError, get_split_name

__version__ = "0.1.0"
