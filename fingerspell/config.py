"""
Configuration management for the fingerspelling recognition pipeline.
"""
import yaml
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

Band = Tuple[float, float]

T = TypeVar("T")


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    index: int = 0
    width: int = 640
    height: int = 480
    fps: int = 30


@dataclass
class MediaPipeConfig:
    """MediaPipe Hands configuration settings."""
    max_num_hands: int = 1
    min_detection_confidence: float = 0.7
    min_tracking_confidence: float = 0.7
    use_world_landmarks: bool = False  # metric landmarks instead of image ones


@dataclass
class NormalizerConfig:
    """Reference frame for the pixel view of the landmarks."""
    frame_width: int = 640
    frame_height: int = 480
    source_y_up: bool = False  # upstream y axis points up


@dataclass
class ClassifierConfig:
    """
    Geometric thresholds of the shape rules.

    Distances are pixels in the reference frame, depths are min-max
    normalised z, angles are degrees.
    """
    thumb_extended_px: float = 25.0
    finger_extended_px: float = 30.0

    # thumb placement
    thumb_across_x_px: float = 50.0
    thumb_across_y_px: float = 40.0
    thumb_side_x_px: float = 40.0
    thumb_side_extension_px: float = 35.0
    thumb_front_z: float = 0.01
    thumb_front_x_px: float = 60.0

    # closed-fist group
    depth_margin_z: float = 0.005
    m_avg_px: float = 28.0
    m_min_px: float = 22.0
    e_min_px: float = 30.0
    n_avg_px: float = 35.0
    n_min_px: float = 30.0
    n_depth_z: float = 0.03

    # index/middle pairs
    together_px: float = 20.0
    d_bunch_px: float = 25.0
    d_thumb_px: float = 35.0
    f_touch_px: float = 30.0
    f_extension_px: float = 75.0
    g_parallel_px: float = 50.0
    k_spread_min_px: float = 10.0
    k_spread_max_px: float = 50.0
    l_index_rise_px: float = 60.0
    l_thumb_out_px: float = 40.0
    r_crossed_gap_px: float = 15.0

    # circular shapes
    c_curl_min_px: float = 25.0
    c_curl_max_px: float = 45.0
    c_thumb_clear_px: float = 40.0
    o_touch_px: float = 35.0

    x_bend_ratio: float = 1.2

    # direction bands
    up_band: Band = (-135.0, -45.0)
    down_band: Band = (45.0, 135.0)
    horizontal_tolerance_deg: float = 30.0
    thumb_down_band: Band = (30.0, 150.0)
    k_bands: List[Band] = field(default_factory=lambda: [(-135.0, -10.0), (10.0, 45.0)])


def _default_groups() -> Dict[str, List[str]]:
    return {
        "fist_like": ["N", "M", "C", "E", "A", "S", "T", "O"],
        "finger_pose": ["F", "K", "P", "Q", "R", "U", "V", "W", "X", "H", "B", "G"],
        "thumb_overlap": ["N", "M", "P", "K"],
    }


@dataclass
class SmootherConfig:
    """Confidence smoothing configuration."""
    min_frames: int = 2
    decay: float = 2.0
    debounce_ms: float = 100.0
    none_bypasses_debounce: bool = False
    confusable_groups: Dict[str, List[str]] = field(default_factory=_default_groups)


@dataclass
class AssemblerConfig:
    """Sentence assembler guards."""
    duplicate_window_ms: float = 2000.0
    hold_time_ms: float = 1500.0
    reopen_word_on_backspace: bool = True


@dataclass
class AutocorrectConfig:
    """Autocorrect configuration."""
    max_edit_ratio: float = 0.4
    min_fuzzy_length: int = 3
    dictionary_path: Optional[str] = None


@dataclass
class DetectionConfig:
    """Detection loop configuration."""
    interval_ms: float = 500.0


@dataclass
class MLConfig:
    """Optional secondary classifier."""
    enabled: bool = False
    model_path: Optional[str] = None
    confidence_threshold: float = 0.5


@dataclass
class DisplayConfig:
    """Display configuration settings."""
    show_landmarks: bool = True
    window_name: str = "Fingerspell"


@dataclass
class ServerConfig:
    """HTTP service settings."""
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class Cfg:
    """Main configuration class."""
    camera: CameraConfig = field(default_factory=CameraConfig)
    mediapipe: MediaPipeConfig = field(default_factory=MediaPipeConfig)
    normalizer: NormalizerConfig = field(default_factory=NormalizerConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    smoother: SmootherConfig = field(default_factory=SmootherConfig)
    assembler: AssemblerConfig = field(default_factory=AssemblerConfig)
    autocorrect: AutocorrectConfig = field(default_factory=AutocorrectConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    ml: MLConfig = field(default_factory=MLConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.default.yaml"


def load_config(path: Optional[str] = None) -> Cfg:
    """
    Load configuration from YAML file.

    Args:
        path: Path to config file. If None, uses config.default.yaml

    Returns:
        Configuration object with all settings
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    return _dict_to_config(data)


def _section(cls: Type[T], data: Dict[str, Any], name: str) -> T:
    """Build one config section, keeping dataclass defaults for absent keys."""
    values = data.get(name) or {}
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"Unknown keys in config section '{name}': {', '.join(unknown)}")
    return cls(**values)


def _dict_to_config(data: Dict[str, Any]) -> Cfg:
    """Convert dictionary to configuration object."""
    unknown = sorted(set(data) - {f.name for f in fields(Cfg)})
    if unknown:
        raise ValueError(f"Unknown config sections: {', '.join(unknown)}")

    classifier = _section(ClassifierConfig, data, 'classifier')
    # YAML has no tuples; bands arrive as lists
    classifier.up_band = tuple(classifier.up_band)
    classifier.down_band = tuple(classifier.down_band)
    classifier.thumb_down_band = tuple(classifier.thumb_down_band)
    classifier.k_bands = [tuple(band) for band in classifier.k_bands]

    return Cfg(
        camera=_section(CameraConfig, data, 'camera'),
        mediapipe=_section(MediaPipeConfig, data, 'mediapipe'),
        normalizer=_section(NormalizerConfig, data, 'normalizer'),
        classifier=classifier,
        smoother=_section(SmootherConfig, data, 'smoother'),
        assembler=_section(AssemblerConfig, data, 'assembler'),
        autocorrect=_section(AutocorrectConfig, data, 'autocorrect'),
        detection=_section(DetectionConfig, data, 'detection'),
        ml=_section(MLConfig, data, 'ml'),
        display=_section(DisplayConfig, data, 'display'),
        server=_section(ServerConfig, data, 'server'),
    )
