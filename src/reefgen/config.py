"""
Generation configuration and validation.

Defines:
- ParameterSpec: inclusive numeric ranges for tunable parameters
- GenerationConfig: the plain-data configuration consumed by the pipeline
- ConfigurationError: raised when a configuration cannot produce a map
"""

import json
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Dict, Any, List, Tuple, Optional


FORMATION_KINDS = ("round", "hourglass", "canyon", "chunky", "boulders")

STRATEGIES = ("mesa", "corridor")


class ConfigurationError(ValueError):
    """Raised when a generation configuration is missing or degenerate."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("Invalid generation config: " + "; ".join(self.errors))


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ParameterSpec:
    """
    Allowed ranges for numeric parameters.

    Each parameter maps to ``(min_val, max_val)``, both inclusive.
    """

    def __init__(self, params: Dict[str, Tuple[float, float]]):
        self.params = params

    def non_numeric(self, values: Dict[str, Any]) -> List[str]:
        """Names of known parameters whose value is missing or not a number."""
        return [name for name in self.params if name in values and not _is_number(values[name])]

    def validate(self, values: Dict[str, Any]) -> List[str]:
        """Return one message per parameter that is not a number or lies outside its range."""

        errors = []
        for param_name, (min_val, max_val) in self.params.items():
            if param_name not in values:
                continue

            value = values[param_name]
            if not _is_number(value):
                errors.append(f"{param_name} must be numeric, got {value!r}")
            elif not (min_val <= value <= max_val):
                errors.append(f"{param_name}={value} outside [{min_val}, {max_val}]")

        return errors


# Ranges for every numeric field of GenerationConfig
PARAMETERS = ParameterSpec({
    "width": (1, 4096),
    "height": (1, 4096),
    "seed": (0, 2**31 - 1),
    "cell_size": (1e-6, 1e6),
    "chunk_size": (1, 1024),
    # zone noise
    "zone_scale": (1e-3, 1e6),
    "zone_octaves": (1, 16),
    "zone_persistence": (0.0, 1.0),
    "zone_lacunarity": (1.0, 8.0),
    "deep_threshold": (-1.0, 2.0),
    "mid_threshold": (-1.0, 2.0),
    "shallow_height": (-1e4, 1e4),
    "mid_height": (-1e4, 1e4),
    "deep_height": (-1e4, 1e4),
    # floor detail noise
    "floor_detail_scale": (1e-3, 1e6),
    "floor_detail_octaves": (1, 16),
    "floor_detail_amount": (0.0, 1e3),
    "height_smooth_passes": (0, 1000),
    "zone_penalty": (0.0, 1.0),
    # perimeter
    "perimeter_thickness": (0.0, 1e3),
    "perimeter_noise_amount": (0.0, 1e3),
    "perimeter_noise_scale": (1e-3, 1e6),
    "perimeter_noise_octaves": (1, 16),
    "perimeter_wall_height": (0.0, 1e4),
    # mesa placement
    "mesa_count": (0, 100000),
    "mesa_radius_min": (0.5, 1e3),
    "mesa_radius_max": (0.5, 1e3),
    "mesa_min_spacing": (0.0, 1e4),
    "mesa_height_min": (1e-6, 1e4),
    "mesa_height_max": (1e-6, 1e4),
    "mesa_height_scale": (1e-3, 1e6),
    "mesa_edge_noise": (0.0, 1.0),
    # corridor carving
    "corridor_walkers": (0, 10000),
    "walker_steps": (0, 1000000),
    "min_brush": (0, 100),
    "max_brush": (0, 100),
    "min_wall_neighbors": (0, 9),
    "erosion_passes": (0, 1000),
    # vertex resolution
    "wall_top_noise": (0.0, 1e3),
    "wall_noise_scale": (1e-3, 1e6),
    "wall_noise_octaves": (1, 16),
    "wall_height_boost": (-1e3, 1e3),
    "wall_smooth_passes": (0, 1000),
    "floor_smooth_passes": (0, 1000),
})

_INT_FIELDS = {
    "width", "height", "seed", "chunk_size", "zone_octaves", "floor_detail_octaves",
    "height_smooth_passes", "perimeter_noise_octaves", "mesa_count", "corridor_walkers",
    "walker_steps", "min_brush", "max_brush", "min_wall_neighbors", "erosion_passes",
    "wall_noise_octaves", "wall_smooth_passes", "floor_smooth_passes",
}


def _default_probabilities() -> Dict[str, float]:
    return {"round": 0.35, "hourglass": 0.15, "canyon": 0.15, "chunky": 0.2, "boulders": 0.15}


@dataclass
class GenerationConfig:
    """Plain-data configuration for one generation run."""

    width: int = 200
    height: int = 200
    seed: int = 42
    strategy: str = "mesa"
    cell_size: float = 1.0
    chunk_size: int = 16

    zone_scale: float = 40.0
    zone_octaves: int = 2
    zone_persistence: float = 0.5
    zone_lacunarity: float = 2.0
    deep_threshold: float = 0.35
    mid_threshold: float = 0.65
    shallow_height: float = 0.0
    mid_height: float = -3.0
    deep_height: float = -6.0

    floor_detail_scale: float = 8.0
    floor_detail_octaves: int = 3
    floor_detail_amount: float = 0.4
    height_smooth_passes: int = 12
    zone_penalty: float = 0.25

    perimeter_thickness: float = 3.0
    perimeter_noise_amount: float = 2.0
    perimeter_noise_scale: float = 20.0
    perimeter_noise_octaves: int = 2
    perimeter_wall_height: float = 20.0

    mesa_count: int = 25
    mesa_radius_min: float = 4.0
    mesa_radius_max: float = 10.0
    mesa_min_spacing: float = 18.0
    mesa_height_min: float = 6.0
    mesa_height_max: float = 14.0
    mesa_height_scale: float = 12.0
    mesa_edge_noise: float = 0.3
    shape_probabilities: Dict[str, float] = field(default_factory=_default_probabilities)

    corridor_walkers: int = 20
    walker_steps: int = 800
    min_brush: int = 1
    max_brush: int = 4
    min_wall_neighbors: int = 5
    erosion_passes: int = 5

    wall_top_noise: float = 1.2
    wall_noise_scale: float = 5.0
    wall_noise_octaves: int = 2
    wall_height_boost: float = 1.0
    wall_smooth_passes: int = 4
    floor_smooth_passes: int = 4

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "GenerationConfig":
        """Build a config from a flat dict, rejecting unknown keys."""

        if values is None:
            raise ConfigurationError(["configuration is missing"])

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError([f"unknown parameter: {name}" for name in unknown])

        kwargs = dict(values)
        if isinstance(kwargs.get("shape_probabilities"), dict):
            probabilities = _default_probabilities()
            probabilities.update(kwargs["shape_probabilities"])
            kwargs["shape_probabilities"] = probabilities

        return cls(**kwargs)

    @classmethod
    def from_json(cls, path) -> "GenerationConfig":
        """Load a config from a JSON file holding a flat object."""

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ConfigurationError([f"{path} must contain a JSON object"])

        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def replace(self, **changes) -> "GenerationConfig":
        """Return a copy with some fields changed."""
        values = self.to_dict()
        values.update(changes)
        return GenerationConfig.from_dict(values)

    def shape_weights(self) -> List[float]:
        """Formation kind weights in FORMATION_KINDS order."""
        return [float(self.shape_probabilities.get(kind, 0.0)) for kind in FORMATION_KINDS]

    def validate(self) -> "GenerationConfig":
        """
        Check the config can produce a map.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigurationError listing every problem found
        """

        values = self.to_dict()
        errors = PARAMETERS.validate(values)

        # Fields that failed the type check are left out of the ordering checks
        invalid = set(PARAMETERS.non_numeric(values))

        def usable(*names):
            return not invalid.intersection(names)

        for name in sorted(_INT_FIELDS - invalid):
            value = values[name]
            if not isinstance(value, int):
                errors.append(f"{name} must be an integer, got {value!r}")

        if usable("width", "height") and (not self.width or not self.height):
            errors.append(f"grid size must be non-zero, got {self.width}x{self.height}")

        if self.strategy not in STRATEGIES:
            errors.append(f"unknown strategy {self.strategy!r}, expected one of {STRATEGIES}")

        if usable("deep_threshold", "mid_threshold") and self.deep_threshold >= self.mid_threshold:
            errors.append("deep_threshold must be below mid_threshold")

        if usable("deep_height", "mid_height", "shallow_height") and not (
            self.deep_height <= self.mid_height <= self.shallow_height
        ):
            errors.append("zone heights must satisfy deep <= mid <= shallow")

        if usable("mesa_radius_min", "mesa_radius_max") and self.mesa_radius_min > self.mesa_radius_max:
            errors.append("mesa_radius_min must not exceed mesa_radius_max")

        if usable("mesa_height_min", "mesa_height_max") and self.mesa_height_min > self.mesa_height_max:
            errors.append("mesa_height_min must not exceed mesa_height_max")

        if usable("min_brush", "max_brush") and self.min_brush > self.max_brush:
            errors.append("min_brush must not exceed max_brush")

        if not isinstance(self.shape_probabilities, dict):
            errors.append("shape_probabilities must be a mapping of kind to weight")
        else:
            for kind, weight in sorted(self.shape_probabilities.items()):
                if kind not in FORMATION_KINDS:
                    errors.append(f"unknown formation kind: {kind}")
                elif not _is_number(weight):
                    errors.append(f"shape probability for {kind} must be numeric, got {weight!r}")
                elif weight < 0:
                    errors.append(f"shape probability for {kind} must be non-negative")

        if errors:
            raise ConfigurationError(errors)

        return self


def load_config(source: Optional[Any] = None, **overrides) -> GenerationConfig:
    """
    Resolve a config from a GenerationConfig, dict, JSON path or nothing.

    Keyword overrides are applied last.
    """

    if source is None:
        config = GenerationConfig()
    elif isinstance(source, GenerationConfig):
        config = source
    elif isinstance(source, dict):
        config = GenerationConfig.from_dict(source)
    else:
        config = GenerationConfig.from_json(source)

    if overrides:
        config = config.replace(**overrides)

    return config
