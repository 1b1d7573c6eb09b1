"""
Analysis configuration loader.

Reads YAML files describing how recurrence plots are built, which
tangential correction is applied and which border correction policies
run. Package defaults live in defaults.yaml next to this file; a user file
only needs the keys it changes.

Usage:
    from borderline.config.analysis import load_analysis_config

    config = load_analysis_config('my_analysis.yaml')
    config.lines.border_mode        # 'semi'
    config.tangential.correction    # 'perp'
"""

import copy
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from borderline.errors import ConfigurationError, MissingParameterError

logger = logging.getLogger(__name__)

DEFAULTS_PATH = Path(__file__).parent / 'defaults.yaml'


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class RecurrenceConfig:
    """How the recurrence plot is built from a trajectory."""
    method: str = 'fix'
    threshold: Optional[float] = None
    norm: str = 'euc'
    dim: int = 1
    tau: int = 1


@dataclass
class LineConfig:
    """Line extraction and border correction settings."""
    border_mode: str = 'normal'
    mask_width: int = 1
    symmetric_shortcut: bool = True
    policies: List[str] = field(default_factory=lambda: [
        'conventional', 'dibo', 'censi', 'kelo', 'window_masking',
    ])


@dataclass
class TangentialConfig:
    """Tangential motion correction applied before line extraction."""
    correction: str = 'none'
    w: Optional[float] = None
    e2: Optional[float] = None
    tau_iso: Optional[int] = None

    REQUIRED = {
        'none': [],
        'perp': ['w'],
        'iso': ['e2', 'tau_iso'],
    }

    def validate(self):
        """
        Every parameter of the selected correction must be set.

        A missing numeric parameter cannot be defaulted without biasing the
        correction, so it is a configuration error.
        """
        if self.correction not in self.REQUIRED:
            raise ConfigurationError(
                f"Unknown tangential correction {self.correction!r}. "
                f"Available: {', '.join(self.REQUIRED)}"
            )
        missing = [name for name in self.REQUIRED[self.correction] if getattr(self, name) is None]
        if missing:
            raise MissingParameterError(
                f"Tangential correction '{self.correction}' requires: {', '.join(missing)}"
            )


@dataclass
class EngineConfig:
    n_workers: int = 1


@dataclass
class AnalysisConfig:
    """Complete analysis configuration."""
    recurrence: RecurrenceConfig = field(default_factory=RecurrenceConfig)
    lines: LineConfig = field(default_factory=LineConfig)
    tangential: TangentialConfig = field(default_factory=TangentialConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    source: Optional[Path] = None

    def to_dict(self) -> Dict[str, Any]:
        raw = asdict(self)
        raw.pop('source')
        return raw

    def __repr__(self):
        return (f"AnalysisConfig(method={self.recurrence.method}, "
                f"border_mode={self.lines.border_mode}, "
                f"tangential={self.tangential.correction}, "
                f"policies={self.lines.policies})")


SECTIONS = {
    'recurrence': RecurrenceConfig,
    'lines': LineConfig,
    'tangential': TangentialConfig,
    'engine': EngineConfig,
}


# =============================================================================
# LOADER FUNCTIONS
# =============================================================================

def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path, 'r') as f:
        raw = yaml.safe_load(f)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config {path} must be a mapping, got {type(raw).__name__}")
    return raw


def _merge(base: Dict[str, Any], update: Dict[str, Any], origin: str) -> Dict[str, Any]:
    """Merge section-wise, rejecting unknown sections and keys."""
    merged = copy.deepcopy(base)
    for section, values in update.items():
        if section not in SECTIONS:
            raise ConfigurationError(
                f"Unknown config section {section!r} in {origin}. Available: {', '.join(SECTIONS)}"
            )
        if values is None:
            continue
        if not isinstance(values, dict):
            raise ConfigurationError(f"Config section {section!r} in {origin} must be a mapping")

        known = SECTIONS[section].__dataclass_fields__
        for key, value in values.items():
            if key not in known:
                raise ConfigurationError(
                    f"Unknown key {section}.{key} in {origin}. Available: {', '.join(known)}"
                )
            merged.setdefault(section, {})[key] = value
    return merged


def load_analysis_config(
    path: Union[str, Path, None] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> AnalysisConfig:
    """
    Load the analysis configuration.

    Args:
        path: Optional user YAML file layered over the package defaults
        overrides: Optional {section: {key: value}} applied last; None
            values are ignored (unset command line options)

    Returns:
        Validated AnalysisConfig

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ConfigurationError: On unknown sections or keys
        MissingParameterError: If the tangential correction is incomplete
    """
    raw = _read_yaml(DEFAULTS_PATH)

    source = None
    if path is not None:
        source = Path(path)
        if not source.exists():
            raise FileNotFoundError(f"Config not found: {source}")
        logger.info(f"Loading analysis config from {source}")
        raw = _merge(raw, _read_yaml(source), str(source))

    if overrides:
        cleaned = {
            section: {k: v for k, v in values.items() if v is not None}
            for section, values in overrides.items()
        }
        raw = _merge(raw, cleaned, 'overrides')

    config = AnalysisConfig(
        recurrence=RecurrenceConfig(**raw.get('recurrence', {})),
        lines=LineConfig(**raw.get('lines', {})),
        tangential=TangentialConfig(**raw.get('tangential', {})),
        engine=EngineConfig(**raw.get('engine', {})),
        source=source,
    )
    config.tangential.validate()
    return config


# =============================================================================
# CACHING
# =============================================================================

_config_cache: Dict[str, AnalysisConfig] = {}


def get_analysis_config(path: Union[str, Path, None] = None, use_cache: bool = True) -> AnalysisConfig:
    """
    Get analysis configuration (cached by default).

    Args:
        path: Optional user YAML file
        use_cache: Whether to use cached config

    Returns:
        AnalysisConfig object
    """
    key = str(Path(path).resolve()) if path is not None else '<defaults>'

    if use_cache and key in _config_cache:
        return _config_cache[key]

    config = load_analysis_config(path)

    if use_cache:
        _config_cache[key] = config

    return config


def clear_config_cache():
    """Clear the configuration cache."""
    _config_cache.clear()


def reload_analysis_config(path: Union[str, Path, None] = None) -> AnalysisConfig:
    """Force reload a configuration."""
    key = str(Path(path).resolve()) if path is not None else '<defaults>'
    _config_cache.pop(key, None)
    return get_analysis_config(path)
