"""Borderline Configuration Module."""

from borderline.config.analysis import (
    AnalysisConfig,
    RecurrenceConfig,
    LineConfig,
    TangentialConfig,
    EngineConfig,
    DEFAULTS_PATH,
    load_analysis_config,
    get_analysis_config,
    clear_config_cache,
    reload_analysis_config,
)

__all__ = [
    'AnalysisConfig',
    'RecurrenceConfig',
    'LineConfig',
    'TangentialConfig',
    'EngineConfig',
    'DEFAULTS_PATH',
    'load_analysis_config',
    'get_analysis_config',
    'clear_config_cache',
    'reload_analysis_config',
]
