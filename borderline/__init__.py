"""
Borderline - Border Effect Corrected Recurrence Line Analysis
=============================================================

Diagonal lines of a recurrence plot are cut by the finite plot and
inflated by tangential motion. Borderline extracts them and reports
corrected line length distributions.

Architecture:
    - lines/:     Diagonal traversal, runs, border classifier, policies
    - dynamics/:  Embedding, RP construction, tangential motion correction
    - config/:    YAML-backed analysis configuration
    - engine.py:  LineAnalysisEngine (policies x recurrence plots)
    - cli.py:     Command line interface

Usage:
    # CLI
    python -m borderline analyze trajectory.npy --threshold 0.1
    python -m borderline config

    # Python
    from borderline.lines import apply_policy
    lengths = apply_policy(R, 'dibo', border_mode='semi')
"""

__version__ = "1.0.0"

# Lazy imports to keep `import borderline` light
__all__ = ['lines', 'dynamics', 'engine', 'config', '__version__']


def __getattr__(name):
    """Lazy import of submodules."""
    if name == 'lines':
        from . import lines
        return lines
    elif name == 'dynamics':
        from . import dynamics
        return dynamics
    elif name == 'engine':
        from . import engine
        return engine
    elif name == 'config':
        from . import config
        return config
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
