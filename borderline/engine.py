"""
Borderline Analysis Engine

Main orchestration for line length analysis:
- Build the recurrence plot (optionally tangentially corrected)
- Extract diagonal lines once per plot
- Apply every requested border correction policy
- Collect distributions and summary measures into polars frames

Recurrence plots are independent, so they can be spread over a
multiprocessing pool; each worker extracts the lines of its plot once.
"""

import logging
from dataclasses import dataclass, field
from multiprocessing import Pool
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import polars as pl

from borderline.config.analysis import AnalysisConfig
from borderline.dynamics.reconstruction import as_trajectory, embed_time_series
from borderline.dynamics.recurrence import recurrence_count
from borderline.dynamics.tangential import corrected_recurrence_plot
from borderline.io import write_parquet_atomic
from borderline.lines.border import BorderMode, resolve_border_mode
from borderline.lines.diagonal import validate_recurrence_plot
from borderline.lines.histogram import LineLengthDistribution
from borderline.lines.policies import POLICIES, Policy, extract_lines, get_policy

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Accepted lines of one (RP, policy) pair."""
    rp_id: str
    policy: str
    border_mode: str
    lengths: List[int]
    distribution: LineLengthDistribution
    n_recurrences: int = 0
    parameters: Dict[str, object] = field(default_factory=dict)

    @property
    def mean_length(self) -> float:
        return self.distribution.mean_length

    def summary(self, l_min: int = 2) -> dict:
        return {
            'rp_id': self.rp_id,
            **self.distribution.summary(self.n_recurrences, l_min),
        }


def _build_result(rp_id, R, lines, policy: Policy, mode: BorderMode) -> AnalysisResult:
    n = R.shape[0]
    lengths = policy.accepted_lengths(lines, mode, n)
    return AnalysisResult(
        rp_id=rp_id,
        policy=policy.name,
        border_mode=mode.value,
        lengths=lengths,
        distribution=LineLengthDistribution.from_lengths(lengths, n, policy.name, mode.value),
        n_recurrences=recurrence_count(R),
        parameters=policy.params(),
    )


def _analyze_plot(task: Tuple[str, np.ndarray, List[Policy], BorderMode, bool]) -> List[AnalysisResult]:
    """Worker: one RP, lines extracted once and shared by every policy."""
    rp_id, R, policies, mode, symmetric_shortcut = task
    lines = extract_lines(R, symmetric_shortcut=symmetric_shortcut)
    return [_build_result(rp_id, R, lines, policy, mode) for policy in policies]


class LineAnalysisEngine:
    """
    Apply border correction policies to recurrence plots.

    Parameters
    ----------
    policies : sequence of str, optional
        Policy names (default: all five)
    border_mode : str
        'normal' or 'semi' (anything else warns and falls back to 'normal')
    mask_width : int
        Band width for window masking
    symmetric_shortcut : bool
        Traverse one triangle only for symmetric plots
    n_workers : int
        Worker processes, one RP per task; 1 runs serially

    Examples
    --------
    >>> engine = LineAnalysisEngine(border_mode='semi')
    >>> results = engine.analyze(R)
    >>> results['dibo'].distribution.mean_length
    """

    def __init__(
        self,
        policies: Optional[Sequence[str]] = None,
        border_mode: str = 'normal',
        mask_width: int = 1,
        symmetric_shortcut: bool = True,
        n_workers: int = 1,
    ):
        names = list(policies) if policies is not None else list(POLICIES)
        self.policies = [get_policy(name, mask_width=mask_width) for name in names]
        self.border_mode = resolve_border_mode(border_mode)
        self.symmetric_shortcut = symmetric_shortcut
        self.n_workers = max(1, int(n_workers))

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> 'LineAnalysisEngine':
        return cls(
            policies=config.lines.policies,
            border_mode=config.lines.border_mode,
            mask_width=config.lines.mask_width,
            symmetric_shortcut=config.lines.symmetric_shortcut,
            n_workers=config.engine.n_workers,
        )

    @property
    def policy_names(self) -> List[str]:
        return [policy.name for policy in self.policies]

    def analyze(self, R, rp_id: str = 'rp') -> Dict[str, AnalysisResult]:
        """
        Run every policy on one recurrence plot.

        Lines are extracted once and shared by all policies.

        Returns
        -------
        dict
            {policy_name: AnalysisResult}
        """
        R = validate_recurrence_plot(R)
        lines = extract_lines(R, symmetric_shortcut=self.symmetric_shortcut)
        logger.info(f"{rp_id}: {R.shape[0]}x{R.shape[0]} RP, {len(lines)} lines")

        return {
            policy.name: _build_result(rp_id, R, lines, policy, self.border_mode)
            for policy in self.policies
        }

    def run(self, rps: Dict[str, np.ndarray]) -> Dict[str, Dict[str, AnalysisResult]]:
        """
        Run every policy on several recurrence plots.

        Parameters
        ----------
        rps : dict
            {rp_id: recurrence_plot}

        Returns
        -------
        dict
            {rp_id: {policy_name: AnalysisResult}}
        """
        validated = {rp_id: validate_recurrence_plot(R) for rp_id, R in rps.items()}

        if self.n_workers == 1:
            return {rp_id: self.analyze(R, rp_id) for rp_id, R in validated.items()}

        tasks = [
            (rp_id, R, self.policies, self.border_mode, self.symmetric_shortcut)
            for rp_id, R in validated.items()
        ]
        logger.info(f"Dispatching {len(tasks)} RPs to {self.n_workers} workers")

        with Pool(processes=self.n_workers) as pool:
            outputs = pool.map(_analyze_plot, tasks)

        return {
            rp_id: {result.policy: result for result in plot_results}
            for rp_id, plot_results in zip(validated, outputs)
        }

    @staticmethod
    def to_frame(results: Dict[str, Dict[str, AnalysisResult]]) -> pl.DataFrame:
        """Long-format distributions: rp_id, policy, border_mode, length, count."""
        frames = []
        for rp_id, by_policy in results.items():
            for result in by_policy.values():
                frames.append(
                    result.distribution.to_frame().with_columns(
                        pl.lit(rp_id).alias('rp_id'),
                        pl.lit(result.policy).alias('policy'),
                        pl.lit(result.border_mode).alias('border_mode'),
                    ).select(['rp_id', 'policy', 'border_mode', 'length', 'count'])
                )
        if not frames:
            return pl.DataFrame()
        return pl.concat(frames)

    @staticmethod
    def summary_frame(results: Dict[str, Dict[str, AnalysisResult]], l_min: int = 2) -> pl.DataFrame:
        """One row per (RP, policy) with line counts and RQA measures."""
        rows = [
            result.summary(l_min)
            for by_policy in results.values()
            for result in by_policy.values()
        ]
        return pl.DataFrame(rows)

    def to_parquet(self, results: Dict[str, Dict[str, AnalysisResult]], path: Path) -> int:
        """Save distributions to parquet."""
        return write_parquet_atomic(self.to_frame(results), path)


def analyze_rp(
    R,
    policies: Optional[Sequence[str]] = None,
    border_mode: str = 'normal',
    mask_width: int = 1,
    symmetric_shortcut: bool = True,
) -> Dict[str, AnalysisResult]:
    """Run the requested policies on a single recurrence plot."""
    engine = LineAnalysisEngine(
        policies=policies,
        border_mode=border_mode,
        mask_width=mask_width,
        symmetric_shortcut=symmetric_shortcut,
    )
    return engine.analyze(R)


def build_recurrence_plot(Y, config: AnalysisConfig) -> Tuple[np.ndarray, object]:
    """
    Recurrence plot of a trajectory as described by the configuration.

    A scalar series is delay-embedded first when dim > 1. The tangential
    correction (if any) is applied here, before any line is extracted.
    """
    rec = config.recurrence
    tan = config.tangential

    if rec.threshold is None:
        raise ValueError("recurrence.threshold must be set to build a recurrence plot")

    Y = np.asarray(Y, dtype=float)
    if Y.ndim == 1 and rec.dim > 1:
        Y = embed_time_series(Y, rec.tau, rec.dim)
    Y = as_trajectory(Y)

    R, threshold = corrected_recurrence_plot(
        Y,
        rec.threshold,
        method=rec.method,
        norm=rec.norm,
        correction=tan.correction,
        w=tan.w,
        e2=tan.e2,
        tau_iso=tan.tau_iso,
    )
    logger.info(
        f"Built {len(R)}x{len(R)} RP (method={rec.method}, norm={rec.norm}, "
        f"tangential={tan.correction}, RR={R.mean():.4f})"
    )
    return R, threshold


def analyze_trajectory(Y, config: AnalysisConfig, rp_id: str = 'rp') -> Dict[str, AnalysisResult]:
    """Trajectory to corrected line length distributions for every configured policy."""
    R, _ = build_recurrence_plot(Y, config)
    return LineAnalysisEngine.from_config(config).analyze(R, rp_id)
