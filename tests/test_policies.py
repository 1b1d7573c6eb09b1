"""
Tests for the border correction policies.

All five policies share one traversal and differ only in how they treat
border lines. Checked here: the documented scenarios, the ordering and
subset relations between policies, determinism, and the equivalence of
the symmetric-triangle shortcut with a full traversal.
"""

import numpy as np
import pytest

from borderline.lines.border import BorderClass, BorderMode, classify
from borderline.lines.histogram import line_length_histogram
from borderline.lines.policies import (
    POLICIES,
    CensiPolicy,
    WindowMaskingPolicy,
    apply_policy,
    extract_lines,
    extrapolated_length,
    get_policy,
)
from borderline.lines.runs import Line

ALL_POLICIES = list(POLICIES)


# ─────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────

def random_rp(n, density=0.4, symmetric=True, seed=0):
    rng = np.random.default_rng(seed)
    R = rng.random((n, n)) < density
    if symmetric:
        R = R | R.T
    np.fill_diagonal(R, True)
    return R


def banded_rp(n, width):
    """Recurrence points within `width` of the line of identity."""
    i, j = np.indices((n, n))
    return np.abs(i - j) <= width


def line_key(line):
    return (line.offset, line.start, line.end)


# ─────────────────────────────────────────────────────────────────────
# Tests: Documented scenarios
# ─────────────────────────────────────────────────────────────────────

class TestIdentityPlot:
    """No off-diagonal recurrence: every policy reports zero lines."""

    @pytest.mark.parametrize("policy", ALL_POLICIES)
    @pytest.mark.parametrize("mode", ['normal', 'semi'])
    def test_no_lines(self, policy, mode):
        R = np.eye(5, dtype=bool)
        lengths = apply_policy(R, policy, border_mode=mode)
        assert lengths == []
        np.testing.assert_array_equal(line_length_histogram(lengths, 5), np.zeros(5))


class TestAllTruePlot:
    """5x5 all-True plot: every off-diagonal is one both-border line."""

    def setup_method(self):
        self.R = np.ones((5, 5), dtype=bool)

    def test_corner_and_first_offdiagonal(self):
        lines = {line.offset: line for line in extract_lines(self.R)}
        corner = lines[-4]
        assert corner.length == 1
        assert classify(corner.start, corner.end, corner.diagonal_length) is BorderClass.BOTH
        first = lines[-1]
        assert (first.start, first.end, first.length) == (0, 3, 4)
        assert classify(first.start, first.end, first.diagonal_length) is BorderClass.BOTH

    def test_conventional(self):
        assert apply_policy(self.R, 'conventional') == [4, 4, 3, 3, 2, 2, 1, 1]

    def test_dibo_rejects_everything(self):
        assert apply_policy(self.R, 'dibo', border_mode='normal') == []
        assert apply_policy(self.R, 'dibo', border_mode='semi') == []

    def test_censi_extrapolates_each_border_line(self):
        # offsets 1..3 clip to n, the 1-cell corners are tripled
        assert apply_policy(self.R, 'censi') == [5, 5, 5, 5, 5, 5, 3, 3]

    def test_kelo_keeps_longest_only(self):
        assert apply_policy(self.R, 'kelo') == [4]

    def test_window_masking_accepts_nothing(self):
        assert apply_policy(self.R, 'window_masking', mask_width=1) == []


class TestNonSymmetricPlot:
    """A line present in only one triangle is traversed on its own."""

    def setup_method(self):
        self.R = np.eye(6, dtype=bool)
        self.R[0, 2] = self.R[1, 3] = True   # offset +2, touches left end only

    def test_single_line_found(self):
        lines = extract_lines(self.R)
        assert [line_key(l) for l in lines] == [(2, 0, 1)]

    def test_normal_mode_keeps_semi_border_line(self):
        assert apply_policy(self.R, 'dibo', border_mode='normal') == [2]

    def test_semi_mode_discards_it(self):
        assert apply_policy(self.R, 'dibo', border_mode='semi') == []

    def test_conventional(self):
        assert apply_policy(self.R, 'conventional') == [2]


class TestInteriorLine:
    """A line away from every edge passes all policies unchanged."""

    def setup_method(self):
        self.R = np.eye(8, dtype=bool)
        for r, c in [(3, 1), (4, 2), (5, 3)]:
            self.R[r, c] = self.R[c, r] = True

    @pytest.mark.parametrize("policy", ['conventional', 'dibo', 'censi', 'kelo'])
    @pytest.mark.parametrize("mode", ['normal', 'semi'])
    def test_unchanged(self, policy, mode):
        assert apply_policy(self.R, policy, border_mode=mode) == [3, 3]

    def test_window_masking_width_one(self):
        assert apply_policy(self.R, 'window_masking', mask_width=1) == [3, 3]

    def test_window_masking_band_covers_line(self):
        """Column 1 falls inside a band of width 2."""
        assert apply_policy(self.R, 'window_masking', mask_width=2) == []


class TestCensiExtrapolation:
    """Each border line is continued past the diagonal ends it touches."""

    def test_cut_at_start(self):
        assert extrapolated_length(Line(2, 0, 1, 4), n=6) == 4

    def test_cut_at_end(self):
        assert extrapolated_length(Line(-3, 4, 6, 7), n=10) == 6

    def test_cut_at_both_ends(self):
        assert extrapolated_length(Line(-4, 0, 0, 1), n=5) == 3

    def test_clipped_to_plot_size(self):
        assert extrapolated_length(Line(-1, 0, 3, 4), n=5) == 5

    def test_position_matters(self):
        """Equal observed lengths, different extrapolations."""
        one_end = Line(2, 0, 1, 8)
        both_ends = Line(8, 0, 1, 2)
        assert one_end.length == both_ends.length == 2
        assert extrapolated_length(one_end, n=10) == 4
        assert extrapolated_length(both_ends, n=10) == 6

    def test_semi_mode_extends_one_sided_line(self):
        R = np.eye(6, dtype=bool)
        R[0, 2] = R[1, 3] = True
        assert apply_policy(R, 'censi', border_mode='semi') == [4]
        assert apply_policy(R, 'censi', border_mode='normal') == [2]

    def test_count_preserved(self):
        R = random_rp(20, density=0.6, seed=8)
        for mode in ('normal', 'semi'):
            assert len(apply_policy(R, 'censi', border_mode=mode)) == \
                len(apply_policy(R, 'conventional', border_mode=mode))

    def test_never_shorter_than_observed(self):
        R = random_rp(20, density=0.6, seed=9)
        censi = apply_policy(R, 'censi', border_mode='semi')
        conventional = apply_policy(R, 'conventional')
        assert sum(censi) >= sum(conventional)


class TestCensiVersusKelo:
    """The two salvaging rules differ on the same input."""

    def test_different_results(self):
        R = banded_rp(10, 2)
        R[2, 8] = R[8, 2] = True
        censi = apply_policy(R, 'censi', border_mode='semi')
        kelo = apply_policy(R, 'kelo', border_mode='semi')
        assert censi != kelo
        assert len(kelo) < len(censi)

    def test_interior_lines_kept_by_both(self):
        R = banded_rp(10, 1)
        R[2, 6] = R[6, 2] = True
        for policy in ('censi', 'kelo'):
            assert apply_policy(R, policy).count(1) >= 2


# ─────────────────────────────────────────────────────────────────────
# Tests: Properties over random plots
# ─────────────────────────────────────────────────────────────────────

SEEDS = [0, 1, 2, 3, 4]


class TestPolicyProperties:

    @pytest.mark.parametrize("seed", SEEDS)
    @pytest.mark.parametrize("mode", ['normal', 'semi'])
    def test_conventional_count_is_maximal(self, seed, mode):
        R = random_rp(30, seed=seed, symmetric=seed % 2 == 0)
        n_conv = len(apply_policy(R, 'conventional', border_mode=mode))
        for policy in ALL_POLICIES:
            assert len(apply_policy(R, policy, border_mode=mode)) <= n_conv

    @pytest.mark.parametrize("seed", SEEDS)
    def test_dibo_normal_excludes_exactly_both_border(self, seed):
        R = random_rp(25, density=0.7, seed=seed)
        lines = extract_lines(R)
        interior = sorted(
            (l.length for l in lines
             if classify(l.start, l.end, l.diagonal_length) is not BorderClass.BOTH),
            reverse=True,
        )
        assert apply_policy(R, 'dibo', border_mode='normal') == interior

    @pytest.mark.parametrize("seed", SEEDS)
    def test_dibo_is_sub_multiset_of_conventional(self, seed):
        R = random_rp(25, seed=seed)
        conventional = list(apply_policy(R, 'conventional'))
        for length in apply_policy(R, 'dibo', border_mode='semi'):
            conventional.remove(length)

    @pytest.mark.parametrize("seed", SEEDS)
    @pytest.mark.parametrize("width", [1, 2, 4])
    def test_window_masking_max_length(self, seed, width):
        n = 30
        R = random_rp(n, density=0.8, seed=seed)
        lengths = apply_policy(R, 'window_masking', mask_width=width)
        assert max(lengths, default=0) <= n - 2 * width

    def test_window_masking_strictly_shorter_when_line_spans_border(self):
        R = banded_rp(12, 1)
        R[4, 6] = R[6, 4] = True
        conventional = apply_policy(R, 'conventional')
        masked = apply_policy(R, 'window_masking', mask_width=1)
        assert max(conventional) == 11
        assert masked == [1, 1]
        assert max(masked) < max(conventional)

    @pytest.mark.parametrize("policy", ALL_POLICIES)
    def test_idempotent(self, policy):
        R = random_rp(20, seed=7)
        first = apply_policy(R, policy, border_mode='semi')
        second = apply_policy(R, policy, border_mode='semi')
        assert first == second

    @pytest.mark.parametrize("policy", ALL_POLICIES)
    def test_sorted_descending_and_positive(self, policy):
        lengths = apply_policy(random_rp(20, seed=3), policy)
        assert lengths == sorted(lengths, reverse=True)
        assert all(l >= 1 for l in lengths)

    @pytest.mark.parametrize("policy", ALL_POLICIES)
    def test_lengths_within_domain(self, policy):
        n = 15
        lengths = apply_policy(random_rp(n, density=0.9, seed=5), policy)
        assert all(1 <= l <= n for l in lengths)

    def test_input_not_mutated(self):
        R = random_rp(15, seed=2)
        before = R.copy()
        for policy in ALL_POLICIES:
            apply_policy(R, policy)
        np.testing.assert_array_equal(R, before)


class TestSymmetryShortcut:
    """Mirroring one triangle equals traversing both triangles."""

    @pytest.mark.parametrize("seed", SEEDS)
    def test_same_lines(self, seed):
        R = random_rp(20, seed=seed)
        shortcut = sorted(map(line_key, extract_lines(R, symmetric_shortcut=True)))
        full = sorted(map(line_key, extract_lines(R, symmetric_shortcut=False)))
        assert shortcut == full

    @pytest.mark.parametrize("seed", SEEDS)
    @pytest.mark.parametrize("policy", ALL_POLICIES)
    @pytest.mark.parametrize("mode", ['normal', 'semi'])
    def test_same_lengths(self, seed, policy, mode):
        R = random_rp(20, density=0.6, seed=seed)
        a = apply_policy(R, policy, border_mode=mode, symmetric_shortcut=True)
        b = apply_policy(R, policy, border_mode=mode, symmetric_shortcut=False)
        assert a == b


# ─────────────────────────────────────────────────────────────────────
# Tests: Policy registry and configuration slips
# ─────────────────────────────────────────────────────────────────────

class TestRegistry:

    def test_five_policies(self):
        assert set(POLICIES) == {'conventional', 'dibo', 'censi', 'kelo', 'window_masking'}

    def test_hyphenated_alias(self):
        assert isinstance(get_policy('window-masking'), WindowMaskingPolicy)

    def test_mask_width_passed(self):
        assert get_policy('window_masking', mask_width=3).mask_width == 3

    def test_policy_instance_passthrough(self):
        policy = CensiPolicy()
        assert get_policy(policy) is policy

    def test_unknown_policy(self):
        with pytest.raises(KeyError):
            get_policy('lmax')

    @pytest.mark.parametrize("width", [-1, 1.5, True])
    def test_invalid_mask_width(self, width):
        with pytest.raises(ValueError):
            WindowMaskingPolicy(width)

    def test_mask_wider_than_plot(self):
        assert apply_policy(np.ones((4, 4), dtype=bool), 'window_masking', mask_width=2) == []

    def test_unknown_mode_falls_back_to_normal(self):
        R = random_rp(15, seed=1)
        with pytest.warns(UserWarning):
            lengths = apply_policy(R, 'dibo', border_mode='diagonal')
        assert lengths == apply_policy(R, 'dibo', border_mode='normal')

    def test_malformed_plot_rejected(self):
        with pytest.raises(ValueError):
            apply_policy(np.ones((3, 4)), 'conventional')

    def test_repr(self):
        assert repr(WindowMaskingPolicy(2)) == "WindowMaskingPolicy(mask_width=2)"
        assert BorderMode('semi') is BorderMode.SEMI


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
