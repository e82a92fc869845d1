# tests/test_fitting_algorithms.py

import numpy as np
import pytest

from simbahap.dosages import dosages_from_view, l1_norm, normalize_dosages_distribution
from simbahap.fitting import DescentFitting, fit_founders_alleles
from simbahap.founders import HaplotypesMap, simulate_founders_distribution, simulate_haplotypes_map
from simbahap.view import SampleAllelesView


def _distance_of(hmap, alts, target):
    view = SampleAllelesView(hmap, alts)
    return l1_norm(target, dosages_from_view(view, hmap.ploidy))


def _random_instance(seed, n_founders, n_samples, ploidy):
    rng = np.random.default_rng(seed)
    g = simulate_founders_distribution(n_founders, n_samples, ploidy, rng)
    hmap = simulate_haplotypes_map(g, n_samples, ploidy, rng)
    observed = rng.integers(0, 6, size=ploidy + 1)
    observed[rng.integers(0, ploidy + 1)] += 1
    target = normalize_dosages_distribution(observed, n_samples)
    return hmap, target


def test_descent_trivial_reaches_zero():
    """Two founders, one per sample: target [1,0,1] is matched exactly."""
    hmap = HaplotypesMap(founders=np.array([[0, 0], [1, 1]]), n_founders=2)
    alts = np.zeros(2, dtype=np.uint8)
    distance = DescentFitting(hmap).fit(alts, np.array([1.0, 0.0, 1.0]))
    assert distance == pytest.approx(0.0)
    assert alts.tolist() in ([0, 1], [1, 0])
    # lowest index wins the tie
    assert alts.tolist() == [1, 0]


def test_descent_unreachable_target_keeps_zero():
    """A single founder cannot split the samples: distance 2 and x=[0] by tie-break."""
    hmap = HaplotypesMap(founders=np.array([[0, 0], [0, 0]]), n_founders=1)
    alts = np.ones(1, dtype=np.uint8)
    distance = DescentFitting(hmap).fit(alts, np.array([1.0, 0.0, 1.0]))
    assert distance == pytest.approx(2.0)
    assert alts.tolist() == [0]


def test_descent_chain_map():
    """Overlapping founder chain: greedy finds a fit no worse than the all-zero start."""
    hmap = HaplotypesMap(founders=np.array([[0, 1], [1, 2], [2, 3]]), n_founders=4)
    alts = np.zeros(4, dtype=np.uint8)
    target = np.array([1.0, 1.0, 1.0])
    fitting = DescentFitting(hmap)
    distance = fitting.fit(alts, target)
    assert distance >= 0.0
    assert distance <= _distance_of(hmap, np.zeros(4, dtype=np.uint8), target)
    assert distance == pytest.approx(_distance_of(hmap, alts, target))
    assert fitting.trace == [4.0, 2.0, 0.0]
    assert alts.tolist() == [1, 1, 0, 0]


@pytest.mark.parametrize("seed", range(8))
def test_descent_properties_on_random_instances(seed):
    """Bit count within F, distance never above the all-zero start, strictly decreasing trace."""
    ploidy = 2 + seed % 4
    hmap, target = _random_instance(seed, n_founders=6, n_samples=9, ploidy=ploidy)
    alts = np.zeros(6, dtype=np.uint8)
    fitting = DescentFitting(hmap)
    distance = fitting.fit(alts, target)

    assert set(alts.tolist()) <= {0, 1}
    assert int(alts.sum()) <= 6
    assert distance <= _distance_of(hmap, np.zeros(6, dtype=np.uint8), target) + 1e-9
    assert distance == pytest.approx(_distance_of(hmap, alts, target))
    assert all(a > b for a, b in zip(fitting.trace, fitting.trace[1:]))
    assert len(fitting.trace) - 1 == int(alts.sum())


def test_descent_is_deterministic():
    hmap, target = _random_instance(3, n_founders=5, n_samples=12, ploidy=4)
    a = np.zeros(5, dtype=np.uint8)
    b = np.zeros(5, dtype=np.uint8)
    assert DescentFitting(hmap).fit(a, target) == DescentFitting(hmap).fit(b, target)
    assert np.array_equal(a, b)


def test_fit_driver_fills_every_marker():
    """The driver fits markers independently and sums their distances."""
    hmap = HaplotypesMap(founders=np.array([[0, 0], [1, 1]]), n_founders=2)
    dosages_v = np.array([[1.0, 0.0, 1.0], [2.0, 0.0, 0.0], [0.0, 0.0, 2.0], [1.0, 0.0, 1.0]])
    founders_alts_v = np.zeros((4, 2), dtype=np.uint8)
    report = fit_founders_alleles(DescentFitting(hmap), founders_alts_v, dosages_v)

    assert len(report.distances) == 4
    assert report.total_distance == pytest.approx(0.0)
    assert report.seconds >= 0.0
    assert founders_alts_v.tolist() == [[1, 0], [0, 0], [1, 1], [1, 0]]


def test_fit_driver_rejects_mismatched_targets():
    hmap = HaplotypesMap(founders=np.array([[0, 0]]), n_founders=1)
    with pytest.raises(ValueError):
        fit_founders_alleles(DescentFitting(hmap), np.zeros((2, 1), dtype=np.uint8), np.zeros((3, 3)))
