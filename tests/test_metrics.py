"""Tests for contingency-table scores."""

import math

import jax.numpy as jnp
import pytest

from clusterlab.interface.clustering import (
    ContingencyTable,
    ValidationMetrics,
    average_metrics,
    entropy,
    mutual_information,
    normalized_mutual_information,
    purity,
)


def table(counts, cluster_ids=None, classes=None):
    counts = jnp.asarray(counts, dtype=jnp.int32)
    k, c = counts.shape
    return ContingencyTable(
        cluster_ids=tuple(cluster_ids or range(k)),
        classes=tuple(classes or [f"c{j}" for j in range(c)]),
        counts=counts,
    )


class TestContingencyTable:
    def test_marginals(self):
        t = table([[3, 1], [0, 2]])
        assert t.n == 6
        assert t.cluster_counts.tolist() == [4, 2]
        assert t.class_counts.tolist() == [3, 3]

    def test_majority_ties_go_to_first_class(self):
        t = table([[2, 2], [0, 1]], classes=["A", "B"])
        assert t.majority_classes() == ["A", "B"]

    def test_empty_cluster_gets_first_class(self):
        t = table([[0, 0], [1, 3]], classes=["A", "B"])
        assert t.majority_classes() == ["A", "B"]


class TestScores:
    def test_entropy_of_uniform_partition(self):
        assert entropy(jnp.array([2, 2]), 4) == pytest.approx(math.log(2), abs=1e-6)

    def test_entropy_ignores_empty_parts(self):
        assert entropy(jnp.array([4, 0]), 4) == pytest.approx(0.0, abs=1e-7)

    def test_purity(self):
        # Manning et al. example: clusters of 6, 6 and 5 with majorities 5, 4, 3
        t = table([[5, 1, 0], [1, 4, 1], [2, 0, 3]])
        assert purity(t) == pytest.approx(12 / 17)

    def test_purity_of_empty_table(self):
        assert purity(table([[0, 0]])) == 0.0

    def test_nmi_of_textbook_example(self):
        t = table([[5, 1, 0], [1, 4, 1], [2, 0, 3]])
        assert normalized_mutual_information(t) == pytest.approx(0.36, abs=0.01)

    def test_mutual_information_of_independent_partition(self):
        t = table([[1, 1], [1, 1]])
        assert mutual_information(t) == pytest.approx(0.0, abs=1e-6)

    def test_perfect_agreement(self):
        t = table([[2, 0], [0, 2]])
        assert purity(t) == 1.0
        assert normalized_mutual_information(t) == pytest.approx(1.0, abs=1e-6)

    def test_zero_counts_stay_finite(self):
        t = table([[2, 0, 0], [0, 0, 0], [0, 1, 1]])
        nmi = normalized_mutual_information(t)
        assert math.isfinite(nmi)
        assert 0.0 <= nmi <= 1.0

    def test_single_cluster_single_class(self):
        assert normalized_mutual_information(table([[4]])) == 1.0

    def test_single_cluster_many_classes(self):
        assert normalized_mutual_information(table([[2, 2]])) == pytest.approx(
            0.0, abs=1e-6
        )

    def test_empty_table(self):
        assert normalized_mutual_information(table([[0, 0], [0, 0]])) == 0.0

    def test_reference_class_entropy_uses_cluster_sizes(self):
        # 3 clusters, 2 classes: H(W) = ln 3 and H(C) = ln 2
        t = table([[2, 0], [0, 2], [1, 1]])
        mi = mutual_information(t)
        standard = normalized_mutual_information(t)
        reference = normalized_mutual_information(t, reference_class_entropy=True)

        h_w = math.log(3)
        h_c = math.log(2)
        assert standard == pytest.approx(mi / ((h_w + h_c) / 2), abs=1e-5)
        assert reference == pytest.approx(mi / h_w, abs=1e-5)
        assert reference < standard


class TestValidationMetrics:
    def test_empty(self):
        metrics = ValidationMetrics()
        assert metrics.is_empty
        assert metrics.to_metric_dict() == {}

    def test_metric_dict(self):
        metrics = ValidationMetrics(purity=0.5, nmi=0.25)
        scores = {k: v for k, (_, v) in metrics.to_metric_dict("Fold").items()}
        assert scores == {"Fold/Purity": 0.5, "Fold/NMI": 0.25}

    def test_average(self):
        avg = average_metrics(
            [ValidationMetrics(purity=1.0, nmi=0.5), ValidationMetrics(purity=0.5, nmi=0.0)]
        )
        assert avg.purity == pytest.approx(0.75)
        assert avg.nmi == pytest.approx(0.25)

    def test_average_with_missing_fold(self):
        avg = average_metrics([ValidationMetrics(purity=1.0, nmi=1.0), ValidationMetrics()])
        assert avg.is_empty

    def test_average_of_nothing(self):
        assert average_metrics([]).is_empty
