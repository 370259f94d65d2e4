"""Tests for the validation engine."""

import logging
import math

import jax
import jax.numpy as jnp
import pytest

from clusterlab.interface import InvariantViolation, ValidationEngine
from clusterlab.interface.clustering import count_contingency

from .conftest import make_dataset, make_params


class TestValidationEngine:
    def test_perfect_clustering(self, perfect_case):
        params, dataset = perfect_case
        metrics = ValidationEngine().validate(params, dataset)

        assert metrics.purity == pytest.approx(1.0)
        assert metrics.nmi == pytest.approx(1.0, abs=1e-6)
        assert params[1].label == "A"
        assert params[2].label == "B"

    def test_single_cluster_for_two_classes(self, merged_case):
        params, dataset = merged_case
        metrics = ValidationEngine().validate(params, dataset)

        assert metrics.purity == pytest.approx(0.5)
        assert metrics.nmi == pytest.approx(0.0, abs=1e-6)
        assert params[1].label == "A"

    def test_unknown_cluster_raises_without_labelling(self):
        dataset = make_dataset(["A", "A", "B", "B"], [1, 1, 2, 99])
        params = make_params([1, 2], ["A", "B"], dataset)

        with pytest.raises(InvariantViolation, match="99"):
            ValidationEngine().validate(params, dataset)
        assert params[1].label is None
        assert params[2].label is None

    def test_unknown_class_raises(self):
        dataset = make_dataset(["A", "Z"], [1, 1])
        params = make_params([1], ["A"], dataset)
        with pytest.raises(InvariantViolation, match="'Z'"):
            ValidationEngine().validate(params, dataset)

    def test_unlabelled_record_raises(self):
        dataset = make_dataset(["A", None], [1, 1])
        params = make_params([1], ["A"], dataset)
        with pytest.raises(InvariantViolation):
            ValidationEngine().validate(params, dataset)

    def test_no_gold_classes_gives_empty_metrics(self):
        dataset = make_dataset(["A", "B"], [1, 1])
        params = make_params([1], [], dataset)

        metrics = ValidationEngine().validate(params, dataset)
        assert metrics.is_empty
        assert params[1].label is None

    def test_empty_dataset_warns(self, caplog):
        params = make_params([1], ["A"])
        with caplog.at_level(logging.WARNING):
            metrics = ValidationEngine().validate(params, make_dataset([]))
        assert metrics.is_empty
        assert "empty" in caplog.text

    def test_repeated_validation_is_idempotent(self, perfect_case):
        params, dataset = perfect_case
        engine = ValidationEngine()
        first = engine.validate(params, dataset)
        labels = {cid: c.label for cid, c in params.clusters.items()}
        second = engine.validate(params, dataset)

        assert first == second
        assert {cid: c.label for cid, c in params.clusters.items()} == labels

    def test_empty_registered_cluster(self):
        dataset = make_dataset(["A", "A", "B"], [1, 1, 2])
        params = make_params([1, 2, 3], ["A", "B"], dataset)

        metrics = ValidationEngine().validate(params, dataset)
        assert metrics.purity == pytest.approx(1.0)
        assert metrics.nmi == pytest.approx(1.0, abs=1e-5)
        assert params[3].label == "A"

    def test_gold_class_absent_from_data(self):
        dataset = make_dataset(["A", "A", "B"], [1, 1, 2])
        params = make_params([1, 2], ["A", "B", "C"], dataset)

        metrics = ValidationEngine().validate(params, dataset)
        assert metrics.purity == pytest.approx(1.0)
        assert math.isfinite(metrics.nmi)
        assert metrics.nmi == pytest.approx(1.0, abs=1e-5)
        assert [params[1].label, params[2].label] == ["A", "B"]

    def test_singleton_clusters(self):
        dataset = make_dataset(["A", "A", "B", "B"], [1, 2, 3, 4])
        params = make_params([1, 2, 3, 4], ["A", "B"], dataset)

        metrics = ValidationEngine().validate(params, dataset)
        assert metrics.purity == pytest.approx(1.0)
        # I = ln 2, H(W) = ln 4, H(C) = ln 2
        assert metrics.nmi == pytest.approx(2 / 3, abs=1e-5)

    def test_scores_ignore_cluster_membership(self, perfect_case):
        params, dataset = perfect_case
        params[1].clear()
        params[2].clear()
        metrics = ValidationEngine().validate(params, dataset)
        assert metrics.purity == pytest.approx(1.0)

    def test_reference_class_entropy_warns(self, perfect_case, caplog):
        params, dataset = perfect_case
        with caplog.at_level(logging.WARNING):
            metrics = ValidationEngine(reference_class_entropy=True).validate(
                params, dataset
            )
        assert metrics.nmi == pytest.approx(1.0, abs=1e-6)
        assert "reference class entropy" in caplog.text

    def test_parallelized_matches_sequential(self):
        classes = ["A", "B", "C"] * 7
        predictions = [i % 4 for i in range(len(classes))]
        dataset = make_dataset(classes, predictions)

        sequential = ValidationEngine().validate(
            make_params(range(4), ["A", "B", "C"], dataset), dataset
        )
        sharded = ValidationEngine(parallelized=True, n_shards=5).validate(
            make_params(range(4), ["A", "B", "C"], dataset), dataset
        )
        assert sharded.purity == pytest.approx(sequential.purity)
        assert sharded.nmi == pytest.approx(sequential.nmi, abs=1e-6)

    @pytest.mark.parametrize("n", [200, 5000])
    def test_matches_scikit_learn(self, n):
        metrics_mod = pytest.importorskip("sklearn.metrics")
        key_w, key_c = jax.random.split(jax.random.PRNGKey(3))
        predictions = jax.random.randint(key_w, (n,), 0, 5).tolist()
        classes = jax.random.randint(key_c, (n,), 0, 3).tolist()
        # correlate the two partitions
        predictions = [c if i % 3 else w for i, (w, c) in enumerate(zip(predictions, classes))]

        dataset = make_dataset(classes, predictions)
        params = make_params(range(5), sorted(set(classes)), dataset)
        metrics = ValidationEngine().validate(params, dataset)

        expected = metrics_mod.normalized_mutual_info_score(
            classes, predictions, average_method="arithmetic"
        )
        assert metrics.nmi == pytest.approx(expected, abs=1e-5)


class TestCountContingency:
    @pytest.mark.parametrize("n_shards", [1, 2, 3, 8, 50])
    def test_sharded_counts_equal_sequential(self, n_shards):
        key_w, key_c = jax.random.split(jax.random.PRNGKey(0))
        cluster_idx = jax.random.randint(key_w, (37,), 0, 4)
        class_idx = jax.random.randint(key_c, (37,), 0, 3)

        expected = count_contingency(cluster_idx, class_idx, 4, 3)
        actual = count_contingency(cluster_idx, class_idx, 4, 3, n_shards=n_shards)
        assert jnp.array_equal(expected, actual)
        assert int(jnp.sum(actual)) == 37

    def test_counts(self):
        counts = count_contingency(jnp.array([0, 0, 1]), jnp.array([1, 1, 0]), 2, 2)
        assert counts.tolist() == [[0, 2], [1, 0]]

    def test_empty_input(self):
        counts = count_contingency(jnp.array([]), jnp.array([]), 2, 2, n_shards=4)
        assert counts.tolist() == [[0, 0], [0, 0]]

    def test_invalid_shard_count(self):
        with pytest.raises(ValueError):
            count_contingency(jnp.array([0]), jnp.array([0]), 1, 1, n_shards=0)
