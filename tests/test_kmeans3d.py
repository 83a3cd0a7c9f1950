import numpy as np
import pytest
from sklearn.cluster import KMeans
from sklearn.metrics import adjusted_rand_score

from kmeans3d import (
    KMeans3D,
    InsufficientDataError,
    cluster,
    euclidean_distance,
    assign_clusters,
    update_centroids,
    centroid_shift,
    CONVERGENCE_THRESHOLD,
)

SEPARATED = np.array([
    [0.0, 0.0, 0.0],
    [0.1, 0.0, 0.0],
    [9.0, 9.0, 9.0],
    [9.1, 9.1, 9.1],
], dtype=np.float32)


def two_blobs(seed=0, n=100):
    rng = np.random.default_rng(seed)
    X = np.vstack([
        rng.normal(loc=0.0, scale=0.5, size=(n, 3)),
        rng.normal(loc=50.0, scale=0.5, size=(n, 3)),
    ]).astype(np.float32)
    y = np.repeat([0, 1], n)
    return X, y


def test_euclidean_distance_345():
    assert euclidean_distance((0, 0, 0), (0, 3, 4)) == 5.0


def test_labels_have_right_length_and_range():
    rng = np.random.default_rng(3)
    X = rng.random((57, 3))
    for k in (1, 2, 5, 57):
        labels = cluster(X, k, 20)
        assert len(labels) == len(X)
        assert labels.min() >= 0
        assert labels.max() < k


def test_k_larger_than_point_count():
    with pytest.raises(InsufficientDataError):
        cluster(SEPARATED, 5, 10)


def test_k_zero():
    with pytest.raises(InsufficientDataError):
        cluster(SEPARATED, 0, 10)
    with pytest.raises(InsufficientDataError):
        cluster(np.empty((0, 3)), 0, 10)


def test_insufficient_data_is_a_value_error():
    with pytest.raises(ValueError):
        cluster(SEPARATED[:1], 2, 10)


def test_wrong_dimensionality_rejected():
    with pytest.raises(ValueError):
        cluster(np.zeros((5, 2)), 2, 10)


def test_negative_max_iters_rejected():
    with pytest.raises(ValueError):
        KMeans3D(2, max_iters=-1)


def test_separated_clusters_grouping_over_random_trials():
    for _ in range(50):
        labels = cluster(SEPARATED, 2, 2)
        assert labels[0] == labels[1]
        assert labels[2] == labels[3]
        assert labels[0] != labels[2]


def test_separated_clusters_with_seeds():
    for seed in range(20):
        labels = cluster(SEPARATED, 2, 20, random_state=seed)
        assert labels[0] == labels[1] != labels[2] == labels[3]


def test_zero_iterations_uses_initial_centroids():
    model = KMeans3D(2, max_iters=0, random_state=7).fit(SEPARATED)
    assert model.n_iter_ == 0
    assert not model.converged_
    assert len(model.labels_) == 4
    # initial centroids are distinct input points
    for c in model.cluster_centers_:
        assert any(np.array_equal(c, p) for p in SEPARATED)
    d = np.linalg.norm(SEPARATED[:, None, :] - model.cluster_centers_[None, :, :], axis=2)
    np.testing.assert_array_equal(model.labels_, np.argmin(d, axis=1))


def test_zero_iterations_through_cluster():
    labels = cluster(SEPARATED, 3, 0)
    assert len(labels) == 4
    assert set(labels.tolist()) <= {0, 1, 2}


def test_equilibrium_has_no_shift():
    X = np.array([
        [0.0, 0.0, 0.0],
        [2.0, 0.0, 0.0],
        [10.0, 10.0, 10.0],
        [12.0, 10.0, 10.0],
    ], dtype=np.float32)
    labels = np.array([0, 0, 1, 1])
    centroids = np.array([[1.0, 0.0, 0.0], [11.0, 10.0, 10.0]], dtype=np.float32)

    new_centroids = update_centroids(X, labels, 2, np.random.default_rng(0))
    assert centroid_shift(centroids, new_centroids) < CONVERGENCE_THRESHOLD

    model = KMeans3D(2, max_iters=50, init=centroids).fit(X)
    assert model.converged_
    assert model.n_iter_ == 1
    np.testing.assert_array_equal(model.cluster_centers_, centroids)
    np.testing.assert_array_equal(model.labels_, labels)


def test_assign_ties_go_to_lowest_index():
    X = np.array([[0.0, 0.0, 0.0]], dtype=np.float32)
    centroids = np.array([[5.0, 0.0, 0.0], [1.0, 0.0, 0.0], [-1.0, 0.0, 0.0]], dtype=np.float32)
    assert assign_clusters(X, centroids).tolist() == [1]


def test_nan_point_goes_to_first_cluster():
    X = np.array([[np.nan, 1.0, 1.0], [5.0, 5.0, 5.0]], dtype=np.float32)
    centroids = np.array([[9.0, 9.0, 9.0], [5.0, 5.0, 5.0]], dtype=np.float32)
    assert assign_clusters(X, centroids).tolist() == [0, 1]


def test_nan_rows_still_give_valid_labels():
    X = np.vstack([SEPARATED, [[np.nan, 0.0, 0.0]]]).astype(np.float32)
    labels = cluster(X, 2, 10, random_state=1)
    assert len(labels) == 5
    assert set(labels.tolist()) <= {0, 1}


def test_empty_cluster_is_reseeded_from_points():
    labels = np.zeros(len(SEPARATED), dtype=int)
    centroids = update_centroids(SEPARATED, labels, 3, np.random.default_rng(5))
    np.testing.assert_allclose(centroids[0], SEPARATED.mean(axis=0))
    for c in centroids[1:]:
        assert any(np.array_equal(c, p) for p in SEPARATED)


def test_seed_reproducibility():
    X, _ = two_blobs(seed=4)
    a = cluster(X, 4, 50, random_state=123)
    b = cluster(X, 4, 50, random_state=123)
    np.testing.assert_array_equal(a, b)


def test_generator_random_state_is_used():
    X, _ = two_blobs(seed=4)
    rng = np.random.default_rng(9)
    labels = KMeans3D(2, random_state=rng).fit_predict(X)
    assert adjusted_rand_score(two_blobs(seed=4)[1], labels) == 1.0


def test_two_blobs_recovered():
    X, y = two_blobs(seed=11)
    for seed in range(10):
        labels = cluster(X, 2, 50, random_state=seed)
        assert adjusted_rand_score(y, labels) == 1.0


def test_inertia_matches_sklearn():
    X, _ = two_blobs(seed=21)
    ours = KMeans3D(2, random_state=0).fit(X)
    ref = KMeans(n_clusters=2, n_init=5, random_state=0).fit(X)
    rel_diff = abs(ours.inertia_ - ref.inertia_) / ref.inertia_
    assert rel_diff < 0.01, f"inertia differs from sklearn: rel_diff={rel_diff:.4f}"


def test_predict_and_cluster_info():
    X, _ = two_blobs(seed=2, n=30)
    model = KMeans3D(2, random_state=3).fit(X)
    np.testing.assert_array_equal(model.predict(X), model.labels_)

    info = model.get_cluster_info()
    assert info['n_clusters'] == 2
    assert sum(info['cluster_sizes'].values()) == 60
    assert info['min_cluster_size'] == info['max_cluster_size'] == 30
    assert info['empty_clusters'] == 0
    assert info['converged']


def test_predict_before_fit():
    with pytest.raises(ValueError):
        KMeans3D(2).predict(SEPARATED)


def test_unknown_init():
    with pytest.raises(ValueError):
        KMeans3D(2, init='k-means++').fit(SEPARATED)
