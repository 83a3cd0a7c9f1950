"""
K-means clustering restricted to three coordinate dimensions.

Lloyd iterations with uniform random initialization, empty-cluster reseeding
and an early stop once the centroids stop moving.
"""

import numpy as np
from typing import NamedTuple, Optional, Union

from .errors import InsufficientDataError

N_DIMS = 3
CONVERGENCE_THRESHOLD = 1e-4
DEFAULT_MAX_ITERATIONS = 50

RandomState = Union[None, int, np.random.Generator]


class ClusteringState(NamedTuple):
    """Centroids and labels of one iteration. Replaced, never patched."""
    centroids: np.ndarray
    labels: Optional[np.ndarray]


def check_random_state(random_state: RandomState) -> np.random.Generator:
    """Turn None, an int seed or an existing Generator into a Generator."""
    return np.random.default_rng(random_state)


def as_point_set(X) -> np.ndarray:
    """Convert X to a float32 array of shape (n_points, 3)."""
    points = np.asarray(X, dtype=np.float32)
    if points.size == 0:
        return points.reshape(0, N_DIMS)
    if points.ndim != 2 or points.shape[1] != N_DIMS:
        raise ValueError(
            f"Expected points of shape (n, {N_DIMS}), got {points.shape}"
        )
    return points


def euclidean_distance(a, b) -> float:
    """Euclidean distance between two 3D points."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    return float(np.sqrt(np.sum((a - b) ** 2)))


def assign_clusters(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Label each point with the index of its nearest centroid.

    Ties go to the lowest centroid index. A NaN distance never wins, so a
    point whose distances are all NaN ends up in cluster 0.
    """
    # (n_points, n_clusters)
    distances = np.linalg.norm(
        points[:, np.newaxis, :] - centroids[np.newaxis, :, :], axis=2
    )
    distances = np.where(np.isnan(distances), np.inf, distances)
    return np.argmin(distances, axis=1)


def update_centroids(
    points: np.ndarray,
    labels: np.ndarray,
    n_clusters: int,
    rng: np.random.Generator,
) -> np.ndarray:
    """Mean of the points assigned to each cluster.

    An empty cluster is reseeded to a random point drawn from the whole point
    set, which may already belong to another cluster.
    """
    centroids = np.empty((n_clusters, points.shape[1]), dtype=points.dtype)
    for k in range(n_clusters):
        mask = labels == k
        if np.any(mask):
            centroids[k] = points[mask].mean(axis=0)
        else:
            centroids[k] = points[rng.integers(len(points))]
    return centroids


def centroid_shift(old: np.ndarray, new: np.ndarray) -> float:
    """Total absolute coordinate movement between two sets of centroids."""
    return float(np.abs(old - new).sum())


class KMeans3D:
    """
    Lloyd's k-means on (n, 3) point sets.

    Features:
    - Initial centroids are k distinct points drawn without replacement
    - Empty clusters are reseeded instead of dying
    - Early stopping when total centroid movement drops below ``tol``
    - Injectable random source for reproducible runs
    """

    def __init__(
        self,
        n_clusters: int,
        max_iters: int = DEFAULT_MAX_ITERATIONS,
        tol: float = CONVERGENCE_THRESHOLD,
        init: Union[str, np.ndarray] = 'random',
        random_state: RandomState = None,
        verbose: bool = False
    ):
        """
        Initialize 3D K-means clustering.

        Args:
            n_clusters: Number of clusters
            max_iters: Maximum number of iterations, 0 is allowed
            tol: Total centroid movement below which iteration stops
            init: 'random' or an explicit array of shape (n_clusters, 3)
            random_state: Seed or numpy Generator; None draws fresh entropy
            verbose: Whether to print progress information
        """
        if max_iters < 0:
            raise ValueError(f"max_iters must be non-negative, got {max_iters}")
        self.n_clusters = n_clusters
        self.max_iters = max_iters
        self.tol = tol
        self.init = init
        self.random_state = random_state
        self.verbose = verbose

        # Results
        self.cluster_centers_ = None
        self.labels_ = None
        self.inertia_ = None
        self.n_iter_ = None
        self.converged_ = None

    def _check_n_clusters(self, X: np.ndarray) -> None:
        n_points = X.shape[0]
        if self.n_clusters < 1:
            raise InsufficientDataError(
                f"Cannot form {self.n_clusters} clusters, need at least one"
            )
        if n_points < self.n_clusters:
            raise InsufficientDataError(
                f"Not enough data points ({n_points}) for {self.n_clusters} clusters"
            )

    def _init_centroids(self, X: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        """Pick initial centroids, by default k distinct random points."""
        if isinstance(self.init, str):
            if self.init != 'random':
                raise ValueError(f"Unknown initialization method: {self.init}")
            indices = rng.choice(X.shape[0], self.n_clusters, replace=False)
            return X[indices].copy()

        centroids = np.array(self.init, dtype=X.dtype)
        if centroids.shape != (self.n_clusters, N_DIMS):
            raise ValueError(
                f"init must have shape ({self.n_clusters}, {N_DIMS}), got {centroids.shape}"
            )
        return centroids

    def _calculate_inertia(self, X: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> float:
        """Within-cluster sum of squares."""
        assigned_centroids = centroids[labels]
        return float(np.sum((X - assigned_centroids) ** 2))

    def fit(self, X) -> 'KMeans3D':
        """
        Fit K-means clustering to the points.

        Args:
            X: Input points of shape (n_points, 3)

        Returns:
            self
        """
        X = as_point_set(X)
        self._check_n_clusters(X)
        rng = check_random_state(self.random_state)

        if self.verbose:
            print(f"Fitting 3D K-means with {self.n_clusters} clusters on {X.shape[0]} points...")

        state = ClusteringState(self._init_centroids(X, rng), None)
        converged = False
        n_iter = 0

        for iteration in range(self.max_iters):
            labels = assign_clusters(X, state.centroids)
            new_centroids = update_centroids(X, labels, self.n_clusters, rng)
            shift = centroid_shift(state.centroids, new_centroids)
            n_iter = iteration + 1

            if shift < self.tol:
                state = ClusteringState(state.centroids, labels)
                converged = True
                if self.verbose:
                    print(f"Converged after {n_iter} iterations")
                break

            state = ClusteringState(new_centroids, labels)

            if self.verbose and n_iter % 10 == 0:
                print(f"Iteration {n_iter}, centroid shift: {shift:.6f}")

        if state.labels is None:
            # max_iters == 0: label against the initial centroids only
            state = ClusteringState(state.centroids, assign_clusters(X, state.centroids))

        self.cluster_centers_ = state.centroids
        self.labels_ = state.labels
        self.inertia_ = self._calculate_inertia(X, state.labels, state.centroids)
        self.n_iter_ = n_iter
        self.converged_ = converged

        if self.verbose:
            status = "converged" if converged else "stopped at iteration cap"
            print(f"Finished ({status}), inertia: {self.inertia_:.4f}")

        return self

    def predict(self, X) -> np.ndarray:
        """
        Predict cluster labels for new points.

        Args:
            X: Input points of shape (n_points, 3)

        Returns:
            Cluster labels
        """
        if self.cluster_centers_ is None:
            raise ValueError("Model must be fitted before prediction")

        return assign_clusters(as_point_set(X), self.cluster_centers_)

    def fit_predict(self, X) -> np.ndarray:
        """Fit the model and return the cluster label of every point."""
        return self.fit(X).labels_

    def get_cluster_info(self) -> dict:
        """Get information about the clustering results."""
        if self.cluster_centers_ is None:
            raise ValueError("Model must be fitted first")

        cluster_sizes = np.bincount(self.labels_, minlength=self.n_clusters)

        return {
            'n_clusters': self.n_clusters,
            'inertia': self.inertia_,
            'n_iterations': self.n_iter_,
            'converged': self.converged_,
            'cluster_sizes': {k: int(size) for k, size in enumerate(cluster_sizes)},
            'empty_clusters': int(np.sum(cluster_sizes == 0)),
            'min_cluster_size': int(cluster_sizes.min()),
            'max_cluster_size': int(cluster_sizes.max())
        }


def cluster(
    points,
    k: int,
    max_iterations: int,
    random_state: RandomState = None,
) -> np.ndarray:
    """Partition ``points`` into ``k`` clusters and return one label per point.

    Raises:
        InsufficientDataError: if ``k == 0`` or there are fewer points than ``k``.
    """
    model = KMeans3D(k, max_iters=max_iterations, random_state=random_state)
    return model.fit_predict(points)
