"""
kmeans3d - K-means clustering of tabular data on three coordinates.

Example:
    >>> from kmeans3d import DataSet, cluster
    >>> ds = DataSet.from_tsv("points.tsv")
    >>> labels = cluster(ds.numeric_view(3), k=4, max_iterations=50)
"""

from .version import __version__
from .errors import Kmeans3DError, LoadError, InsufficientDataError
from .kmeans import (
    KMeans3D,
    ClusteringState,
    cluster,
    euclidean_distance,
    assign_clusters,
    update_centroids,
    centroid_shift,
    CONVERGENCE_THRESHOLD,
    DEFAULT_MAX_ITERATIONS,
)
from .dataset import DataSet

__all__ = [
    "__version__",
    "Kmeans3DError",
    "LoadError",
    "InsufficientDataError",
    "KMeans3D",
    "ClusteringState",
    "cluster",
    "euclidean_distance",
    "assign_clusters",
    "update_centroids",
    "centroid_shift",
    "CONVERGENCE_THRESHOLD",
    "DEFAULT_MAX_ITERATIONS",
    "DataSet",
]
