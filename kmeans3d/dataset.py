"""Tab-separated numeric datasets."""

import csv
from typing import List, Optional

import numpy as np

from .errors import LoadError
from .kmeans import N_DIMS, DEFAULT_MAX_ITERATIONS, KMeans3D, RandomState


def _parse_field(field: str) -> float:
    try:
        return float(field)
    except ValueError:
        return float('nan')


class DataSet:
    """
    A numeric matrix loaded from a TSV file plus its optional column names.

    Args:
        data: Array of shape (n_rows, n_cols)
        headers: Column names, if the source had a header line
    """

    def __init__(self, data: np.ndarray, headers: Optional[List[str]] = None):
        self.data = np.asarray(data, dtype=np.float32)
        self.headers = headers

    @classmethod
    def from_tsv(cls, path) -> 'DataSet':
        """Read a TSV file whose first line is a header.

        Fields that do not parse as floats become NaN. Raises LoadError when
        the file cannot be read, has no data lines or has ragged rows.
        """
        try:
            f = open(path, 'r', newline='')
        except OSError as e:
            raise LoadError(f"Failed to open {path!r}: {e}") from e

        records = []
        with f:
            reader = csv.reader(f, delimiter='\t')
            try:
                headers = next(reader, None)
                for i, record in enumerate(reader):
                    if not record:
                        continue
                    if len(record) != len(headers):
                        raise LoadError(
                            f"Error reading record {i} of {path!r}: found "
                            f"{len(record)} fields, expected {len(headers)}"
                        )
                    records.append([_parse_field(x) for x in record])
            except (csv.Error, UnicodeDecodeError) as e:
                raise LoadError(f"Malformed TSV in {path!r}: {e}") from e

        if not records:
            raise LoadError(f"No data lines found in {path!r}")

        return cls(np.array(records, dtype=np.float32), headers)

    @property
    def shape(self):
        return self.data.shape

    @property
    def n_rows(self) -> int:
        return self.data.shape[0]

    @property
    def n_cols(self) -> int:
        return self.data.shape[1]

    def numeric_view(self, ncols: int) -> np.ndarray:
        """Copy of the first ``ncols`` columns (fewer if the matrix is narrower)."""
        cols = min(ncols, self.n_cols)
        return self.data[:, :cols].copy()

    def kmeans3d(
        self,
        k: int,
        max_iter: int = DEFAULT_MAX_ITERATIONS,
        random_state: RandomState = None,
        verbose: bool = False,
    ) -> np.ndarray:
        """Cluster the rows on their first three columns."""
        model = KMeans3D(k, max_iters=max_iter, random_state=random_state, verbose=verbose)
        return model.fit_predict(self.numeric_view(N_DIMS))
