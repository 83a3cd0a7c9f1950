"""Command line entry point: cluster a TSV file and write one label per line.

Example:
    kmeans3d --file cells.tsv --k 5 --outfile clusters.txt
"""

import argparse
import sys

import numpy as np

from .dataset import DataSet
from .errors import Kmeans3DError
from .kmeans import DEFAULT_MAX_ITERATIONS
from .version import __version__


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog='kmeans3d',
        description='K-means clustering on the first three columns of a TSV file',
    )
    p.add_argument('-f', '--file', required=True, help='Input TSV file (first line is a header)')
    p.add_argument('-k', '--k', type=int, required=True, help='Number of clusters')
    p.add_argument('-o', '--outfile', required=True, help='Output file, one cluster index per line')
    p.add_argument('--seed', type=int, default=None, help='Random seed for reproducible runs')
    p.add_argument('--verbose', action='store_true', help='Print per-iteration progress')
    p.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return p.parse_args(argv)


def write_labels(path, labels) -> None:
    np.savetxt(path, np.asarray(labels, dtype=np.int64), fmt='%d')


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        ds = DataSet.from_tsv(args.file)
        print(f"Loaded {ds.n_rows} rows × {ds.n_cols} columns")

        clusters = ds.kmeans3d(
            args.k, DEFAULT_MAX_ITERATIONS, random_state=args.seed, verbose=args.verbose
        )
        print(f"Assigned {len(clusters)} points into {args.k} clusters")

        write_labels(args.outfile, clusters)
    except (Kmeans3DError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
