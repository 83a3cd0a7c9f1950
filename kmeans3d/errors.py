"""Exceptions raised by kmeans3d."""


class Kmeans3DError(Exception):
    """Base class for all kmeans3d errors."""


class LoadError(Kmeans3DError, IOError):
    """The dataset could not be opened, was empty or had ragged rows."""


class InsufficientDataError(Kmeans3DError, ValueError):
    """Fewer points than requested clusters (this includes k == 0)."""
