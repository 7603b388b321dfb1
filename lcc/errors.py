"""Errors raised by corridor analysis."""


class CorridorError(Exception):
    """Base class for corridor analysis failures."""


class DataAlignmentError(CorridorError):
    """Input rasters are missing or do not share a grid."""


class OutOfBoundsError(CorridorError):
    """A seed point lies outside the raster coverage or on no-data."""


class NoPathFoundError(CorridorError):
    """Seed regions are not connected within the search radius."""
