# frsp_analytics/errors.py


class FrspError(Exception):
    """Base class for errors raised around the derivation layer."""


class DataLoadError(FrspError):
    """A data file is missing or is not the JSON shape we expect."""


class SelectionError(FrspError, ValueError):
    """An invalid year/section selection transition."""
