"""
Exceptions raised by the simulation core.
"""


class NeuroLabError(Exception):
    """Base class for all package errors."""


class ModelReleasedError(NeuroLabError):
    """An operation was attempted on a model or integrator after free()."""


class DanglingReferenceError(NeuroLabError):
    """A synapse was stepped while one of its connected neurons was freed."""
