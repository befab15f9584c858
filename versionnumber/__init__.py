"""Build version numbers from templates and job history."""

from versionnumber.core import BuildInfo, Result, Run, VersionNumberAction
from versionnumber.step import DESCRIPTOR, VersionNumberExecution, VersionNumberStep

__version__ = "1.0.0"

__all__ = [
    "BuildInfo",
    "DESCRIPTOR",
    "Result",
    "Run",
    "VersionNumberAction",
    "VersionNumberExecution",
    "VersionNumberStep",
]
