"""sessionpulse - in-process session tracking for error-rate normalisation.

Counts application sessions per minute and periodically delivers the
bucketed counts to an observability backend, so crash and error rates can
be expressed relative to session volume.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("sessionpulse")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
