from __future__ import annotations


class DailyScopeError(Exception):
    """Base class for all Daily Scope errors."""


class CollectorError(DailyScopeError):
    """A collector could not produce a batch (network, timeout, missing selector).

    Never escapes the collector boundary; it is turned into a failed
    ``CollectResult`` there.
    """


class FatalInitError(DailyScopeError):
    """The run environment could not be set up. The only error that fails a run."""
