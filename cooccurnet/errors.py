#!/usr/bin/env python3
"""
errors.py

Exceptions raised along the load -> co-occurrence -> network -> render chain.
Every stage raises immediately; nothing downstream tries to recover.
"""


class CooccurnetError(Exception):
    """Base class for all cooccurnet errors."""


class DataFormatError(CooccurnetError, ValueError):
    """Malformed input table: a presence/absence matrix or a set of co-occurrence records."""


class UnknownNodeReferenceError(CooccurnetError, IndexError):
    """A co-occurrence record points at an item index outside 1..n_items."""

    def __init__(self, index, n_items, field="sp1"):
        self.index = index
        self.n_items = n_items
        self.field = field
        super().__init__(
            f"Co-occurrence record references {field}={index}, "
            f"outside the valid node range 1..{n_items}"
        )


class EngineError(CooccurnetError):
    """Failure inside the probabilistic co-occurrence computation."""


class RenderError(CooccurnetError):
    """Failure while laying out or rendering the network."""
