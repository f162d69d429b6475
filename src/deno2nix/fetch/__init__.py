"""Mirror metadata models and clients."""

from .mirror import HttpMirrorClient, MirrorClient, dist_from_metadata
from .model import MirrorDist

__all__ = ["HttpMirrorClient", "MirrorClient", "MirrorDist", "dist_from_metadata"]
