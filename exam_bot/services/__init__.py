"""Client-side components talking to the Exam Bot backend."""

from .ads import AdAdmin, AdResolver, Creative, PendingEdit
from .backend import BackendClient
from .generation import GenerationOrchestrator, GenerationResult, GenerationState
from .images import Image, ImageStore
from .models import AdSlot, GenerationKind, VisitorStats
from .session import AdminSession, StatsPoller
from .visitors import VisitorTracker

__all__ = [
    "AdAdmin",
    "AdResolver",
    "AdSlot",
    "AdminSession",
    "BackendClient",
    "Creative",
    "GenerationKind",
    "GenerationOrchestrator",
    "GenerationResult",
    "GenerationState",
    "Image",
    "ImageStore",
    "PendingEdit",
    "StatsPoller",
    "VisitorStats",
    "VisitorTracker",
]
