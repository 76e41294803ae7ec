"""Typed memory payload models."""

from memory.types.distilled import DistilledMemory
from memory.types.entry import MemoryEntry
from memory.types.pattern import EvolutionRecord, EvolutionType, Pattern
from memory.types.results import ConsolidationResult, RetrievalResult
from memory.types.trajectory import Trajectory, TrajectoryStep, TrajectoryVerdict

__all__ = [
    "ConsolidationResult",
    "DistilledMemory",
    "EvolutionRecord",
    "EvolutionType",
    "MemoryEntry",
    "Pattern",
    "RetrievalResult",
    "Trajectory",
    "TrajectoryStep",
    "TrajectoryVerdict",
]
