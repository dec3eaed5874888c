"""Thought intake module for flowbuddy.

Public API:
    ThoughtClassificationPipeline -- Classify, store, research
    ThoughtRepository -- Abstract record store
    InMemoryThoughtStore, JsonFileThoughtStore -- Store implementations
"""

from flowbuddy.intake.pipeline import ThoughtClassificationPipeline, fallback_category
from flowbuddy.intake.store import InMemoryThoughtStore, JsonFileThoughtStore, ThoughtRepository

__all__ = [
    "InMemoryThoughtStore",
    "JsonFileThoughtStore",
    "ThoughtClassificationPipeline",
    "ThoughtRepository",
    "fallback_category",
]
