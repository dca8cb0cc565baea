"""Pydantic models for polyclip configuration."""

from .options import EngineOptions, EngineProfile, OffsetOptions, ScaleOptions

__all__ = [
    "EngineProfile",
    "EngineOptions",
    "OffsetOptions",
    "ScaleOptions",
]
