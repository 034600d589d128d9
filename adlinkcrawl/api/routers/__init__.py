"""API router factory functions."""
from .analysis import create_analysis_router
from .systems import create_systems_router

__all__ = [
    "create_analysis_router",
    "create_systems_router",
]
