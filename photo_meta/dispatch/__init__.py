"""Side effects run after a batch: JSON persistence and script hand-off."""

from .side_effects import SideEffectDispatcher

__all__ = ["SideEffectDispatcher"]
