"""Directional combat-zone and weapon-reach overlays for 2D scenes."""

__version__ = "0.1.0"
