"""Routers package."""

from . import (
    health,
    research,
    swipes,
)
