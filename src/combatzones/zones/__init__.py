"""Zone overlay -- geometry, change-tracked rendering and host wiring.

Provides the facing sector table and grid unit conversion, the per-entity
render state machine that redraws only when transform, reach or display
settings change, asynchronous actor-data derivation with coalescing, and
the controller that maps host events onto all of it.
"""

from combatzones.zones.config import (
    DisplaySnapshot,
    ZoneDisplayConfig,
)
from combatzones.zones.controller import ZoneController
from combatzones.zones.derivation import DerivationCoordinator
from combatzones.zones.geometry import (
    SECTORS,
    SPOKE_ANGLES,
    ZoneSector,
    grid_distance_in_units,
    units_to_px,
)
from combatzones.zones.renderer import (
    EntityRenderRecord,
    RenderState,
    ZoneRenderer,
)

__all__ = [
    "DerivationCoordinator",
    "DisplaySnapshot",
    "EntityRenderRecord",
    "RenderState",
    "SECTORS",
    "SPOKE_ANGLES",
    "ZoneController",
    "ZoneDisplayConfig",
    "ZoneRenderer",
    "ZoneSector",
    "grid_distance_in_units",
    "units_to_px",
]
