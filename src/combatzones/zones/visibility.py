"""Who gets to see an entity's reach rings."""

from __future__ import annotations

from combatzones.zones.host import Viewer, ZoneEntity


def reach_visible(entity: ZoneEntity, viewer: Viewer, always_show: bool) -> bool:
    """Reach rings are shown when any of these hold:

    - the "always show" setting is on
    - the viewer is hovering or has selected the entity
    - a non-privileged viewer owns the entity
    """
    if always_show:
        return True
    if entity.hovered or entity.controlled:
        return True
    return not viewer.privileged and entity.is_owned_by(viewer.viewer_id)
