from dataclasses import dataclass

from ..processing.difference_of_mean import Radii, RadiusPair


@dataclass(frozen=True)
class Region:
    """Bounding rectangle of the selection being dragged, in image pixels."""

    x: int
    y: int
    width: int
    height: int

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


def _as_pair(value) -> RadiusPair:
    rx, ry = (int(v) for v in value)
    if rx < 0 or ry < 0:
        raise ValueError(f"Radius must be non-negative, got ({rx}, {ry})")
    return RadiusPair(rx, ry)


class RadiusState:
    """
    Primary and secondary window radii.

    Not locked by itself: writes go through ``RepaintScheduler.request_repaint``
    and reads through the scheduler snapshot, both under the scheduler lock.
    """

    def __init__(self, primary=(0, 0), secondary=(0, 0)):
        self.primary = _as_pair(primary)
        self.secondary = _as_pair(secondary)

    def apply_region(self, region: Region | None, modifier: bool):
        """Sets the active pair from the region size, or resets it when there is none."""
        if region is None or region.is_empty:
            pair = RadiusPair(0, 0)
        else:
            pair = RadiusPair(region.width // 2, region.height // 2)

        if modifier:
            self.secondary = pair
        else:
            self.primary = pair

    def snapshot(self) -> Radii:
        return Radii(self.primary, self.secondary)
