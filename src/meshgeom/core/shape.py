from __future__ import annotations

from typing import List, Protocol, Sequence, runtime_checkable

from ..geometry import Point, PointLike, as_point


@runtime_checkable
class Shape(Protocol):
    """
    Capability shared by every point-based shape of the kernel.

    Shapes own their vertex list and expose it read-only through ``points``;
    the only ways to change it are ``set_data`` (replace the vertices and
    recompute derived state) and ``move`` (rigid translation).
    """

    @property
    def points(self) -> List[Point]: ...

    def set_data(self, points: Sequence[PointLike]) -> None: ...

    def move(self, delta: PointLike) -> None: ...


def translate(points: Sequence[PointLike], delta: PointLike) -> List[Point]:
    """Return ``points`` shifted by ``delta``."""
    d = as_point(delta)
    return [as_point(p) + d for p in points]


__all__ = ["Shape", "translate"]
