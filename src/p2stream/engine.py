"""Marker adjustment for the P² algorithm (Jain & Chlamtac, 1985).

Every function here works in place on an ordered ``list[Marker]`` and is
shared by the quantile and histogram estimators, which differ only in the
number of markers and their target quantiles.
"""

from __future__ import annotations

from bisect import bisect_right
from operator import attrgetter

from p2stream.markers import Marker

_height = attrgetter("height")


def locate_cell(markers: list[Marker], value: float) -> int:
    """Return the cell ``value`` lands in, widening the min/max markers."""
    last = len(markers) - 1
    if value < markers[0].height:
        markers[0].height = value
        return 0
    if value >= markers[last].height:
        markers[last].height = value
        return last - 1
    # h[0] <= value < h[last], so the result lies in [0, last - 1]
    return bisect_right(markers, value, key=_height) - 1


def parabolic(markers: list[Marker], index: int, step: int) -> float:
    prev, cur, nxt = markers[index - 1], markers[index], markers[index + 1]
    return cur.height + step / (nxt.position - prev.position) * (
        (cur.position - prev.position + step)
        * (nxt.height - cur.height)
        / (nxt.position - cur.position)
        + (nxt.position - cur.position - step)
        * (cur.height - prev.height)
        / (cur.position - prev.position)
    )


def linear(markers: list[Marker], index: int, step: int) -> float:
    cur, neighbour = markers[index], markers[index + step]
    return cur.height + step * (
        (neighbour.height - cur.height) / (neighbour.position - cur.position)
    )


def _adjust_marker(markers: list[Marker], index: int) -> None:
    prev, cur, nxt = markers[index - 1], markers[index], markers[index + 1]
    assert nxt.position > prev.position, "marker positions out of order"

    desired_delta = cur.desired_position - cur.position
    if desired_delta >= 1.0 and nxt.position - cur.position > 1:
        step = 1
    elif desired_delta <= -1.0 and prev.position - cur.position < -1:
        step = -1
    else:
        return

    proposal = parabolic(markers, index, step)
    if prev.height < proposal < nxt.height:
        cur.height = proposal
    else:
        cur.height = linear(markers, index, step)
    cur.position += step


def adjust(markers: list[Marker], value: float) -> int:
    """Apply one observation to a warm marker array and return its cell."""
    cell = locate_cell(markers, value)
    for marker in markers[cell + 1 :]:
        marker.position += 1
    for marker in markers:
        marker.desired_position += marker.increment
    for index in range(1, len(markers) - 1):
        _adjust_marker(markers, index)
    return cell


__all__ = ["adjust", "linear", "locate_cell", "parabolic"]
