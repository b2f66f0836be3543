"""
Hub opening geometry.

Author: FRC Trajectory Tools
License: MIT
"""

from typing import List, Sequence, Tuple

import numpy as np

Point = Tuple[float, float]


def hub_hex_points(opening_size: float, center_x: float, center_y: float) -> List[Point]:
    """
    Vertices of the hexagonal hub opening, counter-clockwise.

    opening_size is the flat-to-flat width, so the apothem is half of it
    and the vertex radius is apothem / cos(30°). Two sides are vertical.
    """
    apothem = opening_size / 2
    radius = apothem / np.cos(np.pi / 6)
    angles = np.arange(6) * np.pi / 3 - np.pi / 6
    xs = center_x + radius * np.cos(angles)
    ys = center_y + radius * np.sin(angles)
    return [(float(x), float(y)) for x, y in zip(xs, ys)]


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """
    Even-odd ray casting test.

    An edge counts when it straddles the point's y (half-open in y) and
    crosses strictly to the right of the point, so a boundary point always
    gets the same answer: left and bottom edges are inside, right and top
    edges are outside.
    """
    px, py = point
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > py) != (yj > py):
            x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
            if px < x_cross:
                inside = not inside
        j = i
    return inside
