"""
Deterministic 2D gradient noise.

Classic (improved) Perlin noise over Ken Perlin's reference permutation,
remapped to roughly [0, 1]. The function itself never changes with the seed;
callers decorrelate features by shifting the sampling origin instead (see
SeedDeriver.noise_offset).
"""
from __future__ import annotations

import math
from typing import List, Tuple

_PERMUTATION = [
    151, 160, 137, 91, 90, 15, 131, 13, 201, 95, 96, 53, 194, 233, 7, 225,
    140, 36, 103, 30, 69, 142, 8, 99, 37, 240, 21, 10, 23, 190, 6, 148,
    247, 120, 234, 75, 0, 26, 197, 62, 94, 252, 219, 203, 117, 35, 11, 32,
    57, 177, 33, 88, 237, 149, 56, 87, 174, 20, 125, 136, 171, 168, 68, 175,
    74, 165, 71, 134, 139, 48, 27, 166, 77, 146, 158, 231, 83, 111, 229, 122,
    60, 211, 133, 230, 220, 105, 92, 41, 55, 46, 245, 40, 244, 102, 143, 54,
    65, 25, 63, 161, 1, 216, 80, 73, 209, 76, 132, 187, 208, 89, 18, 169,
    200, 196, 135, 130, 116, 188, 159, 86, 164, 100, 109, 198, 173, 186, 3, 64,
    52, 217, 226, 250, 124, 123, 5, 202, 38, 147, 118, 126, 255, 82, 85, 212,
    207, 206, 59, 227, 47, 16, 58, 17, 182, 189, 28, 42, 223, 183, 170, 213,
    119, 248, 152, 2, 44, 154, 163, 70, 221, 153, 101, 155, 167, 43, 172, 9,
    129, 22, 39, 253, 19, 98, 108, 110, 79, 113, 224, 232, 178, 185, 112, 104,
    218, 246, 97, 228, 251, 34, 242, 193, 238, 210, 144, 12, 191, 179, 162, 241,
    81, 51, 145, 235, 249, 14, 239, 107, 49, 192, 214, 31, 181, 199, 106, 157,
    184, 84, 204, 176, 115, 121, 50, 45, 127, 4, 150, 254, 138, 236, 205, 93,
    222, 114, 67, 29, 24, 72, 243, 141, 128, 195, 78, 66, 215, 61, 156, 180,
]

_P: List[int] = _PERMUTATION * 2


def _fade(t: float) -> float:
    """Quintic smoothing 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _lerp(a: float, b: float, t: float) -> float:
    return a + t * (b - a)


def _grad(h: int, x: float, y: float) -> float:
    # Eight gradient directions: axes and diagonals
    h &= 7
    u = x if h < 4 else y
    v = y if h < 4 else x
    return (u if (h & 1) == 0 else -u) + (2.0 * v if (h & 2) == 0 else -2.0 * v)


def perlin2(x: float, y: float) -> float:
    """Raw Perlin noise in roughly [-1, 1]; zero at every integer lattice point."""
    xf = math.floor(x)
    yf = math.floor(y)
    xi = int(xf) & 255
    yi = int(yf) & 255
    x -= xf
    y -= yf
    u = _fade(x)
    v = _fade(y)

    aa = _P[_P[xi] + yi]
    ab = _P[_P[xi] + yi + 1]
    ba = _P[_P[xi + 1] + yi]
    bb = _P[_P[xi + 1] + yi + 1]

    x1 = _lerp(_grad(aa, x, y), _grad(ba, x - 1.0, y), u)
    x2 = _lerp(_grad(ab, x, y - 1.0), _grad(bb, x - 1.0, y - 1.0), u)
    # The 2D gradient set above peaks near +-2; halve to land in [-1, 1]
    return _lerp(x1, x2, v) * 0.5


def noise01(x: float, y: float) -> float:
    """Perlin noise remapped and clamped to [0, 1]."""
    value = (perlin2(x, y) + 1.0) * 0.5
    if value < 0.0:
        return 0.0
    if value > 1.0:
        return 1.0
    return value


def sample(x: int, y: int, offset: Tuple[float, float], scale: float) -> float:
    """Sample [0, 1] noise for grid cell (x, y) with a feature origin offset."""
    ox, oy = offset
    return noise01((x + ox) * scale, (y + oy) * scale)
