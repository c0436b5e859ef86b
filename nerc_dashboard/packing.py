"""Sibling circle packing and smallest enclosing circles.

``pack_siblings`` places circles one by one on a front chain around the
already placed circles, always tangent to two neighbours on the chain, and
backs up along the chain whenever the candidate position overlaps a circle.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence


@dataclass
class Circle:
    r: float
    x: float = 0.0
    y: float = 0.0
    data: Any = field(default=None, compare=False)


class _ChainNode:
    __slots__ = ("circle", "next", "previous")

    def __init__(self, circle: Circle) -> None:
        self.circle = circle
        self.next: Optional[_ChainNode] = None
        self.previous: Optional[_ChainNode] = None


def _place(b: Circle, a: Circle, c: Circle) -> None:
    """Move ``c`` so it is tangent to both ``a`` and ``b``."""
    dx, dy = b.x - a.x, b.y - a.y
    d2 = dx * dx + dy * dy
    if not d2:
        c.x, c.y = a.x + c.r, a.y
        return
    a2 = (a.r + c.r) ** 2
    b2 = (b.r + c.r) ** 2
    if a2 > b2:
        x = (d2 + b2 - a2) / (2 * d2)
        y = math.sqrt(max(0.0, b2 / d2 - x * x))
        c.x = b.x - x * dx - y * dy
        c.y = b.y - x * dy + y * dx
    else:
        x = (d2 + a2 - b2) / (2 * d2)
        y = math.sqrt(max(0.0, a2 / d2 - x * x))
        c.x = a.x + x * dx - y * dy
        c.y = a.y + x * dy + y * dx


def _intersects(a: Circle, b: Circle) -> bool:
    dr = a.r + b.r - 1e-6
    dx, dy = b.x - a.x, b.y - a.y
    return dr > 0 and dr * dr > dx * dx + dy * dy


def _score(node: _ChainNode) -> float:
    a, b = node.circle, node.next.circle
    ab = a.r + b.r
    dx = (a.x * b.r + b.x * a.r) / ab
    dy = (a.y * b.r + b.y * a.r) / ab
    return dx * dx + dy * dy


def pack_siblings(circles: Sequence[Circle]) -> Circle:
    """Position ``circles`` in place and return their enclosing circle.

    The circles end up translated so the enclosing circle sits on the origin.
    """
    n = len(circles)
    if not n:
        return Circle(0.0)

    first = circles[0]
    first.x, first.y = 0.0, 0.0
    if n == 1:
        return Circle(first.r)

    second = circles[1]
    first.x, second.x, second.y = -second.r, first.r, 0.0
    if n == 2:
        enclosing = pack_enclose(circles[:2])
        _translate(circles, enclosing)
        return Circle(enclosing.r)

    _place(second, first, circles[2])

    a, b, c = _ChainNode(first), _ChainNode(second), _ChainNode(circles[2])
    a.next = c.previous = b
    b.next = a.previous = c
    c.next = b.previous = a

    i = 3
    while i < n:
        _place(a.circle, b.circle, circles[i])
        c = _ChainNode(circles[i])

        # Closest circle on the chain that intersects c, measured along the chain.
        j, k = b.next, a.previous
        sj, sk = b.circle.r, a.circle.r
        retry = False
        while True:
            if sj <= sk:
                if _intersects(j.circle, c.circle):
                    b = j
                    a.next, b.previous = b, a
                    retry = True
                    break
                sj += j.circle.r
                j = j.next
            else:
                if _intersects(k.circle, c.circle):
                    a = k
                    a.next, b.previous = b, a
                    retry = True
                    break
                sk += k.circle.r
                k = k.previous
            if j is k.next:
                break
        if retry:
            continue

        c.previous, c.next = a, b
        a.next = b.previous = b = c

        # New closest pair to the centroid.
        best = _score(a)
        node = c.next
        while node is not b:
            score = _score(node)
            if score < best:
                a, best = node, score
            node = node.next
        b = a.next
        i += 1

    front = [b.circle]
    node = b.next
    while node is not b:
        front.append(node.circle)
        node = node.next
    enclosing = pack_enclose(front)
    _translate(circles, enclosing)
    return Circle(enclosing.r)


def _translate(circles: Sequence[Circle], center: Circle) -> None:
    for circle in circles:
        circle.x -= center.x
        circle.y -= center.y


def _encloses_not(a: Circle, b: Circle) -> bool:
    dr = a.r - b.r
    dx, dy = b.x - a.x, b.y - a.y
    return dr < 0 or dr * dr < dx * dx + dy * dy


def _encloses_weak(a: Circle, b: Circle) -> bool:
    dr = a.r - b.r + max(a.r, b.r, 1.0) * 1e-9
    dx, dy = b.x - a.x, b.y - a.y
    return dr > 0 and dr * dr > dx * dx + dy * dy


def _encloses_weak_all(a: Circle, basis: Sequence[Circle]) -> bool:
    return all(_encloses_weak(a, b) for b in basis)


def _enclose_basis_1(a: Circle) -> Circle:
    return Circle(a.r, a.x, a.y)


def _enclose_basis_2(a: Circle, b: Circle) -> Circle:
    x21, y21, r21 = b.x - a.x, b.y - a.y, b.r - a.r
    length = math.sqrt(x21 * x21 + y21 * y21)
    if not length:
        return _enclose_basis_1(a if a.r >= b.r else b)
    return Circle(
        (length + a.r + b.r) / 2,
        (a.x + b.x + x21 / length * r21) / 2,
        (a.y + b.y + y21 / length * r21) / 2,
    )


def _enclose_basis_3(a: Circle, b: Circle, c: Circle) -> Circle:
    x1, y1, r1 = a.x, a.y, a.r
    x2, y2, r2 = b.x, b.y, b.r
    x3, y3, r3 = c.x, c.y, c.r
    a2, a3 = x1 - x2, x1 - x3
    b2, b3 = y1 - y2, y1 - y3
    c2, c3 = r2 - r1, r3 - r1
    d1 = x1 * x1 + y1 * y1 - r1 * r1
    d2 = d1 - x2 * x2 - y2 * y2 + r2 * r2
    d3 = d1 - x3 * x3 - y3 * y3 + r3 * r3
    ab = a3 * b2 - a2 * b3
    xa = (b2 * d3 - b3 * d2) / (ab * 2) - x1
    xb = (b3 * c2 - b2 * c3) / ab
    ya = (a3 * d2 - a2 * d3) / (ab * 2) - y1
    yb = (a2 * c3 - a3 * c2) / ab
    qa = xb * xb + yb * yb - 1
    qb = 2 * (r1 + xa * xb + ya * yb)
    qc = xa * xa + ya * ya - r1 * r1
    if abs(qa) > 1e-6:
        r = -(qb + math.sqrt(max(0.0, qb * qb - 4 * qa * qc))) / (2 * qa)
    else:
        r = -qc / qb
    return Circle(r, x1 + xa + xb * r, y1 + ya + yb * r)


def _enclose_basis(basis: Sequence[Circle]) -> Circle:
    if len(basis) == 1:
        return _enclose_basis_1(basis[0])
    if len(basis) == 2:
        return _enclose_basis_2(basis[0], basis[1])
    return _enclose_basis_3(basis[0], basis[1], basis[2])


def _extend_basis(basis: List[Circle], p: Circle) -> List[Circle]:
    if _encloses_weak_all(p, basis):
        return [p]

    for b in basis:
        if _encloses_not(p, b) and _encloses_weak_all(_enclose_basis_2(b, p), basis):
            return [b, p]

    for i in range(len(basis) - 1):
        for j in range(i + 1, len(basis)):
            bi, bj = basis[i], basis[j]
            if (
                _encloses_not(_enclose_basis_2(bi, bj), p)
                and _encloses_not(_enclose_basis_2(bi, p), bj)
                and _encloses_not(_enclose_basis_2(bj, p), bi)
                and _encloses_weak_all(_enclose_basis_3(bi, bj, p), basis)
            ):
                return [bi, bj, p]

    raise ArithmeticError("no enclosing basis found")


def pack_enclose(circles: Sequence[Circle]) -> Circle:
    """Smallest circle enclosing every circle in ``circles``."""
    pending = list(circles)
    if not pending:
        return Circle(0.0)

    basis: List[Circle] = []
    enclosing: Optional[Circle] = None
    i = 0
    while i < len(pending):
        p = pending[i]
        if enclosing is not None and _encloses_weak(enclosing, p):
            i += 1
        else:
            basis = _extend_basis(basis, p)
            enclosing = _enclose_basis(basis)
            i = 0
    return enclosing
