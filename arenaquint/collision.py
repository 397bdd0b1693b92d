"""Collision detection (GJK) and penetration resolution (EPA) between convex shapes.

A collision component is any object providing:

* ``tag`` – an integer tag, and a writable ``on_overlap`` handler attribute;
* ``owner`` – an actor with ``group``, ``last_movement`` and ``move(offset)``;
* ``overlap_rule(group)`` – the :class:`OverlapRule` towards a group;
* ``may_intersect(other)`` – a cheap bounding-volume test;
* ``overlap(other)`` – notification of an overlap;
* ``support_point(direction)`` – farthest point of the shape along a direction;
* ``update_aabb()`` – refresh of the bounding volume.
"""
from __future__ import annotations

import enum
import math
from typing import Any, Callable, Optional

import numpy as np

from .transform import X_AXIS, normalize

EPA_EPSILON = 0.001
_EPA_MAX_ITERATIONS = 30
_GJK_MAX_ITERATIONS = 64


class OverlapRule(enum.Enum):
    """How a collision component reacts to another group."""

    NONE = 0
    IGNORE = 1
    OVERLAP = 2
    BLOCKING = 3


def _same_direction(direction, ao) -> bool:
    return float(np.dot(direction, ao)) > 0


def support_point(lhs: Any, rhs: Any, direction) -> np.ndarray:
    """Support point of the Minkowski difference ``lhs - rhs`` along ``direction``."""
    d = np.asarray(direction, dtype=float)
    return np.asarray(lhs.support_point(d), dtype=float) - np.asarray(
        rhs.support_point(-d), dtype=float
    )


def _line(points: list, direction: np.ndarray):
    a, b = points[0], points[1]
    ab = b - a
    ao = -a
    if _same_direction(ab, ao):
        direction = np.cross(np.cross(ab, ao), ab)
    else:
        points = [a]
        direction = ao
    return False, points, direction


def _triangle(points: list, direction: np.ndarray):
    a, b, c = points[0], points[1], points[2]
    ab = b - a
    ac = c - a
    ao = -a
    abc = np.cross(ab, ac)

    if _same_direction(np.cross(abc, ac), ao):
        if _same_direction(ac, ao):
            return False, [a, c], np.cross(np.cross(ac, ao), ac)
        return _line([a, b], direction)
    if _same_direction(np.cross(ab, abc), ao):
        return _line([a, b], direction)
    if _same_direction(abc, ao):
        return False, points, abc
    return False, [a, c, b], -abc


def _tetrahedron(points: list, direction: np.ndarray):
    a, b, c, d = points[0], points[1], points[2], points[3]
    ab = b - a
    ac = c - a
    ad = d - a
    ao = -a

    abc = np.cross(ab, ac)
    acd = np.cross(ac, ad)
    adb = np.cross(ad, ab)

    if _same_direction(abc, ao):
        return _triangle([a, b, c], direction)
    if _same_direction(acd, ao):
        return _triangle([a, c, d], direction)
    if _same_direction(adb, ao):
        return _triangle([a, d, b], direction)
    return True, points, direction


_SIMPLEX_STEPS = {2: _line, 3: _triangle, 4: _tetrahedron}


def gjk(lhs: Any, rhs: Any) -> Optional[list]:
    """Gilbert-Johnson-Keerthi intersection test.

    Returns the four points of a simplex enclosing the origin when the shapes
    intersect, otherwise ``None``.
    """
    support = support_point(lhs, rhs, X_AXIS)
    points = [support]
    direction = -support
    for _ in range(_GJK_MAX_ITERATIONS):
        support = support_point(lhs, rhs, direction)
        if float(np.dot(direction, support)) <= 0:
            return None
        points.insert(0, support)
        step = _SIMPLEX_STEPS.get(len(points))
        if step is None:
            continue
        done, points, direction = step(points, direction)
        if done:
            return points
    return None


def _face_normals(polytope: list, faces: list):
    normals: list[tuple[np.ndarray, float]] = []
    min_triangle = 0
    min_distance = math.inf
    for start in range(0, len(faces), 3):
        a = polytope[faces[start]]
        b = polytope[faces[start + 1]]
        c = polytope[faces[start + 2]]
        normal = normalize(np.cross(b - a, c - a))
        distance = float(np.dot(normal, a))
        if distance < 0:
            normal = -normal
            distance = -distance
        normals.append((normal, distance))
        if distance < min_distance:
            min_triangle = start // 3
            min_distance = distance
    return normals, min_triangle


def _add_if_unique_edge(edges: list, faces: list, a: int, b: int) -> None:
    reverse = (faces[b], faces[a])
    if reverse in edges:
        edges.remove(reverse)
    else:
        edges.append((faces[a], faces[b]))


def penetration_depth(simplex, lhs: Any, rhs: Any) -> Optional[np.ndarray]:
    """Expanding-polytope estimate of the penetration vector of two shapes.

    ``simplex`` is the result of :func:`gjk`. Returns ``None`` if the
    expansion does not converge.
    """
    polytope = [np.asarray(p, dtype=float) for p in simplex]
    faces = [0, 1, 2, 0, 3, 1, 0, 2, 3, 1, 3, 2]
    normals, min_face = _face_normals(polytope, faces)
    min_normal = np.zeros(3)
    min_distance = math.inf
    counter = 0
    while min_distance == math.inf:
        counter += 1
        if counter == _EPA_MAX_ITERATIONS:
            return None
        min_normal, min_distance = normals[min_face]
        support = support_point(lhs, rhs, min_normal)
        s_distance = float(np.dot(min_normal, support))
        if abs(s_distance - min_distance) <= EPA_EPSILON:
            break
        min_distance = math.inf

        unique_edges: list[tuple[int, int]] = []
        i = 0
        while i < len(normals):
            if _same_direction(normals[i][0], support):
                f = i * 3
                _add_if_unique_edge(unique_edges, faces, f, f + 1)
                _add_if_unique_edge(unique_edges, faces, f + 1, f + 2)
                _add_if_unique_edge(unique_edges, faces, f + 2, f)
                faces[f:f + 3] = faces[-3:]
                del faces[-3:]
                normals[i] = normals[-1]
                normals.pop()
            else:
                i += 1

        new_faces: list[int] = []
        for edge_a, edge_b in unique_edges:
            new_faces.extend((edge_a, edge_b, len(polytope)))
        polytope.append(support)
        new_normals, new_min_face = _face_normals(polytope, new_faces)

        old_min_distance = math.inf
        for index, (_, distance) in enumerate(normals):
            if distance < old_min_distance:
                old_min_distance = distance
                min_face = index
        if new_normals and new_normals[new_min_face][1] < old_min_distance:
            min_face = new_min_face + len(normals)

        faces.extend(new_faces)
        normals.extend(new_normals)
        if not normals:
            return None
    return np.asarray(min_normal, dtype=float) * (min_distance + EPA_EPSILON)


class CollisionResolver:
    """Detects overlaps between registered components and separates blocking ones."""

    def __init__(self) -> None:
        self._collisions: list[Any] = []
        self._pending: list[tuple[Any, np.ndarray]] = []
        self._begin_processed = 0

    @property
    def collisions(self) -> tuple:
        return tuple(self._collisions)

    def register(self, collision: Any) -> None:
        """Add a component; registering twice has no effect."""
        if not any(c is collision for c in self._collisions):
            self._collisions.append(collision)
        self._begin_processed = len(self._collisions)

    def unregister(self, collision: Any) -> None:
        """Remove a component if it is registered."""
        for index, existing in enumerate(self._collisions):
            if existing is collision:
                del self._collisions[index]
                break
        self._begin_processed = len(self._collisions)

    def tick(self, delta_seconds: float) -> None:
        """Apply the queued separating moves, most recent first."""
        while self._pending:
            actor, offset = self._pending.pop()
            actor.move(offset)
        self._begin_processed = len(self._collisions)

    def set_handler_by_tag(self, tag: int, handler: Callable[[Any], None]) -> None:
        for collision in self._collisions:
            if collision.tag == tag:
                collision.on_overlap = handler

    def update_aabb(self) -> None:
        for collision in self._collisions:
            collision.update_aabb()

    def resolve(self, collision: Any) -> None:
        """Check ``collision`` against every component not yet processed this tick."""
        for other in self._overlap_candidates(collision):
            simplex = gjk(collision, other)
            if simplex is None:
                continue
            blocking = (
                collision.overlap_rule(other.owner.group) is OverlapRule.BLOCKING
                and other.overlap_rule(collision.owner.group) is OverlapRule.BLOCKING
            )
            if blocking:
                first = float(np.linalg.norm(collision.owner.last_movement))
                second = float(np.linalg.norm(other.owner.last_movement))
                total = first + second
                if total != 0.0:
                    depth = penetration_depth(simplex, collision, other)
                    if depth is not None:
                        inv_total = 1.0 / total
                        self._pending.append(
                            (collision.owner, -first * inv_total * depth)
                        )
                        self._pending.append(
                            (other.owner, second * inv_total * depth)
                        )
            collision.overlap(other)
            other.overlap(collision)
        self._tag_as_processed(collision)

    def _tag_as_processed(self, collision: Any) -> None:
        if self._begin_processed == 0:
            return
        position = next(
            (
                index
                for index in range(self._begin_processed)
                if self._collisions[index] is collision
            ),
            None,
        )
        if position is None:
            return
        self._begin_processed -= 1
        last = self._begin_processed
        self._collisions[position], self._collisions[last] = (
            self._collisions[last],
            self._collisions[position],
        )

    def _overlap_candidates(self, component: Any) -> list:
        candidates = []
        ignored = (OverlapRule.IGNORE, OverlapRule.NONE)
        for other in self._collisions[: self._begin_processed]:
            if other is component:
                continue
            if not component.may_intersect(other):
                continue
            if component.overlap_rule(other.owner.group) in ignored:
                continue
            if other.overlap_rule(component.owner.group) in ignored:
                continue
            candidates.append(other)
        return candidates