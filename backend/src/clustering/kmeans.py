"""
K-means over 2D planar points (k-means++ seeding, Lloyd iteration).

Points carry an opaque ref_id so callers can map assignments back to their
own records. Nothing here knows about listings or geography.
"""
import logging
import math
import random
from typing import NamedTuple, Sequence

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITER = 100
DEFAULT_TOL = 1e-4


class Centroid(NamedTuple):
    x: float
    y: float


class LabeledPoint(NamedTuple):
    x: float
    y: float
    ref_id: str


class ClusterSet(NamedTuple):
    centroids: list[Centroid]
    assignments: list[int]  # assignments[i] = cluster index of points[i]


def euclidean_distance(p1, p2) -> float:
    return math.hypot(p1.x - p2.x, p1.y - p2.y)


def nearest_centroid(point, centroids: Sequence[Centroid]) -> int:
    """Index of the closest centroid. Ties go to the lowest index."""
    best = 0
    best_dist = math.inf
    for j, c in enumerate(centroids):
        d = euclidean_distance(point, c)
        if d < best_dist:
            best_dist = d
            best = j
    return best


def _init_centroids_plus_plus(points: Sequence[LabeledPoint], k: int, rng: random.Random) -> list[Centroid]:
    """k-means++: first seed uniform, the rest sampled proportionally to squared distance to the nearest seed."""
    first = points[rng.randrange(len(points))]
    centroids = [Centroid(first.x, first.y)]
    while len(centroids) < k:
        weights = [min(euclidean_distance(p, c) for c in centroids) ** 2 for p in points]
        total = sum(weights)
        if total <= 0:
            # Every point coincides with a seed; any pick is as good as another.
            pick = points[rng.randrange(len(points))]
        else:
            pick = rng.choices(points, weights=weights, k=1)[0]
        centroids.append(Centroid(pick.x, pick.y))
    return centroids


def _recompute_centroids(
    points: Sequence[LabeledPoint],
    assignments: Sequence[int],
    previous: Sequence[Centroid],
) -> list[Centroid]:
    k = len(previous)
    sum_x = [0.0] * k
    sum_y = [0.0] * k
    counts = [0] * k
    for p, j in zip(points, assignments):
        sum_x[j] += p.x
        sum_y[j] += p.y
        counts[j] += 1
    # Empty clusters keep their previous centroid so len(centroids) stays k.
    return [
        Centroid(sum_x[j] / counts[j], sum_y[j] / counts[j]) if counts[j] else previous[j]
        for j in range(k)
    ]


def kmeans(
    points: Sequence[LabeledPoint],
    k: int,
    max_iter: int = DEFAULT_MAX_ITER,
    tol: float = DEFAULT_TOL,
    rng: random.Random | None = None,
) -> ClusterSet:
    """
    Partition points into k clusters.

    - k == 0 or no points: empty ClusterSet.
    - k >= len(points): each point is its own cluster, no iteration.
    - otherwise: k-means++ seeding, then assign/update rounds until the largest
      centroid displacement drops below tol or max_iter rounds have run.

    Pass a seeded random.Random as rng for reproducible output.
    """
    n = len(points)
    if k <= 0 or n == 0:
        return ClusterSet(centroids=[], assignments=[])
    if k >= n:
        return ClusterSet(
            centroids=[Centroid(p.x, p.y) for p in points],
            assignments=list(range(n)),
        )

    if rng is None:
        rng = random.Random()
    centroids = _init_centroids_plus_plus(points, k, rng)
    assignments = [-1] * n
    iteration = 0

    # At least one round so every point gets an assignment.
    while iteration < max(1, max_iter):
        iteration += 1
        new_assignments = [nearest_centroid(p, centroids) for p in points]
        reassigned = sum(1 for old, new in zip(assignments, new_assignments) if old != new)
        assignments = new_assignments

        new_centroids = _recompute_centroids(points, assignments, centroids)
        max_movement = max(euclidean_distance(old, new) for old, new in zip(centroids, new_centroids))
        centroids = new_centroids

        # Centroid displacement decides convergence, not assignment stability.
        if max_movement < tol:
            break

    logger.debug(
        "telemetry kmeans_done n=%s k=%s iterations=%s last_reassigned=%s",
        n, k, iteration, reassigned,
    )
    return ClusterSet(centroids=centroids, assignments=assignments)
