"""Frame-stepped force-directed layout.

Each ForceSimulation owns its own node state. A step computes every new
position from the previous state and commits them together, so stopping the
frame loop between steps never leaves a half-moved graph.
"""
from __future__ import annotations

import logging
import math
import random
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..config import Bounds, ForceSettings
from ..models import FamilyGraph, GraphEdge, GraphNode, NodePosition

logger = logging.getLogger(__name__)

Link = Tuple[int, int]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _finite(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def _integrate(
    nodes: Sequence[GraphNode],
    links: Sequence[Link],
    bounds: Bounds,
    settings: ForceSettings,
    alpha: float,
    rng: random.Random,
) -> List[GraphNode]:
    n = len(nodes)
    fx = [0.0] * n
    fy = [0.0] * n

    # pairwise repulsion, inverse square, distance floored at min_distance
    for i in range(n):
        a = nodes[i]
        for j in range(i + 1, n):
            b = nodes[j]
            dx = a.x - b.x
            dy = a.y - b.y
            dist = math.hypot(dx, dy)
            if dist == 0.0:
                angle = rng.random() * 2.0 * math.pi
                dx, dy, dist = math.cos(angle), math.sin(angle), 1.0
            d = max(dist, settings.min_distance)
            force = settings.repulsion / (d * d)
            ux, uy = dx / dist, dy / dist
            fx[i] += ux * force
            fy[i] += uy * force
            fx[j] -= ux * force
            fy[j] -= uy * force

    # spring attraction along edges, proportional to signed stretch
    for i, j in links:
        a, b = nodes[i], nodes[j]
        dx = b.x - a.x
        dy = b.y - a.y
        dist = math.hypot(dx, dy)
        if dist == 0.0:
            continue
        pull = settings.attraction * (dist - settings.spring_length)
        ux, uy = dx / dist, dy / dist
        fx[i] += ux * pull
        fy[i] += uy * pull
        fx[j] -= ux * pull
        fy[j] -= uy * pull

    low_x, high_x = settings.inset, bounds.width - settings.inset
    low_y, high_y = settings.inset, bounds.height - settings.inset
    gain = settings.step_scale * alpha

    updated: List[GraphNode] = []
    for k, node in enumerate(nodes):
        vx = node.vx * settings.damping + _finite(fx[k]) * gain
        vy = node.vy * settings.damping + _finite(fy[k]) * gain
        speed = math.hypot(vx, vy)
        if speed > settings.max_speed:
            vx *= settings.max_speed / speed
            vy *= settings.max_speed / speed

        x = node.x + vx
        y = node.y + vy
        cx = _clamp(x, low_x, high_x)
        cy = _clamp(y, low_y, high_y)
        # stop pushing into a wall
        if cx != x:
            vx = 0.0
        if cy != y:
            vy = 0.0
        updated.append(GraphNode(node.person_id, cx, cy, vx, vy, node.generation))
    return updated


def _links_for(ids: Sequence[str], edges: Sequence[GraphEdge]) -> List[Link]:
    index = {pid: i for i, pid in enumerate(ids)}
    links = []
    for e in edges:
        i = index.get(e.source_id)
        j = index.get(e.target_id)
        if i is not None and j is not None and i != j:
            links.append((i, j))
    return links


def step_simulation(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    bounds: Bounds,
    settings: Optional[ForceSettings] = None,
    alpha: float = 1.0,
    rng: Optional[random.Random] = None,
) -> List[GraphNode]:
    """One explicit-Euler step over caller-owned state. Inputs are left untouched."""
    settings = settings or ForceSettings()
    settings.check_bounds(bounds)
    links = _links_for([node.person_id for node in nodes], edges)
    return _integrate(list(nodes), links, bounds, settings, alpha, rng or random.Random())


class ForceSimulation:
    """
    Physics layout for one view of a graph.
    - repulsion between every pair of people, springs along relationships
    - damped velocities, speed cap, positions clamped inside the canvas
    - alpha cools each step; reheat() restarts without new node identities
    """

    def __init__(
        self,
        graph: FamilyGraph,
        bounds: Optional[Bounds] = None,
        settings: Optional[ForceSettings] = None,
        initial_positions: Optional[Mapping[str, object]] = None,
        seed: Optional[int] = None,
    ):
        self.bounds = bounds or Bounds()
        self.settings = settings or ForceSettings()
        self.settings.check_bounds(self.bounds)
        self._rng = random.Random(seed)

        ids = graph.person_ids
        self._links = _links_for(ids, graph.edges)
        initial_positions = initial_positions or {}
        self._nodes: Tuple[GraphNode, ...] = tuple(
            self._place(pid, initial_positions.get(pid)) for pid in ids
        )
        self.alpha = self.settings.alpha
        self.iterations = 0
        self._paused = False

    # ── placement ──

    def _random_point(self) -> Tuple[float, float]:
        cx, cy = self.bounds.center
        jitter = self.settings.jitter
        return (
            cx + (self._rng.random() - 0.5) * 2.0 * jitter,
            cy + (self._rng.random() - 0.5) * 2.0 * jitter,
        )

    def _clamped(self, x: float, y: float) -> Tuple[float, float]:
        inset = self.settings.inset
        return (
            _clamp(x, inset, self.bounds.width - inset),
            _clamp(y, inset, self.bounds.height - inset),
        )

    def _place(self, person_id: str, prior) -> GraphNode:
        if isinstance(prior, NodePosition):
            prior = (prior.x, prior.y)
        if prior is not None and all(math.isfinite(v) for v in prior):
            x, y = self._clamped(*prior)
        else:
            x, y = self._clamped(*self._random_point())
        return GraphNode(person_id, x, y)

    # ── state ──

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def running(self) -> bool:
        return (
            not self._paused
            and self.alpha >= self.settings.alpha_min
            and self.iterations < self.settings.max_iterations
        )

    def positions(self) -> Dict[str, Tuple[float, float]]:
        return {node.person_id: (node.x, node.y) for node in self._nodes}

    def nodes(self) -> List[GraphNode]:
        return [node.copy() for node in self._nodes]

    # ── frame loop ──

    def step(self) -> Dict[str, Tuple[float, float]]:
        """Advance one frame. A paused simulation does not move."""
        if self._paused:
            return self.positions()
        self._nodes = tuple(
            _integrate(self._nodes, self._links, self.bounds, self.settings, self.alpha, self._rng)
        )
        self.alpha *= 1.0 - self.settings.alpha_decay
        self.iterations += 1
        return self.positions()

    def frames(self) -> Iterator[Dict[str, Tuple[float, float]]]:
        """One positions snapshot per animation frame until paused or cooled."""
        while self.running:
            yield self.step()

    def run(self, iterations: Optional[int] = None) -> Dict[str, Tuple[float, float]]:
        budget = self.settings.max_iterations if iterations is None else iterations
        done = 0
        while done < budget and self.running:
            self.step()
            done += 1
        logger.debug(
            "Force layout ran %d step(s) for %d people (alpha=%.4f)",
            done, len(self._nodes), self.alpha,
        )
        return self.positions()

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def reheat(self, alpha: Optional[float] = None, scatter: bool = False) -> None:
        """Restart cooling from a high temperature, keeping the same people."""
        self.alpha = self.settings.alpha if alpha is None else alpha
        self.iterations = 0
        self._paused = False
        if scatter:
            self._nodes = tuple(self._place(node.person_id, None) for node in self._nodes)
        else:
            self._nodes = tuple(
                GraphNode(node.person_id, node.x, node.y, 0.0, 0.0, node.generation)
                for node in self._nodes
            )

    def move(self, person_id: str, x: float, y: float) -> None:
        """Drop a dragged node at (x, y), clamped, at rest."""
        cx, cy = self._clamped(x, y)
        self._nodes = tuple(
            GraphNode(node.person_id, cx, cy, 0.0, 0.0, node.generation)
            if node.person_id == person_id else node
            for node in self._nodes
        )
