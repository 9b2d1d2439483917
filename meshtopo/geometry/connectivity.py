# SPDX-FileCopyrightText: Copyright (c) 2023 - 2026 NVIDIA CORPORATION & AFFILIATES.
# SPDX-FileCopyrightText: All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Lazily computed incidence relations between mesh polytopes.

A mesh of dimension ``D`` is made of polytopes of every dimension ``0..D``:
vertices, edges, faces and cells. The :class:`Connectivity` engine stores, for
every pair of dimensions ``(d, d')``, the incidence relation ``d -> d'``: for
each ``d``-polytope, the set of ``d'``-polytopes incident to it.

Only two kinds of information are supplied by the caller: the number of
vertices, and the vertex tuple of each top-dimensional polytope. Everything
else is derived on demand by :meth:`Connectivity.compute`:

- ``D -> 0`` (cell vertices) is the ground truth.
- ``d -> 0`` for ``0 < d < D`` is discovered by decomposing every cell into
  its sub-polytopes (:meth:`Connectivity.build`), deduplicating entities
  shared between neighbouring cells through a per-dimension
  :class:`~meshtopo.geometry._index_bijection.IndexBijection`.
- ``d -> d'`` with ``d < d'`` is the transpose of ``d' -> d``.
- ``d -> d'`` with ``d >= d'`` is the intersection of ``d -> d''`` and
  ``d'' -> d'`` through vertices (``d'' = 0``), or through cells when both
  ends are vertices (``d'' = D``).

Each relation is cached together with a dirty bit and is computed at most
once until it is explicitly invalidated with :meth:`Connectivity.clear`.

Examples
--------
>>> conn = Connectivity().initialize(2).nodes(4)
>>> _ = conn.polytope(PolytopeType.TRIANGLE, (0, 1, 2))
>>> _ = conn.polytope(PolytopeType.TRIANGLE, (1, 2, 3))
>>> conn.compute(1, 0).get_count(1)
5
>>> conn.compute(2, 2).get_incidence(2, 2).to_list()
[[1], [0]]
"""

import logging
import warnings
from collections import Counter
from typing import Sequence

import torch

from meshtopo.geometry._index_bijection import IndexBijection
from meshtopo.geometry._subpolytopes import decompose
from meshtopo.geometry.index_generator import IndexGenerator
from meshtopo.geometry.polytope import MAX_DIMENSION, PolytopeType
from meshtopo.neighbors._adjacency import (
    Adjacency,
    build_adjacency_from_pairs,
    build_adjacency_from_rows,
)
from meshtopo.utilities._pair_lookup import find_pairs_in_reference
from meshtopo.utilities.connectivity_repr import format_connectivity_repr

logger = logging.getLogger(__name__)


class Connectivity:
    """Incidence relations of a polytopal mesh of dimension at most 3.

    Parameters
    ----------
    device : torch.device or str, optional
        Device on which incidence tensors are stored. Defaults to CPU.
    symmetric : bool, optional
        Identify polytopes by their vertex set rather than by their exact
        vertex tuple. Defaults to False: tuples are compared in order, so an
        edge traversed as ``(1, 2)`` by one cell and ``(2, 1)`` by its
        neighbour is registered twice. Pass True for consistently oriented
        meshes whose neighbours share entities in opposite orders.

    Notes
    -----
    The engine is populated in three steps: :meth:`initialize` with the
    maximal dimension, :meth:`nodes` with the vertex count, and
    :meth:`polytope` for every cell. Relations are then requested with
    :meth:`compute` and read with :meth:`get_incidence`. Every mutating method
    returns ``self`` so calls can be chained.

    The engine is not thread-safe.
    """

    def __init__(self, device: torch.device | str = "cpu", symmetric: bool = False):
        self.device = torch.device(device)
        self.symmetric = symmetric
        self._maximal_dimension: int | None = None
        self._count: list[int] = [0]
        self._geometry_count: Counter[PolytopeType] = Counter()
        self._index: list[IndexBijection] = []
        self._geometry: list[list[PolytopeType]] = []
        self._vertex_sets: list[list[tuple[int, ...]]] = []
        self._incidence: list[list[Adjacency | None]] = []
        self._dirty: torch.Tensor | None = None

    @classmethod
    def from_cells(
        cls,
        cells: torch.Tensor,
        geometry: PolytopeType,
        n_vertices: int | None = None,
        symmetric: bool = False,
    ) -> "Connectivity":
        """Create an engine from a block of cells sharing one geometry.

        Parameters
        ----------
        cells : torch.Tensor
            Integer tensor of shape ``(n_cells, geometry.n_vertices)``; each
            row lists the vertex indices of one cell in canonical order.
        geometry : PolytopeType
            Geometry of every cell. Its dimension becomes the maximal
            dimension of the engine.
        n_vertices : int, optional
            Number of vertices. Defaults to ``cells.max() + 1``.
        symmetric : bool, optional
            See :class:`Connectivity`.

        Examples
        --------
        >>> cells = torch.tensor([[0, 1, 2, 3]])
        >>> conn = Connectivity.from_cells(cells, PolytopeType.TETRAHEDRON)
        >>> conn.compute(2, 0).get_count(2)
        4
        """
        if n_vertices is None:
            n_vertices = int(cells.max().item()) + 1 if cells.numel() > 0 else 0
        conn = cls(device=cells.device, symmetric=symmetric)
        conn.initialize(geometry.dimension).nodes(n_vertices)
        if geometry.dimension > 0:
            conn.polytopes(geometry, cells)
        return conn

    ### Population

    def initialize(self, maximal_dimension: int) -> "Connectivity":
        """Size the tables for polytopes of dimension ``0..maximal_dimension``.

        Raises
        ------
        RuntimeError
            If the engine was already initialized.
        ValueError
            If ``maximal_dimension`` is not in ``0..3``.
        """
        if self._maximal_dimension is not None:
            raise RuntimeError(
                f"Connectivity is already initialized with maximal dimension "
                f"{self._maximal_dimension}."
            )
        if not 0 <= maximal_dimension <= MAX_DIMENSION:
            raise ValueError(
                f"{maximal_dimension=} must lie in [0, {MAX_DIMENSION}]."
            )
        n = maximal_dimension + 1
        self._maximal_dimension = maximal_dimension
        self._count = [0] * n
        self._index = [IndexBijection(symmetric=self.symmetric) for _ in range(n)]
        self._geometry = [[] for _ in range(n)]
        self._vertex_sets = [[] for _ in range(n)]
        self._incidence = [[None] * n for _ in range(n)]
        self._dirty = torch.ones((n, n), dtype=torch.bool)
        return self

    def nodes(self, count: int) -> "Connectivity":
        """Register vertices ``0..count-1``.

        Each vertex ``i`` is keyed by the trivial tuple ``(i,)``. Calling this
        again with a larger count registers the additional vertices.

        Raises
        ------
        ValueError
            If ``count`` is smaller than the number of registered vertices.
        """
        self._require_initialized()
        if count < len(self._index[0]):
            raise ValueError(
                f"Cannot shrink the vertex set: {count=} but "
                f"{len(self._index[0])} vertices are already registered."
            )
        for i in range(len(self._index[0]), count):
            self._index[0].insert((i,))
        self._count[0] = count
        self._geometry_count[PolytopeType.POINT] = count
        return self

    def polytope(
        self, geometry: PolytopeType, vertices: Sequence[int]
    ) -> "Connectivity":
        """Register one polytope of dimension ``geometry.dimension``.

        The vertex tuple is used verbatim as the polytope's identity, so it
        must follow the canonical vertex order of ``geometry``. Registering the
        same tuple twice is a no-op.

        Raises
        ------
        ValueError
            If the geometry is a point, exceeds the maximal dimension, or does
            not match the number of vertices.
        """
        self._require_initialized()
        d = geometry.dimension
        if not 0 < d <= self._maximal_dimension:
            raise ValueError(
                f"Cannot register a {geometry.name} ({d=}) in a connectivity of "
                f"maximal dimension {self._maximal_dimension}."
            )
        if len(vertices) != geometry.n_vertices:
            raise ValueError(
                f"A {geometry.name} has {geometry.n_vertices} vertices, but got "
                f"{len(vertices)=}."
            )
        idx, inserted = self._index[d].insert(vertices)
        if inserted:
            key = self._index[d].reverse_lookup(idx)
            self._vertex_sets[d].append(tuple(sorted(set(key))))
            self._geometry[d].append(geometry)
            self._count[d] += 1
            self._geometry_count[geometry] += 1
            # the cached tensor form of the vertex sets is now stale
            self._incidence[d][0] = None
            self._dirty[d, 0] = False
        return self

    def polytopes(self, geometry: PolytopeType, cells: torch.Tensor) -> "Connectivity":
        """Register every row of ``cells`` as a polytope of type ``geometry``.

        Raises
        ------
        TypeError
            If ``cells`` does not have an integer dtype.
        ValueError
            If ``cells`` is not of shape ``(n, geometry.n_vertices)``.
        """
        if torch.is_floating_point(cells) or cells.dtype == torch.bool:
            raise TypeError(
                f"Cells must have an integer dtype, but got {cells.dtype=}."
            )
        if cells.ndim != 2 or cells.shape[1] != geometry.n_vertices:
            raise ValueError(
                f"Expected cells of shape (n, {geometry.n_vertices}) for "
                f"{geometry.name}, but got {tuple(cells.shape)}."
            )
        for row in cells.tolist():
            self.polytope(geometry, row)
        return self

    ### Derivation

    def compute(self, d: int, dp: int) -> "Connectivity":
        """Make the incidence relation ``d -> dp`` available.

        Missing prerequisite relations are derived recursively and cached, so
        any valid pair may be requested in any order. A relation is computed
        at most once until it is cleared.

        Raises
        ------
        ValueError
            If ``d`` or ``dp`` exceeds the mesh dimension.
        """
        self._require_initialized()
        D = self.get_mesh_dimension()
        for dim in (d, dp):
            if not 0 <= dim <= D:
                raise ValueError(
                    f"Dimension {dim} is out of range for a mesh of dimension {D} "
                    f"(requested {d} -> {dp})."
                )
        if d == D and dp == 0:
            self._dirty[d, dp] = False
            return self

        if self._dirty[D, D]:
            self.transpose(0, D).intersection(D, D, 0)

        for dim in (d, dp):
            if 0 < dim < D and (self._dirty[D, dim] or self._dirty[dim, 0]):
                self.build(dim)

        if self._dirty[d, dp]:
            if d < dp:
                self.compute(dp, d).transpose(d, dp)
            else:
                dpp = D if d == 0 and dp == 0 else 0
                self.compute(d, dpp).compute(dpp, dp).intersection(d, dp, dpp)

        self._dirty[d, dp] = False
        return self

    def build(self, d: int) -> "Connectivity":
        """Discover the ``d``-polytopes of every cell.

        Decomposes each top-dimensional polytope into its ``d``-dimensional
        sub-polytopes, registers them (shared ones only once), and records the
        relations ``D -> d`` and ``d -> 0``.

        Raises
        ------
        ValueError
            Unless ``0 < d < D``.
        """
        self._require_initialized()
        D = self.get_mesh_dimension()
        if not 0 < d < D:
            raise ValueError(
                f"Can only build interior dimensions 0 < d < {D}, but got {d=}."
            )
        rows = []
        n_before = self._count[d]
        for i in range(self._count[D]):
            incident = set()
            vertices = self._index[D].reverse_lookup(i)
            for geometry, sub_vertices in decompose(self._geometry[D][i], vertices, d):
                idx, inserted = self._index[d].insert(sub_vertices)
                if inserted:
                    self._geometry[d].append(geometry)
                    self._vertex_sets[d].append(tuple(sorted(set(sub_vertices))))
                counted = inserted and not (d == D or d == 0)
                self._count[d] += counted
                self._geometry_count[geometry] += counted
                incident.add(idx)
            rows.append(sorted(incident))

        self._incidence[D][d] = build_adjacency_from_rows(rows, device=self.device)
        self._incidence[d][0] = None
        self._dirty[D, d] = False
        self._dirty[d, 0] = False
        logger.debug(
            "Built %d new polytopes of dimension %d from %d cells",
            self._count[d] - n_before,
            d,
            self._count[D],
        )
        return self

    def transpose(self, d: int, dp: int) -> "Connectivity":
        """Compute ``d -> dp`` by inverting ``dp -> d``, for ``d < dp``."""
        if not d < dp:
            raise ValueError(f"Transpose requires d < dp, but got {d=}, {dp=}.")
        source = self._relation(dp, d)
        if d == 0 and source.n_total_neighbors > 0:
            max_vertex = source.indices.max().item()
            if max_vertex >= self._count[0]:
                raise ValueError(
                    f"Polytopes of dimension {dp} reference vertex {max_vertex}, "
                    f"but only {self._count[0]} vertices are registered."
                )
        self._incidence[d][dp] = source.invert(n_targets=self._count[d])
        self._dirty[d, dp] = False
        logger.debug("Transposed incidence %d -> %d", dp, d)
        return self

    def intersection(self, d: int, dp: int, dpp: int) -> "Connectivity":
        """Compute ``d -> dp`` through the intermediate dimension ``dpp``.

        Candidates ``j`` of polytope ``i`` are reached through ``d -> dpp`` and
        ``dpp -> dp``. For ``d == dp``, every candidate other than ``i`` itself
        is kept (adjacency). For ``d > dp``, ``j`` is kept only if its vertex set
        is contained in the vertex set of ``i`` (boundary incidence).
        """
        if not d >= dp:
            raise ValueError(f"Intersection requires d >= dp, but got {d=}, {dp=}.")
        sources, targets = self._relation(d, dpp).compose(self._relation(dpp, dp))

        if d == dp:
            mask = sources != targets
            sources, targets = sources[mask], targets[mask]
        elif len(sources) > 0:
            pairs = torch.unique(torch.stack([sources, targets]), dim=1)
            sources, targets = pairs[0], pairs[1]
            sources, targets = self._filter_contained(d, dp, sources, targets)

        self._incidence[d][dp] = build_adjacency_from_pairs(
            sources, targets, n_sources=self._count[d], unique=True
        )
        self._dirty[d, dp] = False
        logger.debug("Intersected incidence %d -> %d through %d", d, dp, dpp)
        return self

    def _filter_contained(
        self,
        d: int,
        dp: int,
        sources: torch.Tensor,
        targets: torch.Tensor,
    ) -> tuple[torch.Tensor, torch.Tensor]:
        """Keep pairs whose target vertex set is a subset of the source's."""
        source_vertices = self._vertices_of(d)
        target_vertices = self._vertices_of(dp)

        ### Every vertex of every candidate target, tagged with its pair
        owner, vertices = target_vertices.gather_rows(targets)
        reference_rows, reference_values = source_vertices.expand_to_pairs()
        found = find_pairs_in_reference(
            reference_rows, reference_values, sources[owner], vertices
        )

        ### A pair survives if all of its target's vertices were found
        n_found = torch.zeros(len(sources), dtype=torch.int64, device=sources.device)
        n_found.index_add_(0, owner, found.to(torch.int64))
        keep = n_found == target_vertices.counts[targets]
        return sources[keep], targets[keep]

    def clear(self, d: int, dp: int) -> "Connectivity":
        """Discard the relation ``d -> dp`` so it is recomputed on next use.

        Polytope records and other relations are not affected.
        """
        self._require_initialized()
        self._check_dimension(d)
        self._check_dimension(dp)
        if dp == 0 and d > 0 and d == self.get_mesh_dimension():
            warnings.warn(
                f"Clearing the ground-truth incidence {d} -> 0 only discards its "
                f"cached tensor; it is rebuilt from the registered polytopes.",
                stacklevel=2,
            )
        self._dirty[d, dp] = True
        self._incidence[d][dp] = None
        logger.debug("Cleared incidence %d -> %d", d, dp)
        return self

    ### Queries

    def get_incidence(
        self, d: int, dp: int, idx: int | None = None
    ) -> Adjacency | tuple[int, ...]:
        """Return the relation ``d -> dp``, or the row of polytope ``idx``.

        Raises
        ------
        RuntimeError
            If the relation has not been computed (see :meth:`compute`).
        """
        self._require_initialized()
        self._check_dimension(d)
        self._check_dimension(dp)
        D = self.get_mesh_dimension()
        if d == D and dp == 0 and D == 0:
            adjacency = self._incidence[0][0]
            if adjacency is None:
                adjacency = build_adjacency_from_rows(
                    [()] * self._count[0], device=self.device
                )
        elif dp == 0 and d > 0 and (d == D or not self._dirty[d, 0]):
            adjacency = self._vertices_of(d)
        elif self._dirty[d, dp] or self._incidence[d][dp] is None:
            raise RuntimeError(
                f"Incidence {d} -> {dp} has not been computed. "
                f"Call compute({d}, {dp}) first."
            )
        else:
            adjacency = self._incidence[d][dp]
        if idx is None:
            return adjacency
        return adjacency.row(idx)

    def set_incidence(self, d: int, dp: int, adjacency: Adjacency) -> "Connectivity":
        """Install an externally computed relation ``d -> dp`` and mark it clean.

        Raises
        ------
        ValueError
            If ``adjacency`` does not have one row per ``d``-polytope.
        """
        self._require_initialized()
        self._check_dimension(d)
        self._check_dimension(dp)
        if adjacency.n_sources != self._count[d]:
            raise ValueError(
                f"Incidence {d} -> {dp} needs {self._count[d]} rows, but got "
                f"{adjacency.n_sources=}."
            )
        self._incidence[d][dp] = adjacency
        self._dirty[d, dp] = False
        return self

    def is_dirty(self, d: int, dp: int) -> bool:
        """Whether ``d -> dp`` still needs to be computed."""
        self._require_initialized()
        self._check_dimension(d)
        self._check_dimension(dp)
        return bool(self._dirty[d, dp])

    def get_count(self, key: int | PolytopeType) -> int:
        """Number of polytopes of a dimension, or of a reference geometry."""
        if isinstance(key, PolytopeType):
            return self._geometry_count[key]
        if not 0 <= key < len(self._count):
            raise ValueError(
                f"Dimension {key} is out of range [0, {len(self._count) - 1}]."
            )
        return self._count[key]

    def get_mesh_dimension(self) -> int:
        """Highest dimension holding at least one polytope (0 for an empty mesh)."""
        for d in range(len(self._count) - 1, -1, -1):
            if self._count[d] > 0:
                return d
        return 0

    def get_maximal_dimension(self) -> int:
        self._require_initialized()
        return self._maximal_dimension

    def get_geometry(self, d: int, idx: int) -> PolytopeType:
        """Reference geometry of polytope ``idx`` of dimension ``d``."""
        self._require_initialized()
        self._check_dimension(d)
        if not 0 <= idx < self._count[d]:
            raise IndexError(
                f"Polytope index {idx=} is out of range for {self._count[d]} "
                f"polytopes of dimension {d}."
            )
        if d == 0:
            return PolytopeType.POINT
        return self._geometry[d][idx]

    def get_polytope(self, d: int, idx: int) -> tuple[int, ...]:
        """Vertex tuple of polytope ``idx`` of dimension ``d``, as registered."""
        self._require_initialized()
        self._check_dimension(d)
        return self._index[d].reverse_lookup(idx)

    def get_index(self, d: int, vertices: Sequence[int]) -> int | None:
        """Index of the ``d``-polytope with the given vertex tuple, if any."""
        self._require_initialized()
        self._check_dimension(d)
        return self._index[d].find(vertices)

    def get_index_map(self, d: int) -> IndexBijection:
        """The vertex tuple <-> index table of dimension ``d``."""
        self._require_initialized()
        self._check_dimension(d)
        return self._index[d]

    def polytope_indices(self, d: int) -> IndexGenerator:
        """Indices of all polytopes of dimension ``d``."""
        return IndexGenerator.bounded(0, self.get_count(d))

    def incident_indices(self, d: int, dp: int, idx: int) -> IndexGenerator:
        """Indices of the ``dp``-polytopes incident to polytope ``idx`` of dimension ``d``."""
        return IndexGenerator.from_set(self.get_incidence(d, dp, idx))

    def __repr__(self) -> str:
        return format_connectivity_repr(self)

    ### Internals

    def _require_initialized(self) -> None:
        if self._maximal_dimension is None:
            raise RuntimeError(
                "Connectivity is not initialized. Call initialize(maximal_dimension) first."
            )

    def _check_dimension(self, d: int) -> None:
        if not 0 <= d <= self._maximal_dimension:
            raise ValueError(
                f"Dimension {d} is out of range [0, {self._maximal_dimension}]."
            )

    def _vertices_of(self, d: int) -> Adjacency:
        """Vertex sets of the ``d``-polytopes; the identity for ``d == 0``."""
        if d == 0:
            n = self._count[0]
            return Adjacency(
                offsets=torch.arange(n + 1, dtype=torch.int64, device=self.device),
                indices=torch.arange(n, dtype=torch.int64, device=self.device),
            )
        if self._incidence[d][0] is None:
            self._incidence[d][0] = build_adjacency_from_rows(
                self._vertex_sets[d], device=self.device
            )
        return self._incidence[d][0]

    def _relation(self, d: int, dp: int) -> Adjacency:
        """Return a relation needed as input of a derivation step."""
        if dp == 0 and d > 0:
            return self._vertices_of(d)
        adjacency = self._incidence[d][dp]
        if adjacency is None or self._dirty[d, dp]:
            raise RuntimeError(
                f"Incidence {d} -> {dp} is required but has not been computed."
            )
        return adjacency
