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

"""Sub-polytope decomposition of the reference geometries.

Each reference geometry is decomposed into the polytopes of a lower dimension
that bound it (its vertices, edges and faces), listed in a fixed order and
expressed as positions into the parent's vertex tuple. These tables define the
local vertex numbering of every geometry and must agree with the vertex
ordering convention of the mesh files the cells are read from:

- Quadrilaterals are numbered in tensor-product order, so the boundary cycle
  is ``0 -> 1 -> 3 -> 2``.
- Triangular prisms are a bottom triangle ``(0, 1, 2)`` extruded to a top
  triangle ``(3, 4, 5)``; lateral faces follow the same tensor-product order.
"""

from typing import Sequence

from meshtopo.geometry.polytope import PolytopeType

P = PolytopeType.POINT
S = PolytopeType.SEGMENT
T = PolytopeType.TRIANGLE
Q = PolytopeType.QUADRILATERAL

SubPolytope = tuple[PolytopeType, tuple[int, ...]]

### Local decomposition tables: geometry -> {dimension: [(sub-geometry, local vertices)]}
# The entry at the geometry's own dimension is omitted; it is the identity.
_SUBPOLYTOPE_TABLES: dict[PolytopeType, dict[int, tuple[SubPolytope, ...]]] = {
    PolytopeType.POINT: {},
    PolytopeType.SEGMENT: {
        0: ((P, (0,)), (P, (1,))),
    },
    PolytopeType.TRIANGLE: {
        0: ((P, (0,)), (P, (1,)), (P, (2,))),
        1: ((S, (0, 1)), (S, (1, 2)), (S, (2, 0))),
    },
    PolytopeType.QUADRILATERAL: {
        0: ((P, (0,)), (P, (1,)), (P, (2,)), (P, (3,))),
        1: ((S, (0, 1)), (S, (1, 3)), (S, (3, 2)), (S, (2, 0))),
    },
    PolytopeType.TETRAHEDRON: {
        0: ((P, (0,)), (P, (1,)), (P, (2,)), (P, (3,))),
        1: (
            (S, (0, 1)),
            (S, (0, 2)),
            (S, (1, 2)),
            (S, (1, 3)),
            (S, (2, 3)),
            (S, (3, 0)),
        ),
        2: (
            (T, (0, 1, 3)),
            (T, (0, 1, 2)),
            (T, (0, 2, 3)),
            (T, (1, 2, 3)),
        ),
    },
    PolytopeType.TRIANGULAR_PRISM: {
        0: tuple((P, (i,)) for i in range(6)),
        1: (
            (S, (0, 1)),
            (S, (0, 2)),
            (S, (0, 3)),
            (S, (1, 2)),
            (S, (1, 4)),
            (S, (2, 5)),
            (S, (3, 4)),
            (S, (3, 5)),
            (S, (4, 5)),
        ),
        2: (
            (T, (0, 1, 2)),
            (Q, (0, 1, 3, 4)),
            (Q, (1, 2, 4, 5)),
            (Q, (2, 0, 5, 3)),
            (T, (3, 4, 5)),
        ),
    },
}


def get_subpolytope_table(
    geometry: PolytopeType, dimension: int
) -> tuple[SubPolytope, ...]:
    """Return the local decomposition of ``geometry`` into ``dimension``-polytopes.

    Vertex tuples in the result are positions into the parent's vertex tuple.

    Parameters
    ----------
    geometry : PolytopeType
        Reference geometry to decompose.
    dimension : int
        Target dimension, ``0 <= dimension <= geometry.dimension``.

    Returns
    -------
    tuple[SubPolytope, ...]
        ``(sub-geometry, local vertex positions)`` pairs in canonical order.

    Raises
    ------
    ValueError
        If ``dimension`` is outside ``0..geometry.dimension``.

    Examples
    --------
    >>> get_subpolytope_table(PolytopeType.TRIANGLE, 1)
    ((<PolytopeType.SEGMENT: 'segment'>, (0, 1)), (<PolytopeType.SEGMENT: 'segment'>, (1, 2)), (<PolytopeType.SEGMENT: 'segment'>, (2, 0)))
    """
    if not 0 <= dimension <= geometry.dimension:
        raise ValueError(
            f"Cannot decompose a {geometry.name} into polytopes of {dimension=}; "
            f"the target dimension must lie in [0, {geometry.dimension}]."
        )
    if dimension == geometry.dimension:
        return ((geometry, tuple(range(geometry.n_vertices))),)
    return _SUBPOLYTOPE_TABLES[geometry][dimension]


def decompose(
    geometry: PolytopeType,
    vertices: Sequence[int],
    dimension: int,
) -> list[SubPolytope]:
    """Decompose a polytope into the ``dimension``-polytopes that bound it.

    Parameters
    ----------
    geometry : PolytopeType
        Reference geometry of the polytope.
    vertices : Sequence[int]
        Global vertex indices of the polytope, in canonical order.
    dimension : int
        Target dimension.

    Returns
    -------
    list[SubPolytope]
        ``(sub-geometry, global vertex tuple)`` pairs, one per sub-polytope, in
        the fixed order of the reference tables. At ``dimension ==
        geometry.dimension`` the polytope itself is returned unchanged.

    Raises
    ------
    ValueError
        If the target dimension is not supported for ``geometry`` or if
        ``vertices`` does not have ``geometry.n_vertices`` entries.

    Examples
    --------
    >>> [v for _, v in decompose(PolytopeType.TRIANGLE, (4, 7, 9), 1)]
    [(4, 7), (7, 9), (9, 4)]
    >>> decompose(PolytopeType.QUADRILATERAL, (0, 1, 2, 3), 2)
    [(<PolytopeType.QUADRILATERAL: 'quadrilateral'>, (0, 1, 2, 3))]
    """
    vertices = tuple(int(v) for v in vertices)
    if len(vertices) != geometry.n_vertices:
        raise ValueError(
            f"A {geometry.name} has {geometry.n_vertices} vertices, but got "
            f"{len(vertices)=} ({vertices})."
        )
    table = get_subpolytope_table(geometry, dimension)
    return [
        (sub_geometry, tuple(vertices[k] for k in local))
        for sub_geometry, local in table
    ]
