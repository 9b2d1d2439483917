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

"""Boundary detection for polytopal meshes.

A facet (a polytope of dimension ``D - 1`` in a mesh of dimension ``D``) is on
the boundary if exactly one cell is incident to it. All functions derive this
from the ``D - 1 -> D`` incidence of a :class:`Connectivity`, computing it if
needed.
"""

from typing import TYPE_CHECKING

import torch

if TYPE_CHECKING:
    from meshtopo.geometry.connectivity import Connectivity


def get_boundary_facets(conn: "Connectivity") -> torch.Tensor:
    """Identify the facets lying on the mesh boundary.

    Parameters
    ----------
    conn : Connectivity
        Populated connectivity engine.

    Returns
    -------
    torch.Tensor
        Sorted int64 indices of the boundary facets (polytopes of dimension
        ``D - 1``). Empty for meshes of dimension 0.

    Examples
    --------
    >>> from meshtopo.geometry import Connectivity, PolytopeType
    >>> cells = torch.tensor([[0, 1, 2], [1, 2, 3]])
    >>> conn = Connectivity.from_cells(cells, PolytopeType.TRIANGLE)
    >>> [conn.get_polytope(1, i) for i in get_boundary_facets(conn).tolist()]
    [(0, 1), (2, 0), (2, 3), (3, 1)]
    """
    D = conn.get_mesh_dimension()
    if D == 0:
        return torch.zeros(0, dtype=torch.int64, device=conn.device)

    facet_to_cells = conn.compute(D - 1, D).get_incidence(D - 1, D)
    return torch.nonzero(facet_to_cells.counts == 1).flatten()


def get_boundary_vertices(conn: "Connectivity") -> torch.Tensor:
    """Identify vertices that lie on the mesh boundary.

    A vertex is on the boundary if it belongs to at least one boundary facet.
    For a 1D mesh the boundary facets are the vertices themselves.

    Returns
    -------
    torch.Tensor
        Boolean tensor of shape ``(n_vertices,)``.

    Notes
    -----
    For closed meshes, returns all False.
    """
    D = conn.get_mesh_dimension()
    is_boundary = torch.zeros(conn.get_count(0), dtype=torch.bool, device=conn.device)
    boundary_facets = get_boundary_facets(conn)
    if len(boundary_facets) == 0:
        return is_boundary

    if D == 1:
        is_boundary[boundary_facets] = True
        return is_boundary

    _, vertices = conn.compute(D - 1, 0).get_incidence(D - 1, 0).gather_rows(
        boundary_facets
    )
    is_boundary[vertices] = True
    return is_boundary


def get_boundary_cells(conn: "Connectivity") -> torch.Tensor:
    """Identify cells owning at least one boundary facet.

    Returns
    -------
    torch.Tensor
        Boolean tensor of shape ``(n_cells,)``.
    """
    D = conn.get_mesh_dimension()
    n_cells = conn.get_count(D) if D > 0 else 0
    is_boundary = torch.zeros(n_cells, dtype=torch.bool, device=conn.device)
    boundary_facets = get_boundary_facets(conn)
    if len(boundary_facets) == 0:
        return is_boundary

    _, cells = conn.get_incidence(D - 1, D).gather_rows(boundary_facets)
    is_boundary[cells] = True
    return is_boundary


def is_watertight(conn: "Connectivity") -> bool:
    """Whether every facet is shared by at least two cells.

    Meshes of dimension 0 have no facets and are considered watertight.

    Examples
    --------
    >>> from meshtopo.geometry import Connectivity, PolytopeType
    >>> cells = torch.tensor([[0, 1, 2, 3]])
    >>> is_watertight(Connectivity.from_cells(cells, PolytopeType.TETRAHEDRON))
    False
    """
    return len(get_boundary_facets(conn)) == 0
