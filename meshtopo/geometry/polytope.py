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

"""Reference polytope catalog.

Every entity of a mesh (vertex, edge, face or cell) has a reference geometry
drawn from this fixed catalog. The catalog fixes the topological dimension and
the number of vertices of each geometry; the canonical vertex ordering of each
geometry is encoded in :mod:`meshtopo.geometry._subpolytopes`.
"""

import enum


class PolytopeType(enum.Enum):
    """Reference geometry of a mesh polytope.

    =================  =========  ==========
    Geometry           Dimension  n_vertices
    =================  =========  ==========
    POINT              0          1
    SEGMENT            1          2
    TRIANGLE           2          3
    QUADRILATERAL      2          4
    TETRAHEDRON        3          4
    TRIANGULAR_PRISM   3          6
    =================  =========  ==========

    Examples
    --------
    >>> PolytopeType.TETRAHEDRON.dimension
    3
    >>> PolytopeType.TRIANGULAR_PRISM.n_vertices
    6
    """

    POINT = "point"
    SEGMENT = "segment"
    TRIANGLE = "triangle"
    QUADRILATERAL = "quadrilateral"
    TETRAHEDRON = "tetrahedron"
    TRIANGULAR_PRISM = "triangular_prism"

    @property
    def dimension(self) -> int:
        """Topological dimension of the geometry."""
        return _DIMENSIONS[self]

    @property
    def n_vertices(self) -> int:
        """Number of vertices of the geometry."""
        return _N_VERTICES[self]

    @property
    def is_simplex(self) -> bool:
        """Whether the geometry is a simplex (``n_vertices == dimension + 1``)."""
        return self.n_vertices == self.dimension + 1


_DIMENSIONS: dict[PolytopeType, int] = {
    PolytopeType.POINT: 0,
    PolytopeType.SEGMENT: 1,
    PolytopeType.TRIANGLE: 2,
    PolytopeType.QUADRILATERAL: 2,
    PolytopeType.TETRAHEDRON: 3,
    PolytopeType.TRIANGULAR_PRISM: 3,
}

_N_VERTICES: dict[PolytopeType, int] = {
    PolytopeType.POINT: 1,
    PolytopeType.SEGMENT: 2,
    PolytopeType.TRIANGLE: 3,
    PolytopeType.QUADRILATERAL: 4,
    PolytopeType.TETRAHEDRON: 4,
    PolytopeType.TRIANGULAR_PRISM: 6,
}

MAX_DIMENSION = max(_DIMENSIONS.values())


def get_geometry_dimension(geometry: PolytopeType) -> int:
    """Return the topological dimension of a reference geometry.

    Parameters
    ----------
    geometry : PolytopeType
        Reference geometry.

    Returns
    -------
    int
        Dimension in ``0..3``.

    Raises
    ------
    TypeError
        If ``geometry`` is not a :class:`PolytopeType`.
    """
    if not isinstance(geometry, PolytopeType):
        raise TypeError(
            f"Expected a PolytopeType, but got {geometry!r} of type "
            f"{type(geometry).__name__}."
        )
    return geometry.dimension


def get_geometries(dimension: int) -> tuple[PolytopeType, ...]:
    """Return every reference geometry of the given dimension, in catalog order."""
    return tuple(g for g in PolytopeType if g.dimension == dimension)
