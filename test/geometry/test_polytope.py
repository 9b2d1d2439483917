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

"""Tests for the reference polytope catalog."""

import pytest

from meshtopo.geometry.polytope import (
    MAX_DIMENSION,
    PolytopeType,
    get_geometries,
    get_geometry_dimension,
)


class TestGeometryDimension:
    @pytest.mark.parametrize(
        "geometry,expected",
        [
            (PolytopeType.POINT, 0),
            (PolytopeType.SEGMENT, 1),
            (PolytopeType.TRIANGLE, 2),
            (PolytopeType.QUADRILATERAL, 2),
            (PolytopeType.TETRAHEDRON, 3),
            (PolytopeType.TRIANGULAR_PRISM, 3),
        ],
    )
    def test_dimension(self, geometry, expected):
        assert get_geometry_dimension(geometry) == expected
        assert geometry.dimension == expected

    def test_non_member_raises(self):
        with pytest.raises(TypeError, match="PolytopeType"):
            get_geometry_dimension("triangle")

    def test_max_dimension(self):
        assert MAX_DIMENSION == 3


class TestVertexCounts:
    def test_vertex_counts(self):
        assert [g.n_vertices for g in PolytopeType] == [1, 2, 3, 4, 4, 6]

    def test_simplices(self):
        """Only the quadrilateral and the prism are not simplices."""
        non_simplices = {g for g in PolytopeType if not g.is_simplex}
        assert non_simplices == {
            PolytopeType.QUADRILATERAL,
            PolytopeType.TRIANGULAR_PRISM,
        }


class TestGetGeometries:
    def test_by_dimension(self):
        assert get_geometries(2) == (
            PolytopeType.TRIANGLE,
            PolytopeType.QUADRILATERAL,
        )
        assert get_geometries(0) == (PolytopeType.POINT,)

    def test_unknown_dimension_is_empty(self):
        assert get_geometries(4) == ()
