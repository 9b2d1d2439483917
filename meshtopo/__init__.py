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

"""Polytopal mesh connectivity.

Incidence relations between the vertices, edges, faces and cells of meshes of
dimension up to 3, computed lazily from the cell-to-vertex tables supplied by
a mesh loader.
"""

from meshtopo.boundaries import (
    get_boundary_cells,
    get_boundary_facets,
    get_boundary_vertices,
    is_watertight,
)
from meshtopo.geometry import (
    Connectivity,
    IndexBijection,
    IndexGenerator,
    PolytopeType,
    decompose,
    get_geometry_dimension,
)
from meshtopo.neighbors import Adjacency

__version__ = "0.1.0"
