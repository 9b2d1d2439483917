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

"""Pytest configuration and shared fixtures for meshtopo tests.

All fixtures defined here are automatically available to all test files
without explicit imports.
"""

import pytest
import torch

from meshtopo.geometry import Connectivity, PolytopeType

### Pytest Hooks ###


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "cuda: mark test as requiring CUDA (skipped if unavailable)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip tests marked with 'cuda' if CUDA is not available."""
    if torch.cuda.is_available():
        return  # CUDA available, run all tests

    skip_cuda = pytest.mark.skip(reason="CUDA not available")
    for item in items:
        if "cuda" in item.keywords:
            item.add_marker(skip_cuda)


### Fixtures ###


@pytest.fixture(
    params=[
        "cpu",
        pytest.param("cuda", marks=pytest.mark.cuda),
    ]
)
def device(request):
    """Parametrize tests over all available devices (CPU, CUDA)."""
    return request.param


@pytest.fixture
def single_triangle(device):
    """One triangle (0, 1, 2)."""
    conn = Connectivity(device=device).initialize(2).nodes(3)
    return conn.polytope(PolytopeType.TRIANGLE, (0, 1, 2))


@pytest.fixture
def two_triangles(device):
    """Triangles (0, 1, 2) and (1, 2, 3) sharing the edge (1, 2)."""
    conn = Connectivity(device=device).initialize(2).nodes(4)
    conn.polytope(PolytopeType.TRIANGLE, (0, 1, 2))
    return conn.polytope(PolytopeType.TRIANGLE, (1, 2, 3))


@pytest.fixture
def single_tetrahedron(device):
    """One tetrahedron (0, 1, 2, 3)."""
    conn = Connectivity(device=device).initialize(3).nodes(4)
    return conn.polytope(PolytopeType.TETRAHEDRON, (0, 1, 2, 3))


@pytest.fixture
def two_tetrahedra(device):
    """Tetrahedra (0, 1, 2, 3) and (1, 2, 3, 4).

    The shared face is (1, 2, 3) in both local decompositions, so it is
    registered once.
    """
    cells = torch.tensor([[0, 1, 2, 3], [1, 2, 3, 4]], device=device)
    return Connectivity.from_cells(cells, PolytopeType.TETRAHEDRON)

