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

"""Tests for the Connectivity string representation."""

from meshtopo.geometry import Connectivity


def test_uninitialized():
    assert repr(Connectivity()) == "Connectivity(uninitialized)"


def test_counts_and_geometries(two_triangles):
    text = repr(two_triangles.compute(1, 0))
    lines = text.splitlines()
    assert lines[0].startswith(
        "Connectivity(maximal_dim=2, mesh_dim=2, counts=[4, 5, 2]"
    )
    assert lines[1] == "    geometries: {point: 4, segment: 5, triangle: 2}"


def test_relation_grid(single_triangle):
    conn = single_triangle.compute(1, 1)
    lines = repr(conn).splitlines()[2:]
    assert lines[0] == "    incidence: d\\d' 0 1 2"
    assert lines[1].endswith(". x x")
    assert lines[2].endswith("x x .")
    assert lines[3].endswith("x x x")


def test_grid_reflects_clear(single_triangle):
    conn = single_triangle.compute(2, 2).clear(2, 2)
    assert repr(conn).splitlines()[-1].endswith("x . .")


def test_device_shown_off_cpu(device):
    conn = Connectivity(device=device).initialize(1)
    first_line = repr(conn).splitlines()[0]
    assert ("device=" in first_line) == (device != "cpu")
