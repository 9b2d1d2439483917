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

"""Utility functions for string-formatting Connectivity representations."""

from typing import TYPE_CHECKING

from meshtopo.geometry.polytope import PolytopeType

if TYPE_CHECKING:
    from meshtopo.geometry.connectivity import Connectivity


def format_connectivity_repr(conn: "Connectivity") -> str:
    """Format a complete Connectivity representation.

    The first line holds the dimensions and per-dimension counts, the second
    the non-zero per-geometry counts, followed by one line per source
    dimension marking each relation as computed (``x``) or pending (``.``).

    Parameters
    ----------
    conn : Connectivity
        The engine to format.

    Returns
    -------
    str
        Formatted string representation.
    """
    class_name = conn.__class__.__name__
    if conn._maximal_dimension is None:
        return f"{class_name}(uninitialized)"

    ### Build the first line with class name and key properties
    counts = [conn.get_count(d) for d in range(conn.get_maximal_dimension() + 1)]
    parts = [
        f"maximal_dim={conn.get_maximal_dimension()}",
        f"mesh_dim={conn.get_mesh_dimension()}",
        f"counts={counts}",
    ]
    if conn.device.type != "cpu":
        parts.append(f"device={conn.device}")
    lines = [f"{class_name}({', '.join(parts)})"]

    geometries = [
        f"{g.name.lower()}: {conn.get_count(g)}"
        for g in PolytopeType
        if conn.get_count(g) > 0
    ]
    lines.append(f"    geometries: {{{', '.join(geometries)}}}")

    ### Grid of relations, aligned on the target dimension
    n = len(counts)
    header = " ".join(str(dp) for dp in range(n))
    lines.append(f"    incidence: d\\d' {header}")
    for d in range(n):
        marks = " ".join("." if conn.is_dirty(d, dp) else "x" for dp in range(n))
        lines.append(f"               {d}    {marks}")

    return "\n".join(lines)
