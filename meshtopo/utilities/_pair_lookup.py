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

"""Hash-based membership tests for (row, value) pairs.

Used by the connectivity engine to test vertex-set containment of candidate
incidences without leaving torch.
"""

import torch


def find_pairs_in_reference(
    reference_rows: torch.Tensor,
    reference_values: torch.Tensor,
    query_rows: torch.Tensor,
    query_values: torch.Tensor,
) -> torch.Tensor:
    """Test which query pairs occur among the reference pairs.

    Each pair ``(row, value)`` is hashed to ``row * (max_value + 1) + value``,
    which is collision-free for non-negative entries. Reference hashes are
    sorted once, and every query is located by binary search, giving
    O(n log n + m log n) for n references and m queries.

    Parameters
    ----------
    reference_rows, reference_values : torch.Tensor
        Reference pairs, both shape (n_ref,), non-negative integers.
    query_rows, query_values : torch.Tensor
        Query pairs, both shape (n_query,), non-negative integers.

    Returns
    -------
    torch.Tensor
        Shape (n_query,) bool. True where the query pair is a reference pair.

    Examples
    --------
    >>> # Vertex sets: polytope 0 = {0, 1, 2}, polytope 1 = {1, 2, 3}
    >>> ref_rows = torch.tensor([0, 0, 0, 1, 1, 1])
    >>> ref_values = torch.tensor([0, 1, 2, 1, 2, 3])
    >>> find_pairs_in_reference(
    ...     ref_rows, ref_values, torch.tensor([0, 0, 1]), torch.tensor([2, 3, 3])
    ... ).tolist()
    [True, False, True]
    """
    device = query_rows.device

    ### Handle empty cases
    if len(reference_rows) == 0 or len(query_rows) == 0:
        return torch.zeros(len(query_rows), dtype=torch.bool, device=device)

    ### Compute integer hash for each pair
    stride = max(reference_values.max().item(), query_values.max().item()) + 1
    reference_hash = reference_rows * stride + reference_values
    query_hash = query_rows * stride + query_values

    ### Sort reference hashes to enable binary search via searchsorted
    reference_hash_sorted, _ = torch.sort(reference_hash)
    positions = torch.searchsorted(reference_hash_sorted, query_hash)

    ### Clamp positions to valid range (handles queries beyond max reference)
    positions = positions.clamp(max=len(reference_hash_sorted) - 1)

    ### Exact matches only, not insertion points
    return reference_hash_sorted[positions] == query_hash
