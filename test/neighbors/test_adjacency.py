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

"""Tests for the offset-indices Adjacency storage and its builders."""

import pytest
import torch

from meshtopo.neighbors import (
    Adjacency,
    build_adjacency_from_pairs,
    build_adjacency_from_rows,
)


class TestValidation:
    def test_empty_offsets_rejected(self):
        with pytest.raises(ValueError, match="length >= 1"):
            Adjacency(
                offsets=torch.zeros(0, dtype=torch.int64),
                indices=torch.zeros(0, dtype=torch.int64),
            )

    def test_nonzero_first_offset_rejected(self):
        with pytest.raises(ValueError, match="First offset"):
            Adjacency(offsets=torch.tensor([1, 2]), indices=torch.tensor([0, 1]))

    def test_mismatched_length_rejected(self):
        with pytest.raises(ValueError, match="Last offset"):
            Adjacency(offsets=torch.tensor([0, 3]), indices=torch.tensor([0, 1]))


class TestQueries:
    @pytest.fixture
    def adjacency(self, device):
        return Adjacency(
            offsets=torch.tensor([0, 2, 2, 5], device=device),
            indices=torch.tensor([4, 7, 0, 1, 2], device=device),
        )

    def test_to_list(self, adjacency):
        assert adjacency.to_list() == [[4, 7], [], [0, 1, 2]]

    def test_counts(self, adjacency):
        assert adjacency.n_sources == 3
        assert adjacency.n_total_neighbors == 5
        assert adjacency.counts.tolist() == [2, 0, 3]

    def test_row(self, adjacency):
        assert adjacency.row(0) == (4, 7)
        assert adjacency.row(1) == ()
        with pytest.raises(IndexError, match="out of range"):
            adjacency.row(3)

    def test_expand_to_pairs(self, adjacency):
        sources, targets = adjacency.expand_to_pairs()
        assert sources.tolist() == [0, 0, 2, 2, 2]
        assert targets.tolist() == [4, 7, 0, 1, 2]

    def test_gather_rows_with_repeats_and_empty_rows(self, adjacency, device):
        owner, values = adjacency.gather_rows(torch.tensor([2, 1, 0, 2], device=device))
        assert owner.tolist() == [0, 0, 0, 2, 2, 3, 3, 3]
        assert values.tolist() == [0, 1, 2, 4, 7, 0, 1, 2]


class TestRelationAlgebra:
    def test_invert(self, device):
        """Every (i, j) pair of the relation appears as (j, i) in the inverse."""
        edges = Adjacency(
            offsets=torch.tensor([0, 2, 4, 6], device=device),
            indices=torch.tensor([0, 1, 1, 2, 0, 2], device=device),
        )
        inverse = edges.invert(n_targets=4)
        assert inverse.to_list() == [[0, 2], [0, 1], [1, 2], []]
        assert inverse.invert(n_targets=3).to_list() == edges.to_list()

    def test_compose(self, device):
        cells_to_vertices = Adjacency(
            offsets=torch.tensor([0, 3, 6], device=device),
            indices=torch.tensor([0, 1, 2, 1, 2, 3], device=device),
        )
        vertices_to_cells = cells_to_vertices.invert(n_targets=4)
        sources, targets = cells_to_vertices.compose(vertices_to_cells)
        pairs = sorted(zip(sources.tolist(), targets.tolist()))
        # cell 0 reaches itself through 3 vertices and cell 1 through 2
        assert pairs.count((0, 0)) == 3
        assert pairs.count((0, 1)) == 2
        assert pairs.count((1, 0)) == 2
        assert len(pairs) == 10


class TestBuilders:
    def test_from_pairs_sorts_rows(self, device):
        sources = torch.tensor([2, 0, 2, 0], device=device)
        targets = torch.tensor([5, 3, 1, 1], device=device)
        adjacency = build_adjacency_from_pairs(sources, targets, n_sources=3)
        assert adjacency.to_list() == [[1, 3], [], [1, 5]]

    def test_from_pairs_keeps_duplicates_unless_unique(self, device):
        sources = torch.tensor([0, 0, 1], device=device)
        targets = torch.tensor([2, 2, 0], device=device)
        assert build_adjacency_from_pairs(sources, targets, 2).to_list() == [
            [2, 2],
            [0],
        ]
        assert build_adjacency_from_pairs(
            sources, targets, 2, unique=True
        ).to_list() == [[2], [0]]

    def test_from_no_pairs(self, device):
        empty = torch.zeros(0, dtype=torch.int64, device=device)
        adjacency = build_adjacency_from_pairs(empty, empty, n_sources=3)
        assert adjacency.to_list() == [[], [], []]
        assert adjacency.offsets.device.type == torch.device(device).type

    def test_from_rows_keeps_order(self, device):
        adjacency = build_adjacency_from_rows([[3, 1], [], [2]], device=device)
        assert adjacency.to_list() == [[3, 1], [], [2]]
        assert adjacency.indices.device.type == torch.device(device).type

    def test_from_no_rows(self):
        adjacency = build_adjacency_from_rows([])
        assert adjacency.n_sources == 0
        assert adjacency.offsets.tolist() == [0]
