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

"""Ragged incidence tables stored with offset-indices encoding.

Every incidence relation ``d -> d'`` of a mesh is a ragged array: polytope
``i`` of dimension ``d`` has a variable number of incident polytopes of
dimension ``d'``. The :class:`Adjacency` tensorclass stores such a relation as
two flat int64 tensors so relations can be inverted and composed with
vectorized torch operations.
"""

from typing import Sequence

import torch
from tensordict import tensorclass


@tensorclass
class Adjacency:
    """Ragged incidence list stored with offset-indices encoding.

    Attributes:
        offsets: Start of each source's row in ``indices``.
            Shape (n_sources + 1,), dtype int64. Row ``i`` is
            ``indices[offsets[i]:offsets[i+1]]``.
        indices: Concatenated rows.
            Shape (total_neighbors,), dtype int64.

    Examples
    --------
        >>> # Edges of a single triangle, as vertex sets
        >>> adj = Adjacency(
        ...     offsets=torch.tensor([0, 2, 4, 6]),
        ...     indices=torch.tensor([0, 1, 1, 2, 0, 2]),
        ... )
        >>> adj.to_list()
        [[0, 1], [1, 2], [0, 2]]
        >>> adj.invert(n_targets=3).to_list()
        [[0, 2], [0, 1], [1, 2]]
    """

    offsets: torch.Tensor  # shape: (n_sources + 1,), dtype: int64
    indices: torch.Tensor  # shape: (total_neighbors,), dtype: int64

    def __post_init__(self):
        if not torch.compiler.is_compiling():
            if len(self.offsets) < 1:
                raise ValueError(
                    f"Offsets array must have length >= 1 (n_sources + 1), but got "
                    f"{len(self.offsets)=}. Even for 0 sources, offsets should be [0]."
                )
            if self.offsets[0].item() != 0:
                raise ValueError(
                    f"First offset must be 0, but got {self.offsets[0].item()=}."
                )
            last_offset = self.offsets[-1].item()
            indices_length = len(self.indices)
            if last_offset != indices_length:
                raise ValueError(
                    f"Last offset must equal length of indices, but got "
                    f"{last_offset=} != {indices_length=}."
                )

    def to_list(self) -> list[list[int]]:
        """Convert to a ragged list-of-lists, preserving row order.

        Mainly for tests and debugging; library code works on the encoding
        directly.
        """
        offsets_np = self.offsets.cpu().numpy()
        indices_np = self.indices.cpu().numpy()
        return [
            indices_np[offsets_np[i] : offsets_np[i + 1]].tolist()
            for i in range(len(offsets_np) - 1)
        ]

    def row(self, idx: int) -> tuple[int, ...]:
        """Return row ``idx`` as a tuple of ints.

        Raises
        ------
        IndexError
            If ``idx`` is not a valid source index.
        """
        if not 0 <= idx < self.n_sources:
            raise IndexError(
                f"Source index {idx=} is out of range for {self.n_sources} sources."
            )
        start, end = self.offsets[idx].item(), self.offsets[idx + 1].item()
        return tuple(self.indices[start:end].tolist())

    @property
    def n_sources(self) -> int:
        """Number of source polytopes (rows)."""
        return len(self.offsets) - 1

    @property
    def n_total_neighbors(self) -> int:
        """Total number of incidences across all rows."""
        return len(self.indices)

    @property
    def counts(self) -> torch.Tensor:
        """Row lengths, shape (n_sources,), dtype int64.

        Example
        -------
        >>> adj = Adjacency(
        ...     offsets=torch.tensor([0, 3, 3, 5]),
        ...     indices=torch.tensor([1, 2, 0, 4, 3]),
        ... )
        >>> adj.counts.tolist()
        [3, 0, 2]
        """
        return self.offsets[1:] - self.offsets[:-1]

    def expand_to_pairs(self) -> tuple[torch.Tensor, torch.Tensor]:
        """Expand to ``(source_idx, target_idx)`` pairs.

        Inverse of :func:`build_adjacency_from_pairs`.

        Examples
        --------
            >>> adj = Adjacency(
            ...     offsets=torch.tensor([0, 2, 4, 5]),
            ...     indices=torch.tensor([10, 11, 20, 21, 30]),
            ... )
            >>> sources, targets = adj.expand_to_pairs()
            >>> sources.tolist()
            [0, 0, 1, 1, 2]
        """
        device = self.offsets.device
        if self.n_total_neighbors == 0:
            return (
                torch.zeros(0, dtype=torch.int64, device=device),
                self.indices,
            )
        # offsets[i] <= position < offsets[i+1] means position belongs to row i
        positions = torch.arange(
            self.n_total_neighbors, dtype=torch.int64, device=device
        )
        source_indices = torch.searchsorted(self.offsets, positions, right=True) - 1
        return source_indices, self.indices

    def gather_rows(
        self, sources: torch.Tensor
    ) -> tuple[torch.Tensor, torch.Tensor]:
        """Concatenate the rows of the given sources.

        Parameters
        ----------
        sources : torch.Tensor
            Source indices to gather, shape (n_queries,). May repeat.

        Returns
        -------
        owner : torch.Tensor
            For every gathered entry, the position in ``sources`` it came from.
        values : torch.Tensor
            Gathered entries, in row order.

        Examples
        --------
            >>> adj = Adjacency(
            ...     offsets=torch.tensor([0, 2, 3]),
            ...     indices=torch.tensor([5, 6, 7]),
            ... )
            >>> owner, values = adj.gather_rows(torch.tensor([1, 0, 1]))
            >>> owner.tolist(), values.tolist()
            ([0, 1, 1, 2], [7, 5, 6, 7])
        """
        device = self.offsets.device
        sources = sources.to(device=device, dtype=torch.int64)
        counts = self.counts[sources]
        owner = torch.repeat_interleave(
            torch.arange(len(sources), dtype=torch.int64, device=device), counts
        )
        ### Position of each gathered entry inside its own row
        group_starts = torch.cumsum(counts, dim=0) - counts
        within_row = (
            torch.arange(len(owner), dtype=torch.int64, device=device)
            - group_starts[owner]
        )
        positions = self.offsets[sources][owner] + within_row
        return owner, self.indices[positions]

    def invert(self, n_targets: int) -> "Adjacency":
        """Invert the relation: ``j in self[i]`` iff ``i in result[j]``.

        Parameters
        ----------
        n_targets : int
            Number of rows of the result (targets may have no incidence).
        """
        sources, targets = self.expand_to_pairs()
        return build_adjacency_from_pairs(targets, sources, n_sources=n_targets)

    def compose(self, other: "Adjacency") -> tuple[torch.Tensor, torch.Tensor]:
        """Chain this relation with ``other``.

        Returns every ``(i, j)`` such that ``k in self[i]`` and
        ``j in other[k]`` for some ``k``, with duplicates.
        """
        sources, middles = self.expand_to_pairs()
        owner, targets = other.gather_rows(middles)
        return sources[owner], targets


def build_adjacency_from_pairs(
    source_indices: torch.Tensor,  # shape: (n_pairs,)
    target_indices: torch.Tensor,  # shape: (n_pairs,)
    n_sources: int,
    unique: bool = False,
) -> Adjacency:
    """Build an offset-indices adjacency from (source, target) pairs.

    Pairs are sorted lexicographically, so each row comes out sorted.

    Parameters
    ----------
    source_indices : torch.Tensor
        Source indices, shape (n_pairs,).
    target_indices : torch.Tensor
        Target indices, shape (n_pairs,).
    n_sources : int
        Number of rows (may exceed ``max(source_indices) + 1``).
    unique : bool, optional
        Drop repeated pairs so every row is a set.

    Examples
    --------
        >>> sources = torch.tensor([0, 0, 1, 3, 0])
        >>> targets = torch.tensor([2, 1, 3, 0, 2])
        >>> build_adjacency_from_pairs(sources, targets, n_sources=4, unique=True).to_list()
        [[1, 2], [3], [], [0]]
    """
    device = source_indices.device

    if len(source_indices) == 0:
        return Adjacency(
            offsets=torch.zeros(n_sources + 1, dtype=torch.int64, device=device),
            indices=torch.zeros(0, dtype=torch.int64, device=device),
        )

    if unique:
        # torch.unique over columns also sorts them lexicographically
        pairs = torch.unique(torch.stack([source_indices, target_indices]), dim=1)
        sorted_sources, sorted_targets = pairs[0], pairs[1]
    else:
        ### Lexicographic sort by (source, target) using two stable argsorts
        sort_by_target = torch.argsort(target_indices, stable=True)
        sort_indices = sort_by_target[
            torch.argsort(source_indices[sort_by_target], stable=True)
        ]
        sorted_sources = source_indices[sort_indices]
        sorted_targets = target_indices[sort_indices]

    offsets = torch.zeros(n_sources + 1, dtype=torch.int64, device=device)
    offsets[1:] = torch.cumsum(
        torch.bincount(sorted_sources, minlength=n_sources), dim=0
    )
    return Adjacency(offsets=offsets, indices=sorted_targets)


def build_adjacency_from_rows(
    rows: Sequence[Sequence[int]],
    device: torch.device | str | None = None,
) -> Adjacency:
    """Build an adjacency from a ragged list of rows, keeping row contents as given.

    Examples
    --------
        >>> build_adjacency_from_rows([[0, 1], [], [2]]).offsets.tolist()
        [0, 2, 2, 3]
    """
    lengths = torch.tensor([len(r) for r in rows], dtype=torch.int64, device=device)
    offsets = torch.zeros(len(rows) + 1, dtype=torch.int64, device=device)
    offsets[1:] = torch.cumsum(lengths, dim=0)
    indices = torch.tensor(
        [int(v) for r in rows for v in r], dtype=torch.int64, device=device
    )
    return Adjacency(offsets=offsets, indices=indices)
