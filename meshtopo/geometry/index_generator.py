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

"""Restartable generators over polytope indices.

An :class:`IndexGenerator` describes a finite sequence of polytope indices
without committing to how it is stored: nothing at all, a half-open range, an
explicit sequence, or a sorted set. Iterating it always starts from the first
index, so the same generator can be traversed any number of times.
"""

import enum
from dataclasses import dataclass
from typing import Iterable, Iterator

import torch


class IndexGeneratorKind(enum.Enum):
    EMPTY = "empty"
    BOUNDED = "bounded"
    SEQUENCE = "sequence"
    SET = "set"


@dataclass(frozen=True)
class IndexGenerator:
    """Finite, restartable sequence of polytope indices.

    Use the constructors :meth:`empty`, :meth:`bounded`, :meth:`sequence` and
    :meth:`from_set` rather than building instances directly.

    Examples
    --------
    >>> list(IndexGenerator.bounded(2, 5))
    [2, 3, 4]
    >>> list(IndexGenerator.from_set([4, 1, 4, 2]))
    [1, 2, 4]
    >>> list(IndexGenerator.sequence([4, 1, 4]))
    [4, 1, 4]
    >>> len(IndexGenerator.empty())
    0
    """

    kind: IndexGeneratorKind
    start: int = 0
    stop: int = 0
    indices: tuple[int, ...] = ()

    @classmethod
    def empty(cls) -> "IndexGenerator":
        return cls(kind=IndexGeneratorKind.EMPTY)

    @classmethod
    def bounded(cls, start: int, stop: int) -> "IndexGenerator":
        """Indices ``start, start + 1, ..., stop - 1``."""
        if stop < start:
            raise ValueError(f"Invalid bounds: {start=} > {stop=}.")
        return cls(kind=IndexGeneratorKind.BOUNDED, start=int(start), stop=int(stop))

    @classmethod
    def sequence(cls, indices: Iterable[int] | torch.Tensor) -> "IndexGenerator":
        """Indices in the given order, duplicates kept."""
        return cls(kind=IndexGeneratorKind.SEQUENCE, indices=_as_tuple(indices))

    @classmethod
    def from_set(cls, indices: Iterable[int] | torch.Tensor) -> "IndexGenerator":
        """Distinct indices in increasing order."""
        return cls(
            kind=IndexGeneratorKind.SET,
            indices=tuple(sorted(set(_as_tuple(indices)))),
        )

    def __iter__(self) -> Iterator[int]:
        if self.kind is IndexGeneratorKind.EMPTY:
            return iter(())
        if self.kind is IndexGeneratorKind.BOUNDED:
            return iter(range(self.start, self.stop))
        return iter(self.indices)

    def __len__(self) -> int:
        if self.kind is IndexGeneratorKind.EMPTY:
            return 0
        if self.kind is IndexGeneratorKind.BOUNDED:
            return self.stop - self.start
        return len(self.indices)

    def __contains__(self, idx) -> bool:
        if self.kind is IndexGeneratorKind.EMPTY:
            return False
        if self.kind is IndexGeneratorKind.BOUNDED:
            return self.start <= idx < self.stop
        return idx in self.indices

    def to_tensor(self, device: torch.device | str | None = None) -> torch.Tensor:
        """Materialize the indices as an int64 tensor."""
        if self.kind is IndexGeneratorKind.BOUNDED:
            return torch.arange(self.start, self.stop, dtype=torch.int64, device=device)
        return torch.tensor(list(self), dtype=torch.int64, device=device)


def _as_tuple(indices: Iterable[int] | torch.Tensor) -> tuple[int, ...]:
    if isinstance(indices, torch.Tensor):
        return tuple(indices.reshape(-1).tolist())
    return tuple(int(i) for i in indices)
