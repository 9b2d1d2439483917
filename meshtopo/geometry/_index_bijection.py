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

"""Bidirectional map between polytope vertex tuples and dense integer ids."""

from typing import Iterator, Sequence


class IndexBijection:
    """Insert-if-absent bijection ``vertex tuple <-> id``.

    Ids are handed out sequentially starting at zero, so the ids of a table
    with ``n`` entries are exactly ``range(n)``.

    Parameters
    ----------
    symmetric : bool, optional
        If False (default), keys are compared exactly: ``(0, 1)`` and
        ``(1, 0)`` are distinct keys. If True, keys that are permutations of
        each other identify the same entry, which keeps the vertex order of
        the first insertion.

    Examples
    --------
    >>> table = IndexBijection()
    >>> table.insert((0, 1, 2))
    (0, True)
    >>> table.insert((1, 2, 3))
    (1, True)
    >>> table.insert((0, 1, 2))
    (0, False)
    >>> table.reverse_lookup(1)
    (1, 2, 3)
    >>> table.find((2, 1, 0)) is None
    True
    >>> IndexBijection(symmetric=True).insert((2, 1, 0))
    (0, True)
    """

    def __init__(self, symmetric: bool = False) -> None:
        self.symmetric = symmetric
        self._forward: dict[tuple[int, ...], int] = {}
        self._reverse: list[tuple[int, ...]] = []

    def _key(self, vertices: Sequence[int]) -> tuple[int, ...]:
        key = tuple(int(v) for v in vertices)
        return tuple(sorted(key)) if self.symmetric else key

    def insert(self, vertices: Sequence[int]) -> tuple[int, bool]:
        """Insert a vertex tuple if absent.

        Returns
        -------
        tuple[int, bool]
            The id of the key and whether it was newly inserted.
        """
        key = self._key(vertices)
        idx = self._forward.get(key)
        if idx is not None:
            return idx, False
        idx = len(self._reverse)
        self._forward[key] = idx
        self._reverse.append(tuple(int(v) for v in vertices))
        return idx, True

    def find(self, vertices: Sequence[int]) -> int | None:
        """Return the id of a vertex tuple, or None if it was never inserted."""
        return self._forward.get(self._key(vertices))

    def reverse_lookup(self, idx: int) -> tuple[int, ...]:
        """Return the vertex tuple registered under ``idx``.

        Raises
        ------
        IndexError
            If ``idx`` is not in ``range(len(self))``.
        """
        if not 0 <= idx < len(self._reverse):
            raise IndexError(
                f"Polytope index {idx=} is out of range for a table of "
                f"{len(self._reverse)} entries."
            )
        return self._reverse[idx]

    def clear(self) -> None:
        self._forward.clear()
        self._reverse.clear()

    def keys(self) -> list[tuple[int, ...]]:
        """Vertex tuples in id order."""
        return list(self._reverse)

    def __len__(self) -> int:
        return len(self._reverse)

    def __contains__(self, vertices) -> bool:
        return self.find(vertices) is not None

    def __iter__(self) -> Iterator[tuple[tuple[int, ...], int]]:
        return ((key, idx) for idx, key in enumerate(self._reverse))

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(n_entries={len(self)}, "
            f"symmetric={self.symmetric})"
        )
