# Copyright 2024 Google LLC
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
"""
Synthetic workload generation: a pool of random payloads and row key helpers.
"""
from __future__ import annotations

import random
import string

# the number of random values kept in a pool
POOL_SIZE = 1000

# the size of each value
FIELD_SIZE = 100

KEY_WIDTH = 7

_VALID_CHARS = string.digits + string.ascii_letters


def random_string(length: int, rng: random.Random | None = None) -> str:
    rng = rng or random
    return "".join(rng.choices(_VALID_CHARS, k=length))


def random_table_id(prefix: str = "perf", length: int = 8, rng=None) -> str:
    """
    Generate a scratch table id, e.g. ``perfa8Bc01xZ``
    """
    return prefix + random_string(length, rng)


class ValuePool:
    """
    Fixed set of random payloads, generated once and never modified.

    Args:
      - size: number of values in the pool
      - length: number of characters in each value
      - rng: optional random.Random used to build the pool
    """

    def __init__(
        self,
        size: int = POOL_SIZE,
        length: int = FIELD_SIZE,
        rng: random.Random | None = None,
    ):
        if size <= 0:
            raise ValueError("size must be greater than 0")
        if length <= 0:
            raise ValueError("length must be greater than 0")
        self.length = length
        self._values = tuple(
            random_string(length, rng).encode() for _ in range(size)
        )

    def __len__(self):
        return len(self._values)

    def __getitem__(self, idx):
        return self._values[idx]


class WorkloadGenerator:
    """
    Draws cell values and row keys for a benchmark run.

    Values are sampled with replacement; collisions across rows are expected.
    """

    def __init__(self, pool: ValuePool, rng: random.Random | None = None):
        self.pool = pool
        self._rng = rng or random.Random()

    def next_value(self) -> bytes:
        return self.pool[self._rng.randrange(len(self.pool))]

    @staticmethod
    def row_key(prefix: str, index: int) -> str:
        return f"{prefix}{index:0{KEY_WIDTH}d}"

    def random_index(self, total_rows: int) -> int:
        """
        Uniform index in ``[0, total_rows - 1]``
        """
        if total_rows <= 0:
            raise ValueError("total_rows must be greater than 0")
        return self._rng.randint(0, total_rows - 1)

    def random_row_key(self, prefix: str, total_rows: int) -> str:
        return self.row_key(prefix, self.random_index(total_rows))
