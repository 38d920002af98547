"""Dense row-major float64 matrices and the linear-algebra kernels behind the verbs.

Storage is a flat ``jax.Array`` of length ``rows * cols``; element ``(r, c)``
lives at ``data[r * cols + c]``. Kernels that need scratch space (``rref``,
``inverse``, ``transpose``) build a private working copy, and every binary
kernel returns a new :class:`Matrix`.

The algorithms are deliberately simple: Gauss-Jordan elimination with a single
top-row swap, and Laplace expansion along row index 1 for determinants. Results
from ``rref`` and ``inverse`` go through :func:`correct`, which snaps entries
within ``CORRECTION_TOLERANCE`` of an integer and clears negative zeros.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Callable, Final

import jax
import jax.numpy as jnp

from .errors import DimensionMismatch, InvalidMatrixShape, NotSquare, SingularMatrix

CORRECTION_TOLERANCE: Final[float] = float(os.environ.get("LALA_CORRECTION_TOLERANCE", "1e-6"))

# Row used for Laplace expansion in det(); fixed, not chosen per matrix.
_EXPANSION_ROW: Final[int] = 1

UnaryKernel = Callable[[jax.Array], jax.Array]
BinaryKernel = Callable[[jax.Array, jax.Array], jax.Array]


@dataclass(eq=False)
class Matrix:
    rows: int
    cols: int
    data: jax.Array

    def __post_init__(self) -> None:
        self.data = jnp.asarray(self.data, dtype=jnp.float64).reshape(-1)
        if self.rows < 1 or self.cols < 1:
            raise InvalidMatrixShape(f"Matrix must have at least one row and one column, got {self.rows} by {self.cols}")
        if self.data.shape[0] != self.rows * self.cols:
            raise InvalidMatrixShape(
                f"Matrix data has {self.data.shape[0]} entries, expected {self.rows * self.cols} for {self.rows} by {self.cols}"
            )

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> "Matrix":
        if len(rows) == 0:
            raise InvalidMatrixShape("Matrix must have at least one row")
        width = len(rows[0])
        if width == 0:
            raise InvalidMatrixShape("Matrix rows cannot be empty")
        for idx, row in enumerate(rows):
            if len(row) != width:
                raise InvalidMatrixShape(f"Ragged matrix: row {idx} has {len(row)} entries, expected {width}")
        flat = [float(item) for row in rows for item in row]
        return cls(rows=len(rows), cols=width, data=jnp.asarray(flat, dtype=jnp.float64))

    @classmethod
    def from_grid(cls, grid: jax.Array) -> "Matrix":
        rows, cols = grid.shape
        return cls(rows=int(rows), cols=int(cols), data=grid.reshape(-1))

    @classmethod
    def zeros(cls, rows: int, cols: int) -> "Matrix":
        return cls(rows=rows, cols=cols, data=jnp.zeros(rows * cols, dtype=jnp.float64))

    @classmethod
    def identity(cls, n: int) -> "Matrix":
        return cls.from_grid(jnp.eye(n, dtype=jnp.float64))

    @property
    def shape(self) -> tuple[int, int]:
        return (self.rows, self.cols)

    @property
    def grid(self) -> jax.Array:
        """Two-dimensional view of ``data``."""
        return self.data.reshape(self.rows, self.cols)

    def __getitem__(self, index: tuple[int, int]) -> float:
        r, c = index
        if not (0 <= r < self.rows and 0 <= c < self.cols):
            raise IndexError(f"Index ({r}, {c}) out of range for {self.rows} by {self.cols} matrix")
        return float(self.data[r * self.cols + c])

    def tolist(self) -> list[list[float]]:
        return [[float(x) for x in row] for row in self.grid.tolist()]

    def apply(self, fn: UnaryKernel) -> None:
        """Map ``fn`` over every entry, replacing ``data`` in place."""
        self.data = jnp.asarray(fn(self.data), dtype=jnp.float64).reshape(-1)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(jnp.array_equal(self.data, other.data))

    def __repr__(self) -> str:
        return f"Matrix({self.rows}x{self.cols}, {self.tolist()!r})"


def dot(a: Matrix, b: Matrix) -> Matrix:
    if a.cols != b.rows:
        raise DimensionMismatch(op="dot", left=a.shape, right=b.shape)
    return Matrix.from_grid(jnp.matmul(a.grid, b.grid))


def combine(a: Matrix, b: Matrix, fn: BinaryKernel, *, op: str = "combine") -> Matrix:
    if a.shape != b.shape:
        raise DimensionMismatch(op=op, left=a.shape, right=b.shape)
    return Matrix(rows=a.rows, cols=a.cols, data=fn(a.data, b.data))


def transpose(a: Matrix) -> Matrix:
    return Matrix.from_grid(jnp.transpose(a.grid))


def correct(a: Matrix) -> None:
    """Snap near-integer entries and clear negative zeros, in place."""

    def _snap(x: jax.Array) -> jax.Array:
        nearest = jnp.round(x)
        snapped = jnp.where(jnp.abs(x - nearest) <= CORRECTION_TOLERANCE, nearest, x)
        return jnp.where(snapped == 0.0, 0.0, snapped)

    a.apply(_snap)


def _swap_top_row(grid: jax.Array) -> jax.Array:
    # Only rows with a strictly positive leading entry are pivot candidates.
    for r in range(1, grid.shape[0]):
        if float(grid[r, 0]) > 0.0:
            top = grid[0]
            return grid.at[0].set(grid[r]).at[r].set(top)
    return grid


def rref(a: Matrix) -> Matrix:
    grid = jnp.array(a.grid, copy=True)
    if float(grid[0, 0]) == 0.0:
        grid = _swap_top_row(grid)

    rows = a.rows
    for lead in range(min(a.rows, a.cols)):
        div = grid[lead, lead]
        if float(div) == 0.0:
            continue
        for r in range(rows):
            if r == lead:
                grid = grid.at[lead].set(grid[lead] / div)
            else:
                mult = grid[r, lead] / div
                grid = grid.at[r].add(-grid[lead] * mult)
            div = grid[lead, lead]

    reduced = Matrix.from_grid(grid)
    correct(reduced)
    return reduced


def rank(a: Matrix) -> int:
    reduced = rref(a).grid
    # Skipped zero pivots leave rows unreduced, so the count can overshoot; the
    # clamp only keeps it within the shape bound and does not make it exact.
    nonzero_rows = int(jnp.sum(jnp.any(reduced != 0.0, axis=1)))
    return min(nonzero_rows, a.rows, a.cols)


def _minor(a: Matrix, row: int, col: int) -> Matrix:
    grid = jnp.delete(jnp.delete(a.grid, row, axis=0), col, axis=1)
    return Matrix.from_grid(grid)


def cofactor(a: Matrix, row: int, col: int) -> float:
    if a.rows != a.cols:
        raise NotSquare(op="cofactor", rows=a.rows, cols=a.cols)
    if not (0 <= row < a.rows and 0 <= col < a.cols):
        raise IndexError(f"Cofactor index ({row}, {col}) out of range for {a.rows} by {a.cols} matrix")
    minor = 1.0 if a.rows == 1 else det(_minor(a, row, col))
    sign = -1.0 if (row + col) % 2 else 1.0
    return sign * minor


def det(a: Matrix) -> float:
    if a.rows != a.cols:
        raise NotSquare(op="determinant", rows=a.rows, cols=a.cols)
    if a.rows == 1:
        return float(a.data[0])
    if a.rows == 2:
        m = a.grid
        return float(m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0])

    total = 0.0
    for j in range(a.cols):
        total += cofactor(a, _EXPANSION_ROW, j) * a[_EXPANSION_ROW, j]
    return total


def inverse(a: Matrix) -> Matrix:
    d = det(a)
    if d == 0.0:
        raise SingularMatrix()

    cofactors = [[cofactor(a, r, c) for c in range(a.cols)] for r in range(a.rows)]
    inv = transpose(Matrix.from_rows(cofactors))
    inv.apply(lambda x: x / d)
    correct(inv)
    return inv
