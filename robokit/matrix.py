"""Dense-matrix helpers for assembling and inspecting small matrices."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

_MISSING = object()


def _as_2d(value) -> np.ndarray:
    """Return ``value`` as a 2-D float array; 1-D input becomes a column."""
    arr = np.asarray(value, dtype=float)
    if arr.ndim == 0:
        return arr.reshape(1, 1)
    if arr.ndim == 1:
        return arr.reshape(-1, 1)
    if arr.ndim > 2:
        raise ValueError(f"expected at most 2 dimensions, got {arr.ndim}")
    return arr


def hstack(*args) -> np.ndarray:
    """Place blocks side by side; all blocks must have the same row count."""
    if not args:
        raise ValueError("hstack needs at least one block")
    blocks = [_as_2d(a) for a in args]
    rows = {b.shape[0] for b in blocks}
    if len(rows) > 1:
        raise ValueError(f"blocks have differing row counts: {sorted(rows)}")
    return np.hstack(blocks)


def vstack(*args) -> np.ndarray:
    """Place blocks on top of each other; all blocks must have the same column count."""
    if not args:
        raise ValueError("vstack needs at least one block")
    blocks = [_as_2d(a) for a in args]
    cols = {b.shape[1] for b in blocks}
    if len(cols) > 1:
        raise ValueError(f"blocks have differing column counts: {sorted(cols)}")
    return np.vstack(blocks)


def block(rows: Sequence[Sequence]) -> np.ndarray:
    """Assemble a matrix from a sequence of block rows."""
    if not rows:
        raise ValueError("block needs at least one row")
    return vstack(*(hstack(*row) for row in rows))


def block_diag(*args) -> np.ndarray:
    """Place blocks along the diagonal of an otherwise zero matrix."""
    if not args:
        raise ValueError("block_diag needs at least one block")
    blocks = [_as_2d(a) for a in args]
    total_rows = sum(b.shape[0] for b in blocks)
    total_cols = sum(b.shape[1] for b in blocks)
    out = np.zeros((total_rows, total_cols))
    r = c = 0
    for b in blocks:
        out[r:r + b.shape[0], c:c + b.shape[1]] = b
        r += b.shape[0]
        c += b.shape[1]
    return out


def diag(*args) -> np.ndarray:
    """Square matrix with the given values on its diagonal."""
    return np.diag(np.array(args, dtype=float))


def eye(size: int, off_diag: int = 0) -> np.ndarray:
    """Identity-like matrix with ones on the diagonal shifted by ``off_diag``.

    A positive offset moves the ones above the main diagonal, a negative one below.
    """
    if size < 0:
        raise ValueError("size must not be negative")
    return np.eye(size, k=off_diag)


def dot(mat, vec) -> np.ndarray:
    """Multiply ``mat`` by ``vec``, keeping the shape of ``vec``."""
    m = np.asarray(mat, dtype=float)
    v = np.asarray(vec, dtype=float)
    flat = v.reshape(-1)
    if m.ndim != 2 or m.shape[1] != flat.size or m.shape[0] < flat.size:
        raise ValueError(f"cannot multiply matrix of shape {m.shape} with vector of size {flat.size}")
    return (m[:flat.size] @ flat).reshape(v.shape)


def kron(a, b) -> np.ndarray:
    """Kronecker product of two matrices."""
    return np.kron(_as_2d(a), _as_2d(b))


def zeros(rows: int, cols: int | None = None) -> np.ndarray:
    """Zero matrix; with a single argument, a row vector of that length."""
    shape = (1, rows) if cols is None else (rows, cols)
    return np.zeros(shape)


def ones(rows: int, cols: int | None = None) -> np.ndarray:
    """Matrix of ones; with a single argument, a row vector of that length."""
    shape = (1, rows) if cols is None else (rows, cols)
    return np.ones(shape)


def join(*args) -> str:
    """Concatenate the string forms of all arguments."""
    return "".join(str(a) for a in args)


def disp(*args) -> None:
    """Print arguments two per line, separated by a comma."""
    it = iter(args)
    for first in it:
        second = next(it, _MISSING)
        if second is _MISSING:
            print(first)
        else:
            print(f"{first}, {second}")


def hypot(x: float, y: float) -> float:
    """Euclidean length of ``(x, y)``."""
    return math.sqrt(x * x + y * y)


def get_diagonal(matrix, index: int) -> float:
    """Return the ``index``-th element of the main diagonal."""
    if index < 0:
        raise IndexError("diagonal index must not be negative")
    return float(np.diagonal(np.asarray(matrix, dtype=float))[index])