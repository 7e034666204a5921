"""Small dense matrix helpers for the Savitzky–Golay kernel fit.

Matrices are plain row-major ``list[list[float]]``; the systems solved here
are at most a handful of rows, so nothing heavier is warranted.
"""

from __future__ import annotations

from trackmap.errors import DataError

Matrix = list[list[float]]

_SINGULAR_EPS = 1e-12


def transpose(matrix: Matrix) -> Matrix:
    if not matrix:
        return []
    rows, cols = len(matrix), len(matrix[0])
    return [[matrix[i][j] for i in range(rows)] for j in range(cols)]


def matmul(a: Matrix, b: Matrix) -> Matrix:
    """Product ``a @ b``.

    Raises:
        ValueError: If the inner dimensions disagree.
    """
    inner = len(b)
    if a and len(a[0]) != inner:
        raise ValueError(f"Cannot multiply {len(a)}x{len(a[0])} by {inner}x{len(b[0]) if b else 0}")
    cols = len(b[0]) if b else 0
    result = [[0.0] * cols for _ in a]
    for i, row in enumerate(a):
        out = result[i]
        for k in range(inner):
            factor = row[k]
            if factor == 0.0:
                continue
            b_row = b[k]
            for j in range(cols):
                out[j] += factor * b_row[j]
    return result


def invert(matrix: Matrix) -> Matrix:
    """Inverse of a square matrix by Gauss–Jordan elimination.

    Each column pivots on the remaining row with the largest absolute value.

    Raises:
        DataError: If the matrix is singular.
    """
    n = len(matrix)
    augmented = [
        list(row) + [1.0 if j == i else 0.0 for j in range(n)]
        for i, row in enumerate(matrix)
    ]

    for col in range(n):
        pivot_row = max(range(col, n), key=lambda r: abs(augmented[r][col]))
        if abs(augmented[pivot_row][col]) < _SINGULAR_EPS:
            raise DataError("Matrix is singular and cannot be inverted.")
        if pivot_row != col:
            augmented[col], augmented[pivot_row] = augmented[pivot_row], augmented[col]

        pivot_inv = 1.0 / augmented[col][col]
        augmented[col] = [v * pivot_inv for v in augmented[col]]
        pivot = augmented[col]
        for r in range(n):
            if r == col:
                continue
            factor = augmented[r][col]
            if factor != 0.0:
                augmented[r] = [v - factor * p for v, p in zip(augmented[r], pivot)]

    return [row[n:] for row in augmented]
