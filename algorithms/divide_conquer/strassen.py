"""
strassen.py — Strassen Matrix Multiplication
==============================================
Multiplies two n×n matrices (n a power of two) with seven recursive
products per level instead of eight.

Inputs:
  • a flat list of numbers: size = max(2, 2^⌊log2(√len)⌋); A is filled
    row-major from the list (padded from the rng when short) and B is
    drawn from the rng, or
  • an explicit pair via `generate_matrices(a, b)`.

The recursion tree has one "product" child per P1 … P7 and a merge
pseudo-node at level + 0.5 where the quadrants of C are assembled.

The stage table walks one level: split, the seven products (computed
here by plain row × column multiplication), the four quadrant sums, and
the assembled result.
"""

import math
import random
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from algorithms.base import AlgorithmKind
from algorithms.divide_conquer.base import DivideConquerAlgorithm, Stage, require_values
from algorithms.divide_conquer.tree import ROOT_ID
from algorithms.errors import ConfigurationError
from algorithms.step import Matrix, MatrixState, Number, Trace

Grid = List[List[Number]]

PSEUDOCODE: List[str] = [
    "def strassen(A, B):",                                 # 0
    "    if n == 1: return A · B",                         # 1
    "    split A and B into four n/2 × n/2 quadrants",     # 2
    "    P1 ← strassen(A11 + A22, B11 + B22)",             # 3
    "    P2 ← strassen(A21 + A22, B11)",                   # 4
    "    P3 ← strassen(A11, B12 − B22)",                   # 5
    "    P4 ← strassen(A22, B21 − B11)",                   # 6
    "    P5 ← strassen(A11 + A12, B22)",                   # 7
    "    P6 ← strassen(A21 − A11, B11 + B12)",             # 8
    "    P7 ← strassen(A12 − A22, B21 + B22)",             # 9
    "    C11 ← P1 + P4 − P5 + P7;  C12 ← P3 + P5",         # 10
    "    C21 ← P2 + P4;  C22 ← P1 − P2 + P3 + P6",         # 11
    "    return [[C11, C12], [C21, C22]]",                 # 12
]

PRODUCT_FORMULAS = (
    "(A11 + A22) × (B11 + B22)",
    "(A21 + A22) × B11",
    "A11 × (B12 − B22)",
    "A22 × (B21 − B11)",
    "(A11 + A12) × B22",
    "(A21 − A11) × (B11 + B12)",
    "(A12 − A22) × (B21 + B22)",
)


# ---------------------------------------------------------------------------
# Matrix helpers
# ---------------------------------------------------------------------------
def mat_add(x: Sequence[Sequence[Number]], y: Sequence[Sequence[Number]]) -> Grid:
    return [[a + b for a, b in zip(rx, ry)] for rx, ry in zip(x, y)]


def mat_sub(x: Sequence[Sequence[Number]], y: Sequence[Sequence[Number]]) -> Grid:
    return [[a - b for a, b in zip(rx, ry)] for rx, ry in zip(x, y)]


def naive_multiply(x: Sequence[Sequence[Number]], y: Sequence[Sequence[Number]]) -> Grid:
    n = len(x)
    return [[sum(x[i][k] * y[k][j] for k in range(n)) for j in range(n)] for i in range(n)]


def split(m: Sequence[Sequence[Number]]) -> Tuple[Grid, Grid, Grid, Grid]:
    h = len(m) // 2
    return (
        [list(r[:h]) for r in m[:h]],
        [list(r[h:]) for r in m[:h]],
        [list(r[:h]) for r in m[h:]],
        [list(r[h:]) for r in m[h:]],
    )


def join(c11: Grid, c12: Grid, c21: Grid, c22: Grid) -> Grid:
    top = [l + r for l, r in zip(c11, c12)]
    bottom = [l + r for l, r in zip(c21, c22)]
    return top + bottom


def operands(a: Sequence[Sequence[Number]], b: Sequence[Sequence[Number]]) -> List[Tuple[Grid, Grid]]:
    a11, a12, a21, a22 = split(a)
    b11, b12, b21, b22 = split(b)
    return [
        (mat_add(a11, a22), mat_add(b11, b22)),
        (mat_add(a21, a22), b11),
        (a11, mat_sub(b12, b22)),
        (a22, mat_sub(b21, b11)),
        (mat_add(a11, a12), b22),
        (mat_sub(a21, a11), mat_add(b11, b12)),
        (mat_sub(a12, a22), mat_add(b21, b22)),
    ]


def quadrants_from_products(p: Sequence[Grid]) -> Tuple[Grid, Grid, Grid, Grid]:
    p1, p2, p3, p4, p5, p6, p7 = p
    c11 = mat_add(mat_sub(mat_add(p1, p4), p5), p7)
    c12 = mat_add(p3, p5)
    c21 = mat_add(p2, p4)
    c22 = mat_add(mat_add(mat_sub(p1, p2), p3), p6)
    return c11, c12, c21, c22


def flatten(m: Sequence[Sequence[Number]]) -> List[Number]:
    return [v for row in m for v in row]


def as_matrix(m: Sequence[Sequence[Number]]) -> Matrix:
    return tuple(tuple(r) for r in m)


def validate_matrix(m: Any, name: str) -> Grid:
    if not isinstance(m, (list, tuple)) or not m:
        raise ConfigurationError(f"{name} must be a non-empty list of rows", field=name)
    n = len(m)
    rows: Grid = []
    for row in m:
        if not isinstance(row, (list, tuple)) or len(row) != n:
            raise ConfigurationError(f"{name} must be square ({n}×{n})", field=name)
        for v in row:
            if isinstance(v, bool) or not isinstance(v, (int, float)):
                raise ConfigurationError(f"{name} must contain numbers, got {v!r}", field=name)
        rows.append(list(row))
    if n & (n - 1):
        raise ConfigurationError(f"{name} dimension must be a power of two, got {n}", field=name)
    return rows


def matrix_size(count: int) -> int:
    return max(2, 2 ** int(math.log2(math.sqrt(count))))


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------
class Strassen(DivideConquerAlgorithm):
    kind       = AlgorithmKind.STRASSEN
    label      = "Strassen Matrix Multiplication"
    pseudocode = PSEUDOCODE

    def prepare(self, values, rng, a=None, b=None) -> MatrixState:
        if a is not None or b is not None:
            left = validate_matrix(a, "a")
            right = validate_matrix(b, "b")
            if len(left) != len(right):
                raise ConfigurationError(
                    f"a and b must be the same size, got {len(left)} and {len(right)}", field="b"
                )
        else:
            items = require_values(values)
            n = matrix_size(len(items))
            flat = items[:n * n]
            flat += [rng.randint(0, 9) for _ in range(n * n - len(flat))]
            left = [flat[i * n:(i + 1) * n] for i in range(n)]
            right = [[rng.randint(0, 9) for _ in range(n)] for _ in range(n)]
        return MatrixState(
            a=as_matrix(left),
            b=as_matrix(right),
            quadrant_size=len(left) // 2,
        )

    def generate_matrices(self, a, b, rng: Optional[random.Random] = None) -> Trace:
        return self.generate(rng=rng, a=a, b=b)

    # ------------------------------------------------------------------
    # Ground truth
    # ------------------------------------------------------------------
    def solve(self, initial, tree, stats) -> Matrix:
        tree.root(flatten(initial.a))

        def multiply(x: Grid, y: Grid, call_id: str, level: float) -> Grid:
            stats.explore()
            n = len(x)
            if n == 1:
                product = [[x[0][0] * y[0][0]]]
            else:
                h = n // 2
                products = []
                for i, (px, py) in enumerate(operands(x, y), 1):
                    child = f"{call_id}-p{i}"
                    tree.add(child, call_id, level + 1, 0, h * h - 1, flatten(px), role="product")
                    products.append(multiply(px, py, child, level + 1))
                product = join(*quadrants_from_products(products))
                tree.add(
                    f"{call_id}-merge", call_id, level + 0.5,
                    0, n * n - 1, flatten(product), role="merge",
                )
                tree.set_result(f"{call_id}-merge", result=flatten(product))
            tree.set_result(call_id, result=flatten(product))
            return product

        return as_matrix(multiply([list(r) for r in initial.a], [list(r) for r in initial.b], ROOT_ID, 0))

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------
    def derive(self, initial: MatrixState) -> Iterator[Stage]:
        a, b = initial.a, initial.b
        n = len(a)
        h = n // 2

        def state(description: str, **kwargs) -> MatrixState:
            return MatrixState(a=a, b=b, description=description, quadrant_size=h, **kwargs)

        yield Stage(state(f"Multiply A × B ({n}×{n}) using Strassen's method."), (0,))
        if n == 1:
            product = as_matrix(naive_multiply(a, b))
            yield Stage(state("1×1 matrices: C = A · B.", result=product), (1,))
            return

        yield Stage(state(f"Split A and B into four {h}×{h} quadrants."), (2,))

        computed: List[Tuple[str, Matrix]] = []
        for i, ((px, py), formula) in enumerate(zip(operands(a, b), PRODUCT_FORMULAS), 1):
            name = f"P{i}"
            computed.append((name, as_matrix(naive_multiply(px, py))))
            yield Stage(
                state(f"{name} = {formula}", products=tuple(computed), active=name),
                (2 + i,),
            )

        c = quadrants_from_products([[list(r) for r in m] for _, m in computed])
        labels = (
            ("C11", "C11 = P1 + P4 − P5 + P7", (10,)),
            ("C12", "C12 = P3 + P5", (10,)),
            ("C21", "C21 = P2 + P4", (11,)),
            ("C22", "C22 = P1 − P2 + P3 + P6", (11,)),
        )
        for (label, text, lines), block in zip(labels, c):
            yield Stage(
                state(f"{text} = {[list(r) for r in block]}", products=tuple(computed), active=label),
                lines,
            )

        result = as_matrix(join(*c))
        yield Stage(
            state("Combined the quadrants: C = A × B.", products=tuple(computed), result=result),
            (12,),
        )

    def reconcile(self, result, final) -> bool:
        return final.result == result
