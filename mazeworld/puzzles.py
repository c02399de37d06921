"""Task puzzle generators.

Every category is a pure function ``(difficulty, rng) -> (question, answer)``
registered in ``GENERATORS``. The tier comes from the task's score reward and
the category is drawn at random from the tier's candidate list:

    easy   (< 20)  calculation
    medium (20-29) calculation, permutation_combination, probability
    hard   (30-49) advanced_math, linear_algebra, geometry,
                   set_theory, group_theory, graph_theory
    expert (>= 50) hard list + probability

Answers are plain strings; ``check_answer`` ignores whitespace and case so
"{1,2}" matches "{ 1, 2 }".

Extension point: add a function to GENERATORS and list it in
CATEGORIES_BY_TIER.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

EASY = "easy"
MEDIUM = "medium"
HARD = "hard"
EXPERT = "expert"

CALCULATION = "calculation"
PERMUTATION_COMBINATION = "permutation_combination"
SET_THEORY = "set_theory"
GROUP_THEORY = "group_theory"
GRAPH_THEORY = "graph_theory"
ADVANCED_MATH = "advanced_math"
PROBABILITY = "probability"
LINEAR_ALGEBRA = "linear_algebra"
GEOMETRY = "geometry"

QA = Tuple[str, str]


@dataclass(frozen=True)
class Puzzle:
    question: str
    answer: str
    category: str
    difficulty: str


def difficulty_for_score(score: int) -> str:
    if score >= 50:
        return EXPERT
    if score >= 30:
        return HARD
    if score >= 20:
        return MEDIUM
    return EASY


def _fmt_set(values: Iterable[int]) -> str:
    return "{ " + ", ".join(str(v) for v in sorted(values)) + " }"


def _calculation(difficulty: str, rng: random.Random) -> QA:
    a = rng.randint(1, 50)
    b = rng.randint(1, 50)
    op = rng.choice("+-*/")
    if op == "+":
        return f"Calculate: {a} + {b} = ?", str(a + b)
    if op == "-":
        return f"Calculate: {a} - {b} = ?", str(a - b)
    if op == "*":
        return f"Calculate: {a} * {b} = ?", str(a * b)
    return f"Calculate: {a * b} ÷ {a} = ?", str(b)


def _permutation_combination(difficulty: str, rng: random.Random) -> QA:
    n = rng.randint(5, 10)
    r = rng.randint(2, n)
    if rng.random() < 0.5:
        q = f"Calculate the number of permutations when selecting {r} items from {n} items."
        return q, str(math.perm(n, r))
    q = f"Calculate the number of combinations when selecting {r} items from {n} items."
    return q, str(math.comb(n, r))


def _set_theory(difficulty: str, rng: random.Random) -> QA:
    universe = list(range(1, 21))
    a = set(rng.sample(universe, rng.randint(5, 10)))
    b = set(rng.sample(universe, rng.randint(5, 10)))
    given = f"Given sets A = {_fmt_set(a)} and B = {_fmt_set(b)}"
    op = rng.choice(["union", "intersection", "difference", "symmetric"])
    if op == "union":
        return f"{given}, find A ∪ B.", _fmt_set(a | b)
    if op == "intersection":
        return f"{given}, find A ∩ B.", _fmt_set(a & b)
    if op == "difference":
        return f"{given}, find A - B.", _fmt_set(a - b)
    return f"{given}, find the symmetric difference A Δ B.", _fmt_set(a ^ b)


def _group_theory(difficulty: str, rng: random.Random) -> QA:
    modulo = rng.choice([5, 7, 9, 11])
    element = rng.randint(1, modulo - 1)
    q = f"In the additive group of integers modulo {modulo}, find the order of the element [{element}]."
    return q, str(modulo // math.gcd(element, modulo))


def _graph_theory(difficulty: str, rng: random.Random) -> QA:
    n = rng.randint(5, 7)
    p = rng.uniform(0.3, 0.7)
    matrix = [[0] * n for _ in range(n)]
    for i in range(n):
        for j in range(i + 1, n):
            if rng.random() < p:
                matrix[i][j] = matrix[j][i] = 1
    lines = ["Given the adjacency matrix of an undirected graph:"]
    lines.extend(" ".join(str(v) for v in row) for row in matrix)
    lines.append("Calculate the degree sequence of the graph (descending).")
    degrees = sorted((sum(row) for row in matrix), reverse=True)
    return "\n".join(lines), ", ".join(str(d) for d in degrees)


def _advanced_math(difficulty: str, rng: random.Random) -> QA:
    if difficulty in (HARD, EXPERT):
        a = rng.randint(1, 5)
        b = rng.randint(6, 10)
        k = rng.randint(1, 5)
        q = f"Calculate the definite integral: ∫ from {a} to {b} of {k}x dx = ?"
        return q, f"{0.5 * k * (b * b - a * a):.2f}"
    base = rng.randint(2, 5)
    exponent = rng.randint(2, 3)
    return f"Calculate: {base}^{exponent} = ?", str(base**exponent)


def _probability(difficulty: str, rng: random.Random) -> QA:
    if difficulty in (EASY, MEDIUM):
        total = rng.randint(6, 10)
        favorable = rng.randint(1, total - 1)
        g = math.gcd(favorable, total)
        q = (
            f"An event has {favorable} favorable outcomes out of {total} possible outcomes. "
            "What is the probability of the event occurring? (Express as a simplified fraction)"
        )
        return q, f"{favorable // g}/{total // g}"
    colors = ["red", "blue", "green", "yellow"]
    total = rng.randint(15, 30)
    counts: Dict[str, int] = {}
    remaining = total
    for idx, color in enumerate(colors):
        if idx == len(colors) - 1:
            counts[color] = remaining
        else:
            # leave at least one ball for each colour still to be filled
            high = remaining - (len(colors) - idx - 1)
            counts[color] = rng.randint(1, high)
            remaining -= counts[color]
    drawn = rng.randint(2, 3)
    chosen = rng.sample(colors, drawn)
    favorable = math.prod(counts[c] for c in chosen)
    outcomes = math.perm(total, drawn)
    g = math.gcd(favorable, outcomes)
    box = ", ".join(f"{counts[c]} {c}" for c in colors)
    q = (
        f"A box contains the following balls: {box}. If {drawn} balls are drawn at random without "
        f"replacement, what is the probability that they come out in the order {' then '.join(chosen)}? "
        "(Express as a simplified fraction)"
    )
    return q, f"{favorable // g}/{outcomes // g}"


def _linear_algebra(difficulty: str, rng: random.Random) -> QA:
    if difficulty == HARD:
        a, b, c, d = (rng.randint(1, 5) for _ in range(4))
        q = f"Calculate the determinant of the matrix:\n| {a} {b} |\n| {c} {d} |"
        return q, str(a * d - b * c)
    if difficulty == EXPERT:
        m = [[rng.randint(1, 5) for _ in range(3)] for _ in range(3)]
        (a, b, c), (d, e, f), (g, h, i) = m
        det = a * (e * i - f * h) - b * (d * i - f * g) + c * (d * h - e * g)
        rows = "\n".join("| " + " ".join(str(v) for v in row) + " |" for row in m)
        return f"Calculate the determinant of the matrix:\n{rows}", str(det)
    a1, b1, a2, b2 = (rng.randint(1, 5) for _ in range(4))
    c1, c2 = rng.randint(1, 20), rng.randint(1, 20)
    q = f"Solve the system of equations:\n{a1}x + {b1}y = {c1}\n{a2}x + {b2}y = {c2}"
    den = a1 * b2 - a2 * b1
    if den == 0:
        return q, "No solution or infinite solutions"
    x = (c1 * b2 - c2 * b1) / den
    y = (a1 * c2 - a2 * c1) / den
    return q, f"x = {x:.2f}, y = {y:.2f}"


def _geometry(difficulty: str, rng: random.Random) -> QA:
    # operands are rounded before use so the shown numbers give the answer
    if difficulty == EASY:
        length = round(rng.uniform(1, 10), 1)
        width = round(rng.uniform(1, 10), 1)
        if rng.random() < 0.5:
            q = f"Calculate the area of a rectangle with length {length:.1f} units and width {width:.1f} units."
            return q, f"{length * width:.2f}"
        q = f"Calculate the perimeter of a rectangle with length {length:.1f} units and width {width:.1f} units."
        return q, f"{2 * (length + width):.2f}"
    if difficulty == MEDIUM:
        radius = round(rng.uniform(1, 10), 1)
        if rng.random() < 0.5:
            q = f"Calculate the area of a circle with radius {radius:.1f} units. (Use π ≈ 3.14)"
            return q, f"{3.14 * radius * radius:.2f}"
        q = f"Calculate the circumference of a circle with radius {radius:.1f} units. (Use π ≈ 3.14)"
        return q, f"{2 * 3.14 * radius:.2f}"
    a = round(rng.uniform(3, 10), 1)
    b = round(rng.uniform(4, 10), 1)
    if rng.random() < 0.5:
        q = f"Calculate the area of a right-angled triangle with legs of lengths {a:.1f} units and {b:.1f} units."
        return q, f"{0.5 * a * b:.2f}"
    q = (
        f"In a right-angled triangle, one leg is {a:.1f} units and the other leg is {b:.1f} units. "
        "Calculate the length of the hypotenuse."
    )
    return q, f"{math.hypot(a, b):.2f}"


GENERATORS: Dict[str, Callable[[str, random.Random], QA]] = {
    CALCULATION: _calculation,
    PERMUTATION_COMBINATION: _permutation_combination,
    SET_THEORY: _set_theory,
    GROUP_THEORY: _group_theory,
    GRAPH_THEORY: _graph_theory,
    ADVANCED_MATH: _advanced_math,
    PROBABILITY: _probability,
    LINEAR_ALGEBRA: _linear_algebra,
    GEOMETRY: _geometry,
}

_HARD_SET = [ADVANCED_MATH, LINEAR_ALGEBRA, GEOMETRY, SET_THEORY, GROUP_THEORY, GRAPH_THEORY]

CATEGORIES_BY_TIER: Dict[str, List[str]] = {
    EASY: [CALCULATION],
    MEDIUM: [CALCULATION, PERMUTATION_COMBINATION, PROBABILITY],
    HARD: _HARD_SET,
    EXPERT: _HARD_SET + [PROBABILITY],
}


def generate(category: str, difficulty: str, seed: Optional[int] = None) -> QA:
    """Run one category generator with a fresh seeded RNG."""
    if category not in GENERATORS:
        raise ValueError(f"unknown puzzle category: {category}")
    if difficulty not in CATEGORIES_BY_TIER:
        raise ValueError(f"unknown difficulty: {difficulty}")
    return GENERATORS[category](difficulty, random.Random(seed))


def generate_puzzle(score: int, rng: Optional[random.Random] = None) -> Puzzle:
    r = rng or random.Random()
    difficulty = difficulty_for_score(score)
    category = r.choice(CATEGORIES_BY_TIER[difficulty])
    question, answer = GENERATORS[category](difficulty, r)
    return Puzzle(question=question, answer=answer, category=category, difficulty=difficulty)


def _normalize(text: str) -> str:
    return "".join(str(text).split()).lower()


def check_answer(expected: str, given: str) -> bool:
    if given is None:
        return False
    return _normalize(expected) == _normalize(given)


__all__ = [
    "Puzzle",
    "GENERATORS",
    "CATEGORIES_BY_TIER",
    "difficulty_for_score",
    "generate",
    "generate_puzzle",
    "check_answer",
]
