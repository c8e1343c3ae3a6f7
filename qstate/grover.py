# qstate/grover.py
"""Grover amplitude amplification on a Register.

    1. |0...0> then H on every qubit (uniform superposition)
    2. repeat k times: oracle (phase flip of the marked indices),
       diffusion (H on all, negate every index but 0, H on all)
    3. measure qubit 0..n-1; bit k of the result is qubit k's outcome

Running past the optimal k rotates the state away from the marked
subspace again, so success probability is not monotonic in k.
"""
import logging
import math
from typing import Callable, Iterable, Optional, Union
import numpy as np
from . import gates as G
from .errors import check_index
from .state import Register

logger = logging.getLogger(__name__)

def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))

def optimal_iterations(n: int, marked: int = 1) -> int:
    """round((pi/4) * sqrt(2**n / marked))"""
    return _round_half_up((math.pi / 4.0) * math.sqrt((1 << n) / marked))

def custom_iterations(n: int, solutions: int) -> int:
    """Iteration count used with a predicate oracle (at least 1)."""
    theta = 2.0 * math.sqrt(solutions / (1 << n))
    return max(1, _round_half_up((math.pi / 4.0) / theta))

def prepare_uniform(n: int, backend: str = "serial", rng=None) -> Register:
    reg = Register.zero(n, backend=backend, rng=rng)
    _hadamard_all(reg)
    return reg

def _hadamard_all(reg: Register):
    h = G.H(dtype=reg.dtype)
    for q in range(reg.n):
        reg.apply_gate(q, h)

def _marked_list(n: int, marked: Union[int, Iterable[int]]):
    if isinstance(marked, (int, np.integer)):
        marked = [marked]
    # each index once, in first-seen order
    return list(dict.fromkeys(check_index(int(m), 1 << n, "target") for m in marked))

def apply_oracle(reg: Register, marked: Union[int, Iterable[int]]):
    """Phase-flip the marked basis index (or indices)."""
    reg.apply_phase_flip(_marked_list(reg.n, marked))
    return reg

def apply_diffusion(reg: Register):
    """Inversion about the mean: H^n (2|0><0| - I) H^n."""
    _hadamard_all(reg)
    reg.apply_phase_flip(range(1, reg.num_states))
    _hadamard_all(reg)
    return reg

def amplify(reg: Register, marked, iterations: int) -> Register:
    for it in range(iterations):
        apply_oracle(reg, marked)
        apply_diffusion(reg)
        if logger.isEnabledFor(logging.DEBUG):
            p = sum(reg.probability(m) for m in _marked_list(reg.n, marked))
            logger.debug("iteration %d: P(marked)=%.4f", it + 1, p)
    return reg

def search(n: int, target: int, iterations: Optional[int] = None,
           rng=None, backend: str = "serial") -> int:
    """Run one Grover search for ``target`` among 2**n items; return the measured index."""
    check_index(target, 1 << n, "target")
    if iterations is None:
        iterations = optimal_iterations(n)
    logger.debug("searching for %d in %d items, %d iterations", target, 1 << n, iterations)
    reg = prepare_uniform(n, backend=backend, rng=rng)
    amplify(reg, target, iterations)
    result = reg.measure_all()
    logger.debug("measured %d (target %d)", result, target)
    return result

def search_custom(n: int, predicate: Callable[[int], bool], iterations: Optional[int] = None,
                  rng=None, backend: str = "serial") -> Optional[int]:
    """Grover search where the oracle marks every index with predicate(i) true.

    Returns None when no index satisfies the predicate.
    """
    solutions = [i for i in range(1 << n) if predicate(i)]
    if not solutions:
        logger.debug("no solutions among %d items", 1 << n)
        return None
    if iterations is None:
        iterations = custom_iterations(n, len(solutions))
    logger.debug("%d solutions out of %d, %d iterations", len(solutions), 1 << n, iterations)
    reg = prepare_uniform(n, backend=backend, rng=rng)
    amplify(reg, solutions, iterations)
    return reg.measure_all()

def success_probability(n: int, marked, iterations: int, backend: str = "serial") -> float:
    """Exact probability of reading a marked index after ``iterations`` rounds."""
    reg = prepare_uniform(n, backend=backend)
    amplify(reg, marked, iterations)
    return float(sum(reg.probability(m) for m in _marked_list(n, marked)))

def benchmark(n: int, target: int, runs: int = 100, iterations: Optional[int] = None,
              rng=None, backend: str = "serial") -> float:
    """Fraction of ``runs`` searches that return ``target``."""
    rng = np.random.default_rng(rng) if not hasattr(rng, "random") else rng
    hits = sum(search(n, target, iterations=iterations, rng=rng, backend=backend) == target
               for _ in range(runs))
    return hits / runs
