# qstate/apply_numba.py
import numpy as np
from numba import config, njit, prange, set_num_threads, get_num_threads
from .state import Register

# ---------- low-level kernels (Numba JIT) ----------

@njit(parallel=True, fastmath=True)
def _single_qubit_kernel(psi, U2, k):
    N = psi.shape[0]
    step = 1 << k
    block = step << 1
    nblocks = N // block
    for b in prange(nblocks):
        base = b * block
        for off in range(step):
            i0 = base + off
            i1 = i0 + step
            a0 = psi[i0]
            a1 = psi[i1]
            psi[i0] = U2[0,0]*a0 + U2[0,1]*a1
            psi[i1] = U2[1,0]*a0 + U2[1,1]*a1

@njit(parallel=True, fastmath=True)
def _controlled_kernel(psi, U2, control, target):
    N = psi.shape[0]
    mc = 1 << control
    mt = 1 << target
    for i0 in prange(N):
        if (i0 & mc) != 0 and (i0 & mt) == 0:
            i1 = i0 | mt
            a0 = psi[i0]
            a1 = psi[i1]
            psi[i0] = U2[0,0]*a0 + U2[0,1]*a1
            psi[i1] = U2[1,0]*a0 + U2[1,1]*a1

@njit(parallel=True)
def _masked_swap_kernel(psi, need_set, need_clear, flip):
    # swap i <-> i^flip wherever bits need_set are 1 and bits need_clear are 0
    N = psi.shape[0]
    for i in prange(N):
        if (i & need_set) == need_set and (i & need_clear) == 0:
            j = i ^ flip
            a = psi[i]
            psi[i] = psi[j]
            psi[j] = a

@njit(parallel=True)
def _cz_kernel(psi, mask):
    N = psi.shape[0]
    for i in prange(N):
        if (i & mask) == mask:
            psi[i] = -psi[i]

@njit(parallel=True)
def _cy_kernel(psi, control, target):
    N = psi.shape[0]
    mc = 1 << control
    mt = 1 << target
    for i0 in prange(N):
        if (i0 & mc) != 0 and (i0 & mt) == 0:
            i1 = i0 | mt
            a0 = psi[i0]
            psi[i0] = -1j * psi[i1]
            psi[i1] = 1j * a0

@njit(parallel=True)
def _marginal_kernel(psi, k):
    N = psi.shape[0]
    mk = 1 << k
    p0 = 0.0
    p1 = 0.0
    for i in prange(N):
        w = psi[i].real*psi[i].real + psi[i].imag*psi[i].imag
        if (i & mk) == 0:
            p0 += w
        else:
            p1 += w
    return p0, p1

@njit(parallel=True)
def _collapse_kernel(psi, k, outcome):
    N = psi.shape[0]
    mk = 1 << k
    keep = mk if outcome else 0
    for i in prange(N):
        if (i & mk) != keep:
            psi[i] = 0j

@njit(parallel=True, fastmath=True)
def _damping_kernel(psi, k, keep0, decay, keep1):
    N = psi.shape[0]
    step = 1 << k
    block = step << 1
    nblocks = N // block
    for b in prange(nblocks):
        base = b * block
        for off in range(step):
            i0 = base + off
            i1 = i0 + step
            a1 = psi[i1]
            psi[i0] = keep0*psi[i0] + decay*a1
            psi[i1] = keep1*a1

# ---------- user-facing apply helpers ----------

def set_threads(n: int):
    # numba rejects counts above the pool size
    set_num_threads(max(1, min(int(n), config.NUMBA_NUM_THREADS)))

def get_threads() -> int:
    return get_num_threads()

def apply_single_qubit(state: Register, U2: np.ndarray, k: int):
    _single_qubit_kernel(state.psi, U2.astype(state.dtype), k)

def apply_controlled(state: Register, U2: np.ndarray, control: int, target: int):
    _controlled_kernel(state.psi, U2.astype(state.dtype), control, target)

def apply_cnot(state: Register, control: int, target: int):
    mt = 1 << target
    _masked_swap_kernel(state.psi, 1 << control, mt, mt)

def apply_cz(state: Register, control: int, target: int):
    _cz_kernel(state.psi, (1 << control) | (1 << target))

def apply_cy(state: Register, control: int, target: int):
    _cy_kernel(state.psi, control, target)

def apply_swap(state: Register, q1: int, q2: int):
    m1, m2 = 1 << q1, 1 << q2
    _masked_swap_kernel(state.psi, m1, m2, m1 | m2)

def apply_toffoli(state: Register, c1: int, c2: int, target: int):
    mt = 1 << target
    _masked_swap_kernel(state.psi, (1 << c1) | (1 << c2), mt, mt)

def apply_fredkin(state: Register, control: int, t1: int, t2: int):
    m1, m2 = 1 << t1, 1 << t2
    _masked_swap_kernel(state.psi, (1 << control) | m1, m2, m1 | m2)

def marginal_probs(state: Register, k: int):
    p0, p1 = _marginal_kernel(state.psi, k)
    return float(p0), float(p1)

def collapse(state: Register, k: int, outcome: bool):
    _collapse_kernel(state.psi, k, bool(outcome))

def apply_damping_pair(state: Register, k: int, keep0: float, decay: float, keep1: float):
    _damping_kernel(state.psi, k, float(keep0), float(decay), float(keep1))
