# qstate/apply_serial.py
import numpy as np
from .state import Register

def apply_single_qubit(state: Register, U2: np.ndarray, k: int):
    """Apply 2x2 gate U2 to qubit k (little-endian: bit k)."""
    psi = state.psi
    N = psi.shape[0]
    step = 1 << k
    block = step << 1
    # iterate blocks of size 2^(k+1), update pairs (i0, i1=i0+step)
    for base in range(0, N, block):
        for off in range(step):
            i0 = base + off
            i1 = i0 + step
            a0 = psi[i0]
            a1 = psi[i1]
            psi[i0] = U2[0,0]*a0 + U2[0,1]*a1
            psi[i1] = U2[1,0]*a0 + U2[1,1]*a1

def apply_controlled(state: Register, U2: np.ndarray, control: int, target: int):
    """Apply U2 to target on indices whose control bit is set."""
    psi = state.psi
    mc = 1 << control
    mt = 1 << target
    for i0 in range(psi.shape[0]):
        if (i0 & mc) and not (i0 & mt):
            i1 = i0 | mt
            a0 = psi[i0]
            a1 = psi[i1]
            psi[i0] = U2[0,0]*a0 + U2[0,1]*a1
            psi[i1] = U2[1,0]*a0 + U2[1,1]*a1

def apply_cnot(state: Register, control: int, target: int):
    psi = state.psi
    mc = 1 << control
    mt = 1 << target
    # visit each (c=1,t=0) index once and swap it with its t=1 partner
    for i10 in range(psi.shape[0]):
        if (i10 & mc) and not (i10 & mt):
            i11 = i10 | mt
            psi[i10], psi[i11] = psi[i11], psi[i10]

def apply_cz(state: Register, control: int, target: int):
    psi = state.psi
    mask = (1 << control) | (1 << target)
    for i in range(psi.shape[0]):
        if (i & mask) == mask:
            psi[i] = -psi[i]

def apply_cy(state: Register, control: int, target: int):
    psi = state.psi
    mc = 1 << control
    mt = 1 << target
    for i0 in range(psi.shape[0]):
        if (i0 & mc) and not (i0 & mt):
            i1 = i0 | mt
            a0 = psi[i0]
            psi[i0] = -1j * psi[i1]
            psi[i1] = 1j * a0

def apply_swap(state: Register, q1: int, q2: int):
    psi = state.psi
    m1 = 1 << q1
    m2 = 1 << q2
    for i in range(psi.shape[0]):
        # |..1..0..> <-> |..0..1..>; visit from the q1=1, q2=0 side only
        if (i & m1) and not (i & m2):
            j = i ^ m1 ^ m2
            psi[i], psi[j] = psi[j], psi[i]

def apply_toffoli(state: Register, c1: int, c2: int, target: int):
    psi = state.psi
    mc = (1 << c1) | (1 << c2)
    mt = 1 << target
    for i in range(psi.shape[0]):
        if (i & mc) == mc and not (i & mt):
            j = i | mt
            psi[i], psi[j] = psi[j], psi[i]

def apply_fredkin(state: Register, control: int, t1: int, t2: int):
    psi = state.psi
    mc = 1 << control
    m1 = 1 << t1
    m2 = 1 << t2
    for i in range(psi.shape[0]):
        if (i & mc) and (i & m1) and not (i & m2):
            j = i ^ m1 ^ m2
            psi[i], psi[j] = psi[j], psi[i]

def marginal_probs(state: Register, k: int):
    """Total probability of the branches with bit k clear and with bit k set."""
    psi = state.psi
    mk = 1 << k
    p0 = 0.0
    p1 = 0.0
    for i in range(psi.shape[0]):
        a = psi[i]
        if i & mk:
            p1 += a.real*a.real + a.imag*a.imag
        else:
            p0 += a.real*a.real + a.imag*a.imag
    return float(p0), float(p1)

def collapse(state: Register, k: int, outcome: bool):
    """Zero every amplitude whose bit k disagrees with outcome (no renorm)."""
    psi = state.psi
    mk = 1 << k
    for i in range(psi.shape[0]):
        if bool(i & mk) != outcome:
            psi[i] = 0.0

def apply_damping_pair(state: Register, k: int, keep0: float, decay: float, keep1: float):
    """(a0, a1) -> (keep0*a0 + decay*a1, keep1*a1) over every bit-k pair."""
    psi = state.psi
    N = psi.shape[0]
    step = 1 << k
    block = step << 1
    for base in range(0, N, block):
        for off in range(step):
            i0 = base + off
            i1 = i0 + step
            a1 = psi[i1]
            psi[i0] = keep0*psi[i0] + decay*a1
            psi[i1] = keep1*a1
