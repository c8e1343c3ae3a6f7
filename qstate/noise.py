# qstate/noise.py
"""Stochastic and non-unitary noise channels applied to a Register.

Every probabilistic channel draws from an explicit generator: the ``rng``
argument when given, otherwise the register's own ``rng``. Seeding either
makes a noisy run reproducible.

Channels:
  depolarizing       with prob p apply X, Y or Z (uniformly)
  bit_flip           with prob p apply X
  phase_flip         with prob p apply Z
  amplitude_damping  |1> -> |0> relaxation (T1), deterministic pair update
  phase_damping      with prob gamma apply Z (stochastic T2 dephasing)
  readout_error      flip a classical outcome with prob p
"""
import logging
import math
from dataclasses import dataclass
from typing import Optional
import numpy as np
from . import gates as G
from .amplitude import NORM_TOL
from .state import Register

logger = logging.getLogger(__name__)

_PAULIS = (G.X, G.Y, G.Z)

def _check_prob(p: float, name: str = "p") -> float:
    if not (0.0 <= p <= 1.0):
        raise ValueError(f"{name} must be in [0, 1], got {p}")
    return p

def _source(reg: Register, rng):
    return reg.rng if rng is None else rng

# ---------------------------------------------------------------------
# Pauli channels

def depolarizing(reg: Register, qubit: int, p: float, rng=None) -> Optional[str]:
    """Apply a uniformly chosen Pauli with probability p.

    Returns the name of the applied Pauli, or None when nothing happened.
    """
    _check_prob(p)
    reg.check_qubit(qubit)
    rng = _source(reg, rng)
    if rng.random() < p:
        pauli = _PAULIS[min(2, int(rng.random() * 3))]
        reg.apply_gate(qubit, pauli(dtype=reg.dtype))
        logger.debug("depolarizing q%d: %s", qubit, pauli.__name__)
        return pauli.__name__
    return None

def depolarizing_all(reg: Register, p: float, rng=None):
    """Independent depolarizing channel on every qubit."""
    return [depolarizing(reg, q, p, rng=rng) for q in range(reg.n)]

def bit_flip(reg: Register, qubit: int, p: float, rng=None) -> bool:
    _check_prob(p)
    reg.check_qubit(qubit)
    if _source(reg, rng).random() < p:
        reg.apply_gate(qubit, G.X(dtype=reg.dtype))
        return True
    return False

def phase_flip(reg: Register, qubit: int, p: float, rng=None) -> bool:
    _check_prob(p)
    reg.check_qubit(qubit)
    if _source(reg, rng).random() < p:
        reg.apply_gate(qubit, G.Z(dtype=reg.dtype))
        return True
    return False

# ---------------------------------------------------------------------
# Damping

def amplitude_damping(reg: Register, qubit: int, gamma: float):
    """Energy relaxation of one qubit with damping parameter gamma.

    For every index pair differing only in bit ``qubit`` the 0-branch picks
    up sqrt(gamma) times the 1-branch, and the 1-branch is scaled by
    sqrt(1 - gamma); the vector is then renormalized. gamma=1 leaves no
    weight on the qubit's |1> branch.
    """
    _check_prob(gamma, "gamma")
    reg.check_qubit(qubit)
    kernels = reg.kernels
    before = reg.psi.copy()
    kernels.apply_damping_pair(reg, qubit, 1.0, math.sqrt(gamma), math.sqrt(1.0 - gamma))
    if reg.norm2() < NORM_TOL ** 2:
        # decay term cancelled the 0-branch; keep only the decayed part
        reg.psi[:] = before
        kernels.apply_damping_pair(reg, qubit, 0.0, 1.0, 0.0)
    reg.normalize()
    return reg

def phase_damping(reg: Register, qubit: int, gamma: float, rng=None) -> bool:
    """Dephasing approximated as a Z kick with probability gamma."""
    _check_prob(gamma, "gamma")
    return phase_flip(reg, qubit, gamma, rng=rng)

# ---------------------------------------------------------------------
# Readout and composed gates

def readout_error(result: bool, p: float, rng) -> bool:
    """Flip a classical measurement result with probability p."""
    _check_prob(p)
    if rng.random() < p:
        return not result
    return bool(result)

def noisy_gate(reg: Register, qubit: int, U, error_rate: float, rng=None):
    """Ideal gate followed by depolarizing noise on the same qubit."""
    reg.apply_gate(qubit, U)
    depolarizing(reg, qubit, error_rate, rng=rng)
    return reg

def noisy_cnot(reg: Register, control: int, target: int, error_rate: float, rng=None):
    reg.apply_cnot(control, target)
    depolarizing(reg, control, error_rate, rng=rng)
    depolarizing(reg, target, error_rate, rng=rng)
    return reg

# ---------------------------------------------------------------------
# Hardware parameters

@dataclass(frozen=True)
class NoiseConfig:
    """Error rates and coherence times (microseconds) of a device."""
    single_qubit_error: float = 0.001
    two_qubit_error: float = 0.01
    readout_error: float = 0.01
    t1: float = 100.0
    t2: float = 50.0
    gate_time: float = 0.1

    def amplitude_damping_gamma(self) -> float:
        return 1.0 - math.exp(-self.gate_time / self.t1)

    def phase_damping_gamma(self) -> float:
        return 1.0 - math.exp(-self.gate_time / self.t2)

    @classmethod
    def ibm_quantum(cls) -> "NoiseConfig":
        # approximate 2024 values
        return cls(single_qubit_error=0.0003, two_qubit_error=0.008,
                   readout_error=0.01, t1=150.0, t2=80.0)

    @classmethod
    def google_sycamore(cls) -> "NoiseConfig":
        return cls(single_qubit_error=0.0015, two_qubit_error=0.005,
                   readout_error=0.03, t1=20.0, t2=15.0)

    @classmethod
    def noisy(cls) -> "NoiseConfig":
        """High error rates, for tests."""
        return cls(single_qubit_error=0.05, two_qubit_error=0.10, readout_error=0.05)

    @classmethod
    def ideal(cls) -> "NoiseConfig":
        return cls(single_qubit_error=0.0, two_qubit_error=0.0, readout_error=0.0,
                   t1=math.inf, t2=math.inf)

class NoiseModel:
    """A NoiseConfig bound to a random source.

    With ``rng=None`` every channel falls back to the target register's
    generator.
    """

    def __init__(self, config: NoiseConfig = None, rng=None):
        self.config = NoiseConfig() if config is None else config
        if rng is not None and not hasattr(rng, "random"):
            rng = np.random.default_rng(rng)
        self.rng = rng

    def gate(self, reg: Register, qubit: int, U):
        return noisy_gate(reg, qubit, U, self.config.single_qubit_error, rng=self.rng)

    def cnot(self, reg: Register, control: int, target: int):
        return noisy_cnot(reg, control, target, self.config.two_qubit_error, rng=self.rng)

    def after_multi(self, reg: Register, qubits):
        """Depolarize each qubit touched by a multi-qubit gate."""
        for q in qubits:
            depolarizing(reg, q, self.config.two_qubit_error, rng=self.rng)
        return reg

    def idle(self, reg: Register, qubit: int):
        """One gate time of T1 relaxation and T2 dephasing."""
        amplitude_damping(reg, qubit, self.config.amplitude_damping_gamma())
        phase_damping(reg, qubit, self.config.phase_damping_gamma(), rng=self.rng)
        return reg

    def measure(self, reg: Register, qubit: int) -> bool:
        result = reg.measure(qubit, rng=self.rng)
        return readout_error(result, self.config.readout_error, _source(reg, self.rng))
