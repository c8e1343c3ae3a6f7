# qstate/state.py
import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Iterable, Optional
from .amplitude import DEFAULT_DTYPE, DISPLAY_THRESHOLD, NORM_TOL, format_amplitude
from .errors import InvalidLengthError, InvalidStateError, check_index

logger = logging.getLogger(__name__)

BACKENDS = ("serial", "numba")

def load_backend(name: str):
    """Return the kernel module for a backend name."""
    if name == "serial":
        from . import apply_serial
        return apply_serial
    if name == "numba":
        try:
            from . import apply_numba
        except ImportError as e:
            raise RuntimeError("Numba backend not available. Did you `pip install numba`?") from e
        return apply_numba
    raise NotImplementedError(f"Unknown backend: {name}")

@dataclass(eq=False)
class Register:
    """State vector of n qubits: 2**n amplitudes, bit k of an index is qubit k.

    The vector is normalized on construction and after every measurement.
    Gates go through the kernels of ``backend`` ("serial" or "numba") and
    measurement draws from ``rng`` unless a generator is passed explicitly.
    """
    n: int
    psi: np.ndarray  # shape (2**n,), dtype complex64/128
    backend: str = "serial"
    rng: Optional[np.random.Generator] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if self.n < 1:
            raise ValueError(f"register needs at least one qubit, got n={self.n}")
        psi = np.asarray(self.psi)
        if not np.iscomplexobj(psi):
            psi = psi.astype(DEFAULT_DTYPE)
        psi = np.array(psi, copy=True).reshape(-1)
        if psi.shape[0] != 1 << self.n:
            raise InvalidLengthError(
                f"expected {1 << self.n} amplitudes for n={self.n}, got {psi.shape[0]}")
        self.psi = psi
        if not hasattr(self.rng, "random"):
            # None, a seed or a SeedSequence
            self.rng = np.random.default_rng(self.rng)
        self.kernels = load_backend(self.backend)
        self.normalize()

    # ---------- factories ----------

    @staticmethod
    def zero(n: int, dtype=DEFAULT_DTYPE, backend: str = "serial", rng=None) -> "Register":
        return Register.basis(n, 0, dtype=dtype, backend=backend, rng=rng)

    @staticmethod
    def basis(n: int, index: int, dtype=DEFAULT_DTYPE, backend: str = "serial", rng=None) -> "Register":
        check_index(index, 1 << n, "basis")
        psi = np.zeros(1 << n, dtype=dtype)
        psi[index] = 1.0 + 0.0j
        return Register(n=n, psi=psi, backend=backend, rng=rng)

    @staticmethod
    def from_qubits(qubits, dtype=DEFAULT_DTYPE, backend: str = "serial", rng=None) -> "Register":
        """Product state; qubits[k] becomes qubit k (bit k of the index)."""
        psi = np.ones(1, dtype=dtype)
        for q in qubits:
            # higher qubits are more significant, so they go on the left
            psi = np.kron(np.array([q.alpha, q.beta], dtype=dtype), psi)
        return Register(n=len(qubits), psi=psi, backend=backend, rng=rng)

    # ---------- queries ----------

    @property
    def dtype(self):
        return self.psi.dtype

    @property
    def num_states(self) -> int:
        return self.psi.shape[0]

    @property
    def amplitudes(self) -> np.ndarray:
        """Read-only view of the state vector."""
        view = self.psi.view()
        view.flags.writeable = False
        return view

    def as_numpy(self) -> np.ndarray:
        return self.amplitudes

    def probability(self, index: int) -> float:
        check_index(index, self.num_states, "basis")
        a = self.psi[index]
        return float(a.real * a.real + a.imag * a.imag)

    def probabilities(self) -> np.ndarray:
        return np.abs(self.psi) ** 2

    def norm2(self) -> float:
        return float(np.vdot(self.psi, self.psi).real)

    def check_normalized(self, tol=NORM_TOL):
        n2 = self.norm2()
        if not (abs(1.0 - n2) <= tol):
            raise AssertionError(f"Normalization failed: ||psi||^2={n2}")

    def normalize(self):
        n2 = self.norm2()
        if n2 == 0.0:
            raise InvalidStateError("state vector has zero norm")
        self.psi /= np.sqrt(n2)
        return self

    def copy(self) -> "Register":
        return Register(self.n, self.psi.copy(), backend=self.backend, rng=self.rng)

    def check_qubit(self, k: int) -> int:
        return check_index(k, self.n, "qubit")

    def _distinct(self, *qubits):
        for q in qubits:
            self.check_qubit(q)
        if len(set(qubits)) != len(qubits):
            raise ValueError(f"qubits must differ, got {qubits}")

    # ---------- gates ----------

    def apply_gate(self, target: int, U):
        """Apply 2x2 gate U to qubit ``target``."""
        self.check_qubit(target)
        U2 = np.asarray(U, dtype=self.dtype)
        if U2.shape != (2, 2):
            raise ValueError(f"gate must be 2x2, got shape {U2.shape}")
        self.kernels.apply_single_qubit(self, U2, target)
        return self

    def apply_controlled(self, control: int, target: int, U):
        """Apply U to ``target`` on the branch where ``control`` is 1."""
        self._distinct(control, target)
        U2 = np.asarray(U, dtype=self.dtype)
        if U2.shape != (2, 2):
            raise ValueError(f"gate must be 2x2, got shape {U2.shape}")
        self.kernels.apply_controlled(self, U2, control, target)
        return self

    def apply_cnot(self, control: int, target: int):
        self._distinct(control, target)
        self.kernels.apply_cnot(self, control, target)
        return self

    def apply_cz(self, control: int, target: int):
        self._distinct(control, target)
        self.kernels.apply_cz(self, control, target)
        return self

    def apply_cy(self, control: int, target: int):
        self._distinct(control, target)
        self.kernels.apply_cy(self, control, target)
        return self

    def apply_swap(self, q1: int, q2: int):
        self._distinct(q1, q2)
        self.kernels.apply_swap(self, q1, q2)
        return self

    def apply_toffoli(self, c1: int, c2: int, target: int):
        self._distinct(c1, c2, target)
        self.kernels.apply_toffoli(self, c1, c2, target)
        return self

    def apply_fredkin(self, control: int, t1: int, t2: int):
        self._distinct(control, t1, t2)
        self.kernels.apply_fredkin(self, control, t1, t2)
        return self

    def apply_phase_flip(self, indices: Iterable[int]):
        """Negate the amplitude of every listed basis index.

        An index listed more than once is still negated once.
        """
        idx = np.fromiter((check_index(int(i), self.num_states, "basis") for i in indices),
                          dtype=np.int64)
        self.psi[np.unique(idx)] *= -1
        return self

    # ---------- measurement ----------

    def measure(self, qubit: int, rng=None) -> bool:
        """Projective Z measurement of one qubit; collapses and renormalizes."""
        self.check_qubit(qubit)
        rng = self.rng if rng is None else rng
        p0, p1 = self.kernels.marginal_probs(self, qubit)
        outcome = bool(rng.random() >= p0)
        if outcome and p1 == 0.0:
            # rounding put u above a p0 that is really 1
            outcome = False
        self.kernels.collapse(self, qubit, outcome)
        self.normalize()
        logger.debug("measure q%d: p0=%.6f -> %d", qubit, p0, outcome)
        return outcome

    def measure_all(self, rng=None) -> int:
        result = 0
        for k in range(self.n):
            if self.measure(k, rng=rng):
                result |= 1 << k
        return result

    # ---------- display ----------

    def basis_states(self, threshold=DISPLAY_THRESHOLD):
        for i in range(self.num_states):
            p = self.probability(i)
            if p > threshold:
                yield i, complex(self.psi[i]), p

    def format(self, threshold=DISPLAY_THRESHOLD) -> str:
        lines = ["State vector:"]
        for i, amp, p in self.basis_states(threshold):
            lines.append(f"  |{i:0{self.n}b}> -> {format_amplitude(amp)}  (P={p:.6f})")
        return "\n".join(lines)

    def __str__(self):
        return self.format()
