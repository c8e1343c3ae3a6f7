# qstate/qubit.py
import cmath
import math
from dataclasses import dataclass
from .amplitude import abs_sq, format_amplitude
from .errors import InvalidStateError

_S2 = math.sqrt(0.5)
_T_PHASE = cmath.exp(0.25j * math.pi)

@dataclass
class Qubit:
    """Single qubit alpha|0> + beta|1>, normalized on construction.

    Gates update the two amplitudes in place with closed-form expressions
    and return self so calls can be chained.
    """
    alpha: complex
    beta: complex

    def __post_init__(self):
        a, b = complex(self.alpha), complex(self.beta)
        n = math.sqrt(abs_sq(a) + abs_sq(b))
        if n == 0.0:
            raise InvalidStateError("Zero state: |alpha|^2 + |beta|^2 == 0")
        self.alpha = a / n
        self.beta = b / n

    def prob0(self) -> float:
        return abs_sq(self.alpha)

    def prob1(self) -> float:
        return abs_sq(self.beta)

    # Pauli
    def apply_x(self):
        self.alpha, self.beta = self.beta, self.alpha
        return self

    def apply_y(self):
        self.alpha, self.beta = -1j * self.beta, 1j * self.alpha
        return self

    def apply_z(self):
        self.beta = -self.beta
        return self

    def apply_h(self):
        a, b = self.alpha, self.beta
        self.alpha = (a + b) * _S2
        self.beta = (a - b) * _S2
        return self

    # Phase
    def apply_s(self):
        self.beta *= 1j
        return self

    def apply_sdg(self):
        self.beta *= -1j
        return self

    def apply_t(self):
        self.beta *= _T_PHASE
        return self

    def apply_tdg(self):
        self.beta *= _T_PHASE.conjugate()
        return self

    def apply_p(self, phi: float):
        self.beta *= cmath.exp(1j * phi)
        return self

    # Rotations (radians)
    def apply_rx(self, theta: float):
        a, b = self.alpha, self.beta
        c, s = math.cos(theta / 2.0), math.sin(theta / 2.0)
        self.alpha = c * a - 1j * s * b
        self.beta = -1j * s * a + c * b
        return self

    def apply_ry(self, theta: float):
        a, b = self.alpha, self.beta
        c, s = math.cos(theta / 2.0), math.sin(theta / 2.0)
        self.alpha = c * a - s * b
        self.beta = s * a + c * b
        return self

    def apply_rz(self, theta: float):
        self.alpha *= cmath.exp(-0.5j * theta)
        self.beta *= cmath.exp(0.5j * theta)
        return self

    def apply_gate(self, U):
        """Apply an arbitrary 2x2 matrix (nested sequence or ndarray)."""
        if len(U) != 2 or len(U[0]) != 2 or len(U[1]) != 2:
            raise ValueError("gate must be a 2x2 matrix")
        a, b = self.alpha, self.beta
        self.alpha = complex(U[0][0]) * a + complex(U[0][1]) * b
        self.beta = complex(U[1][0]) * a + complex(U[1][1]) * b
        return self

    def copy(self) -> "Qubit":
        return Qubit(self.alpha, self.beta)

    def as_tuple(self):
        return (self.alpha, self.beta)

    def __str__(self):
        return (f"|psi> = ({format_amplitude(self.alpha)})|0> + "
                f"({format_amplitude(self.beta)})|1>   "
                f"(P0={self.prob0():.6f}, P1={self.prob1():.6f})")
