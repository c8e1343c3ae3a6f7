# qstate/gates.py
import numpy as np
from .amplitude import DEFAULT_DTYPE, NORM_TOL

_S2 = np.sqrt(0.5)

def I(dtype=DEFAULT_DTYPE) -> np.ndarray:
    return np.eye(2, dtype=dtype)

def X(dtype=DEFAULT_DTYPE) -> np.ndarray:
    return np.array([[0, 1],
                     [1, 0]], dtype=dtype)

def Y(dtype=DEFAULT_DTYPE) -> np.ndarray:
    return np.array([[0, -1j],
                     [1j, 0]], dtype=dtype)

def Z(dtype=DEFAULT_DTYPE) -> np.ndarray:
    return np.array([[1, 0],
                     [0, -1]], dtype=dtype)

def H(dtype=DEFAULT_DTYPE) -> np.ndarray:
    return np.array([[_S2, _S2],
                     [_S2, -_S2]], dtype=dtype)

def S(dtype=DEFAULT_DTYPE) -> np.ndarray:
    return np.array([[1, 0],
                     [0, 1j]], dtype=dtype)

def Sdg(dtype=DEFAULT_DTYPE) -> np.ndarray:
    return np.array([[1, 0],
                     [0, -1j]], dtype=dtype)

def T(dtype=DEFAULT_DTYPE) -> np.ndarray:
    return P(np.pi / 4, dtype=dtype)

def Tdg(dtype=DEFAULT_DTYPE) -> np.ndarray:
    return P(-np.pi / 4, dtype=dtype)

def SX(dtype=DEFAULT_DTYPE) -> np.ndarray:
    # SX @ SX == X
    return 0.5 * np.array([[1+1j, 1-1j],
                           [1-1j, 1+1j]], dtype=dtype)

def SY(dtype=DEFAULT_DTYPE) -> np.ndarray:
    # SY @ SY == Y
    return 0.5 * np.array([[1+1j, -1-1j],
                           [1+1j, 1+1j]], dtype=dtype)

# Rotations (theta in radians)
def RX(theta: float, dtype=DEFAULT_DTYPE) -> np.ndarray:
    c = np.cos(theta/2.0)
    s = -1j*np.sin(theta/2.0)
    return np.array([[c, s],
                     [s, c]], dtype=dtype)

def RY(theta: float, dtype=DEFAULT_DTYPE) -> np.ndarray:
    c = np.cos(theta/2.0)
    s = np.sin(theta/2.0)
    return np.array([[c, -s],
                     [s, c]], dtype=dtype)

def RZ(theta: float, dtype=DEFAULT_DTYPE) -> np.ndarray:
    return np.array([[np.exp(-0.5j*theta), 0],
                     [0, np.exp(+0.5j*theta)]], dtype=dtype)

def P(phi: float, dtype=DEFAULT_DTYPE) -> np.ndarray:
    return np.array([[1, 0],
                     [0, np.exp(1j*phi)]], dtype=dtype)

FIXED = {
    "I": I, "X": X, "Y": Y, "Z": Z, "H": H,
    "S": S, "SDG": Sdg, "T": T, "TDG": Tdg, "SX": SX, "SY": SY,
}

PARAMETERIZED = {"RX": RX, "RY": RY, "RZ": RZ, "P": P}

def is_unitary(U, tol=NORM_TOL) -> bool:
    """True if U^H U == I within tol (elementwise)."""
    U = np.asarray(U)
    if U.ndim != 2 or U.shape[0] != U.shape[1]:
        return False
    return bool(np.allclose(U.conj().T @ U, np.eye(U.shape[0]), atol=tol, rtol=0))
