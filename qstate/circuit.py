# qstate/circuit.py
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import numpy as np
from .amplitude import DEFAULT_DTYPE, NORM_TOL
from .noise import NoiseModel
from .state import Register
from . import gates as G

Op = Tuple[str, Tuple]  # e.g., ("H",(k,)) or ("CNOT",(c,t)) or ("RZ",(k,theta))

_MULTI = {"CZ": "apply_cz", "CY": "apply_cy", "SWAP": "apply_swap",
          "CCX": "apply_toffoli", "CSWAP": "apply_fredkin"}

@dataclass
class RunResult:
    state: Register
    bits: Dict[int, bool] = field(default_factory=dict)  # qubit -> last outcome

@dataclass
class Circuit:
    n: int
    ops: List[Op]

    @staticmethod
    def empty(n:int) -> "Circuit":
        return Circuit(n, [])

    def _add(self, name, *args):
        self.ops.append((name, args))
        return self

    def h(self, k:int): return self._add("H", k)
    def x(self, k:int): return self._add("X", k)
    def y(self, k:int): return self._add("Y", k)
    def z(self, k:int): return self._add("Z", k)
    def s(self, k:int): return self._add("S", k)
    def sdg(self, k:int): return self._add("SDG", k)
    def t(self, k:int): return self._add("T", k)
    def tdg(self, k:int): return self._add("TDG", k)
    def sx(self, k:int): return self._add("SX", k)
    def rx(self, k:int, theta:float): return self._add("RX", k, theta)
    def ry(self, k:int, theta:float): return self._add("RY", k, theta)
    def rz(self, k:int, theta:float): return self._add("RZ", k, theta)
    def p(self, k:int, phi:float): return self._add("P", k, phi)
    def gate(self, k:int, U): return self._add("U", k, np.asarray(U))
    def cnot(self, c:int, t:int): return self._add("CNOT", c, t)
    def cz(self, c:int, t:int): return self._add("CZ", c, t)
    def cy(self, c:int, t:int): return self._add("CY", c, t)
    def swap(self, a:int, b:int): return self._add("SWAP", a, b)
    def ccx(self, c1:int, c2:int, t:int): return self._add("CCX", c1, c2, t)
    def cswap(self, c:int, a:int, b:int): return self._add("CSWAP", c, a, b)
    def measure(self, k:int): return self._add("MEASURE", k)

    def run(self, backend:str="serial", dtype=DEFAULT_DTYPE, check_norm=True, num_threads=None,
            check_norm_tol=None, rng=None, noise: Optional[NoiseModel]=None,
            initial: Optional[Register]=None) -> RunResult:
        if initial is not None:
            if initial.n != self.n:
                raise ValueError(f"initial register has {initial.n} qubits, circuit needs {self.n}")
            st = Register(self.n, initial.psi.astype(dtype), backend=backend,
                          rng=initial.rng if rng is None else rng)
        else:
            st = Register.zero(self.n, dtype=dtype, backend=backend, rng=rng)

        if backend == "numba" and num_threads is not None:
            st.kernels.set_threads(int(num_threads))

        res = RunResult(st)
        for name, args in self.ops:
            if name in G.FIXED or name in G.PARAMETERIZED or name == "U":
                k = args[0]
                if name in G.FIXED:
                    U = G.FIXED[name](dtype=st.dtype)
                elif name == "U":
                    U = args[1]
                else:
                    U = G.PARAMETERIZED[name](args[1], dtype=st.dtype)
                if noise is not None:
                    noise.gate(st, k, U)
                else:
                    st.apply_gate(k, U)
            elif name == "CNOT":
                c,t = args
                if noise is not None:
                    noise.cnot(st, c, t)
                else:
                    st.apply_cnot(c, t)
            elif name in _MULTI:
                getattr(st, _MULTI[name])(*args)
                if noise is not None:
                    noise.after_multi(st, args)
            elif name == "MEASURE":
                (k,) = args
                res.bits[k] = noise.measure(st, k) if noise is not None else st.measure(k)
            else:
                raise ValueError(f"Unknown gate {name}")

        if check_norm:
            if check_norm_tol is None:
                # single precision cannot hold 1e-10
                check_norm_tol = NORM_TOL if st.dtype == np.complex128 else 1e-5
            st.check_normalized(tol=check_norm_tol)
        return res
