# qstate/tests/test_cross_backend.py
import numpy as np
from qstate.circuit import Circuit
from qstate.state import Register
from qstate import gates as G
from qstate import grover, noise

def max_abs_diff(a, b):
    return float(np.max(np.abs(a - b)))

def random_circuit(rng, n, depth):
    c = Circuit.empty(n)
    for _ in range(depth):
        g = int(rng.integers(0, 9))
        q = [int(x) for x in rng.permutation(n)[:3]]
        if g == 0:
            c.h(q[0])
        elif g == 1:
            c.ry(q[0], float(rng.uniform(-np.pi, np.pi)))
        elif g == 2:
            c.t(q[0])
        elif g == 3:
            c.cnot(q[0], q[1])
        elif g == 4:
            c.cz(q[0], q[1])
        elif g == 5:
            c.cy(q[0], q[1])
        elif g == 6:
            c.swap(q[0], q[1])
        elif g == 7:
            c.ccx(q[0], q[1], q[2])
        else:
            c.cswap(q[0], q[1], q[2])
    return c

def test_serial_vs_numba_small():
    # 3-qubit mixed circuit
    c = Circuit.empty(3).h(0).x(1).cnot(1,2).h(2).cnot(0,1).x(2).ccx(0,2,1)
    st_s = c.run(backend="serial").state
    st_n = c.run(backend="numba", num_threads=4).state
    assert max_abs_diff(st_s.as_numpy(), st_n.as_numpy()) < 1e-12

def test_random_circuits_match():
    rng = np.random.default_rng(123)
    n = 4
    for depth in (5, 10, 20):
        c = random_circuit(rng, n, depth)
        s = c.run(backend="serial").state
        t = c.run(backend="numba", num_threads=2).state
        assert np.allclose(s.as_numpy(), t.as_numpy(), atol=1e-12, rtol=0)

def test_controlled_gate_matches():
    a = Register(3, np.arange(8) + 1j, backend="serial").apply_controlled(1, 2, G.RX(0.9))
    b = Register(3, np.arange(8) + 1j, backend="numba").apply_controlled(1, 2, G.RX(0.9))
    assert np.allclose(a.as_numpy(), b.as_numpy(), atol=1e-12, rtol=0)

def test_measurement_matches_with_same_seed():
    for seed in range(5):
        c = Circuit.empty(3).h(0).h(1).cnot(1, 2).measure(0).measure(2).measure(1)
        s = c.run(backend="serial", rng=seed)
        t = c.run(backend="numba", rng=seed)
        assert s.bits == t.bits
        assert np.allclose(s.state.as_numpy(), t.state.as_numpy(), atol=1e-12, rtol=0)

def test_amplitude_damping_matches():
    a = Register(2, np.arange(4) - 1.5j, backend="serial")
    b = Register(2, np.arange(4) - 1.5j, backend="numba")
    noise.amplitude_damping(a, 1, 0.4)
    noise.amplitude_damping(b, 1, 0.4)
    assert np.allclose(a.as_numpy(), b.as_numpy(), atol=1e-12, rtol=0)

def test_grover_on_numba():
    assert grover.success_probability(4, 9, 3, backend="numba") > 0.9
