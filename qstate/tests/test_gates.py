# qstate/tests/test_gates.py
import numpy as np
from qstate import gates as G

ANGLES = (0.0, 0.3, np.pi / 2, np.pi, 2.5, -1.7, 2 * np.pi)

def test_fixed_gates_are_unitary():
    for name, make in G.FIXED.items():
        assert G.is_unitary(make()), name

def test_parameterized_gates_are_unitary():
    for name, make in G.PARAMETERIZED.items():
        for theta in ANGLES:
            assert G.is_unitary(make(theta)), (name, theta)

def test_square_roots():
    assert np.allclose(G.SX() @ G.SX(), G.X(), atol=1e-12)
    assert np.allclose(G.SY() @ G.SY(), G.Y(), atol=1e-12)
    assert np.allclose(G.T() @ G.T(), G.S(), atol=1e-12)
    assert np.allclose(G.S() @ G.S(), G.Z(), atol=1e-12)
    assert np.allclose(G.S() @ G.Sdg(), G.I(), atol=1e-12)

def test_rz_equals_phase_up_to_global_phase():
    for theta in ANGLES:
        assert np.allclose(np.exp(0.5j * theta) * G.RZ(theta), G.P(theta), atol=1e-12)

def test_rotation_by_pi_is_pauli_up_to_phase():
    assert np.allclose(G.RX(np.pi), -1j * G.X(), atol=1e-12)
    assert np.allclose(G.RY(np.pi), -1j * G.Y(), atol=1e-12)

def test_non_unitary_rejected():
    assert not G.is_unitary(np.array([[1, 1], [0, 1]]))
    assert not G.is_unitary(np.ones((2, 3)))

def test_gates_are_fresh_values():
    a = G.X()
    a[0, 0] = 5
    assert G.X()[0, 0] == 0

def test_dtype_parameter():
    assert G.H(dtype=np.complex64).dtype == np.complex64
    assert G.RX(0.1).dtype == np.complex128
