# qstate/tests/test_noise.py
import dataclasses
import math
import numpy as np
import pytest
from qstate import noise
from qstate.noise import NoiseConfig, NoiseModel
from qstate.state import Register
from qstate import gates as G

TOL = 1e-10

class FixedRng:
    """Random source that only offers preset uniforms through random()."""
    def __init__(self, values):
        self.values = list(values)

    def random(self):
        return self.values.pop(0)

def almost(p, q, tol=TOL):
    return np.allclose(p, q, atol=tol, rtol=0)

def random_register(n, seed):
    rng = np.random.default_rng(seed)
    return Register(n, rng.normal(size=1 << n) + 1j * rng.normal(size=1 << n), rng=seed)

def test_depolarizing_picks_each_pauli():
    reg = Register.zero(1)
    assert noise.depolarizing(reg, 0, 0.5, rng=FixedRng([0.1, 0.0])) == "X"
    assert almost(reg.probability(1), 1.0)

    reg = Register.zero(1)
    assert noise.depolarizing(reg, 0, 0.5, rng=FixedRng([0.1, 0.5])) == "Y"
    assert almost(reg.as_numpy(), [0, 1j])

    reg = Register(1, [1, 1])
    assert noise.depolarizing(reg, 0, 0.5, rng=FixedRng([0.1, 0.9])) == "Z"
    assert almost(reg.as_numpy() * np.sqrt(2), [1, -1])

def test_depolarizing_no_error_branch():
    reg = Register.zero(1)
    assert noise.depolarizing(reg, 0, 0.5, rng=FixedRng([0.9])) is None
    assert almost(reg.probability(0), 1.0)
    for _ in range(50):
        assert noise.depolarizing(reg, 0, 0.0) is None

def test_depolarizing_all_hits_every_qubit():
    reg = random_register(3, 1)
    applied = noise.depolarizing_all(reg, 1.0, rng=np.random.default_rng(3))
    assert len(applied) == 3 and None not in applied
    reg.check_normalized(TOL)

class UniformOnly:
    """Seeded source exposing nothing but random()."""
    def __init__(self, seed):
        self._gen = np.random.default_rng(seed)

    def random(self):
        return self._gen.random()

def test_register_source_with_only_random():
    reg = Register.zero(2, rng=UniformOnly(5))
    assert reg.rng.__class__ is UniformOnly
    reg.measure(0)
    assert noise.depolarizing(reg, 0, 1.0) in ("X", "Y", "Z")
    model = NoiseModel(NoiseConfig.noisy())
    model.gate(reg, 1, G.H())
    model.cnot(reg, 0, 1)
    model.idle(reg, 0)
    model.measure(reg, 1)
    reg.check_normalized(TOL)

def test_depolarizing_flip_rate():
    # X or Y flips |0>; each chosen with prob p/3
    rng = np.random.default_rng(99)
    flips = 0
    for _ in range(3000):
        reg = Register.zero(1)
        noise.depolarizing(reg, 0, 0.3, rng=rng)
        flips += reg.probability(1) > 0.5
    assert abs(flips / 3000 - 0.2) < 0.03

def test_bit_and_phase_flip():
    reg = Register.zero(2)
    assert noise.bit_flip(reg, 1, 1.0)
    assert almost(reg.probability(2), 1.0)
    assert not noise.bit_flip(reg, 1, 0.3, rng=FixedRng([0.5]))

    reg = Register(1, [1, 1])
    assert noise.phase_flip(reg, 0, 1.0)
    assert almost(reg.as_numpy() * np.sqrt(2), [1, -1])

def test_amplitude_damping_full_decay():
    for seed in range(5):
        reg = random_register(3, seed)
        noise.amplitude_damping(reg, 1, 1.0)
        p = reg.probabilities()
        assert almost(p[[i for i in range(8) if i & 2]], 0.0)
        reg.check_normalized(TOL)

def test_amplitude_damping_partial():
    reg = Register.basis(1, 1)
    noise.amplitude_damping(reg, 0, 0.3)
    assert almost(reg.probabilities(), [0.3, 0.7])

def test_amplitude_damping_zero_gamma_is_identity():
    reg = random_register(2, 4)
    before = reg.as_numpy().copy()
    noise.amplitude_damping(reg, 0, 0.0)
    assert almost(reg.as_numpy(), before)

def test_amplitude_damping_cancelling_branches():
    # |-> with gamma=1: the pair update sums to zero, decay branch survives
    reg = Register(1, [1, -1])
    noise.amplitude_damping(reg, 0, 1.0)
    assert almost(reg.probabilities(), [1.0, 0.0])

def test_phase_damping():
    reg = Register(1, [1, 1])
    assert noise.phase_damping(reg, 0, 1.0)
    assert almost(reg.as_numpy() * np.sqrt(2), [1, -1])
    assert not noise.phase_damping(reg, 0, 0.0)

def test_readout_error():
    assert noise.readout_error(True, 1.0, np.random.default_rng(0)) is False
    assert noise.readout_error(False, 0.0, np.random.default_rng(0)) is False
    assert noise.readout_error(True, 0.1, FixedRng([0.05])) is False
    assert noise.readout_error(True, 0.1, FixedRng([0.5])) is True

def test_noisy_gates_without_errors_are_ideal():
    reg = Register.zero(2)
    noise.noisy_gate(reg, 0, G.H(), 0.0)
    noise.noisy_cnot(reg, 0, 1, 0.0)
    assert almost(reg.probabilities(), [0.5, 0, 0, 0.5])

def test_noisy_cnot_depolarizes_both_qubits():
    reg = Register.zero(2)
    # both draws hit; X on control then X on target
    noise.noisy_cnot(reg, 0, 1, 0.5, rng=FixedRng([0.0, 0.0, 0.0, 0.0]))
    assert almost(reg.probability(3), 1.0)

def test_invalid_rates():
    reg = Register.zero(1)
    with pytest.raises(ValueError):
        noise.depolarizing(reg, 0, 1.5)
    with pytest.raises(ValueError):
        noise.amplitude_damping(reg, 0, -0.1)
    with pytest.raises(IndexError):
        noise.bit_flip(reg, 3, 0.1)

def test_noise_config_gammas_and_presets():
    cfg = NoiseConfig()
    assert math.isclose(cfg.amplitude_damping_gamma(), 1 - math.exp(-0.1 / 100.0))
    assert math.isclose(cfg.phase_damping_gamma(), 1 - math.exp(-0.1 / 50.0))
    ideal = NoiseConfig.ideal()
    assert ideal.amplitude_damping_gamma() == 0.0 and ideal.phase_damping_gamma() == 0.0
    assert NoiseConfig.ibm_quantum().t1 == 150.0
    assert NoiseConfig.google_sycamore().readout_error == 0.03
    assert NoiseConfig.noisy().two_qubit_error == 0.10
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.t1 = 1.0

def test_noise_model_readout_and_idle():
    model = NoiseModel(NoiseConfig(readout_error=1.0), rng=0)
    assert model.measure(Register.zero(1), 0) is True

    reg = Register.basis(1, 1)
    NoiseModel(NoiseConfig.ideal(), rng=0).idle(reg, 0)
    assert almost(reg.probability(1), 1.0)

    reg = Register.basis(1, 1)
    NoiseModel(NoiseConfig(t1=0.1, t2=math.inf), rng=0).idle(reg, 0)
    gamma = 1 - math.exp(-1.0)
    assert almost(reg.probabilities(), [gamma, 1 - gamma])

def test_noisy_runs_reproducible_with_seed():
    def run(seed):
        model = NoiseModel(NoiseConfig.noisy(), rng=seed)
        reg = Register.zero(3)
        for _ in range(10):
            for q in range(3):
                model.gate(reg, q, G.H())
            model.cnot(reg, 0, 1)
            model.cnot(reg, 1, 2)
        return reg.as_numpy().copy()
    assert almost(run(42), run(42))
