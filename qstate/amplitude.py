# qstate/amplitude.py
import numpy as np

DEFAULT_DTYPE = np.complex128

# |sum p_i - 1| bound used by normalization checks and tests
NORM_TOL = 1e-10

# basis states at or below this probability are hidden from display
DISPLAY_THRESHOLD = 1e-10

def abs_sq(z) -> float:
    """|z|^2 = re^2 + im^2."""
    return float(z.real * z.real + z.imag * z.imag)

def format_amplitude(z) -> str:
    return f"{z.real:.6f}{z.imag:+.6f}i"
