# qstate/errors.py

class InvalidStateError(ValueError):
    """Amplitudes carry no probability mass (all zero)."""

class InvalidLengthError(ValueError):
    """Amplitude vector length is not 2**n."""

class OutOfRangeError(IndexError):
    """Qubit or basis index outside the register."""

def check_index(value: int, limit: int, what: str = "qubit"):
    if not (0 <= value < limit):
        raise OutOfRangeError(f"{what} index {value} out of range [0, {limit})")
    return value
