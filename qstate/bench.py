# qstate/bench.py
import argparse, csv, os, socket, subprocess, time, platform
from datetime import datetime
import numpy as np
from .circuit import Circuit
from . import grover

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")

def backend_dir(backend):
    path = os.path.join(DATA_DIR, backend)
    os.makedirs(path, exist_ok=True)
    return path

def warmup(circ, backend, threads=None):
    # one dummy run to JIT-compile & warm caches; no norm check
    _ = circ.run(backend=backend, num_threads=threads, check_norm=False)

# ---------------------------------------------------------------------

def git_commit():
    try:
        return subprocess.check_output(["git", "rev-parse", "--short", "HEAD"],
                                       stderr=subprocess.DEVNULL).decode().strip()
    except (OSError, subprocess.CalledProcessError):
        return ""

def meta_row():
    return {
        "hostname": socket.gethostname(),
        "commit": git_commit(),
        "dtype": "complex128",
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "python": platform.python_version(),
        "machine": platform.machine(),
    }

HEADER = ["qubits","depth","backend","threads","gates","wall_ms","hostname","commit","dtype","timestamp"]
GROVER_HEADER = ["qubits","target","iterations","runs","empirical","exact","optimal","backend","timestamp"]

def new_csv(path, header=HEADER):
    """Create/overwrite CSV with header."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", newline="") as f:
        csv.DictWriter(f, fieldnames=header).writeheader()

def write_row(path, row, header=HEADER):
    with open(path, "a", newline="") as f:
        csv.DictWriter(f, fieldnames=header).writerow(row)

def timing_row(n, depth, backend, threads, circ, wall):
    m = meta_row()
    return {
        "qubits": n, "depth": depth, "backend": backend, "threads": threads,
        "gates": len(circ.ops), "wall_ms": f"{wall:.3f}",
        "hostname": m["hostname"], "commit": m["commit"], "dtype": m["dtype"], "timestamp": m["timestamp"]
    }

# ---------------------------------------------------------------------

def random_circuit(n, depth, seed=0):
    """Alternating layers: single-qubit (H / X / RZ) then entangling (CNOT / CZ)."""
    rng = np.random.default_rng(seed)
    c = Circuit.empty(n)
    for layer in range(depth):
        if layer % 2 == 0:
            for k in range(n):
                g = rng.integers(0, 3)
                if g == 0:
                    c.h(k)
                elif g == 1:
                    c.x(k)
                else:
                    c.rz(k, float(rng.uniform(0, 2*np.pi)))
        else:
            for k in range(0, n-1, 2):
                if rng.integers(0, 2) == 0:
                    c.cnot(k, k+1)
                else:
                    c.cz(k+1, k)
    return c

def time_run(circ, backend, threads=None):
    t0 = time.perf_counter()
    _ = circ.run(backend=backend, num_threads=threads, check_norm=False)
    return (time.perf_counter() - t0) * 1e3  # ms

def numba_max_threads():
    from .apply_numba import get_threads, set_threads
    set_threads(1_000_000)
    return get_threads()

def backend_threads(backend):
    return 0 if backend == "serial" else numba_max_threads()

# ---------------------------------------------------------------------
# individual experiments

def bench_qubits(ns, depth, backend, out_path):
    print(f"[run] Qubits scaling → {out_path}")
    new_csv(out_path)
    warmup(random_circuit(min(ns), depth, seed=42), backend=backend)
    for n in ns:
        circ = random_circuit(n, depth, seed=42)
        wall = time_run(circ, backend)
        write_row(out_path, timing_row(n, depth, backend, backend_threads(backend), circ, wall))
        print(f"  n={n}  wall={wall:.2f} ms")
    print("✓ done.\n")

def bench_threads(n, depth, threads_list, out_path):
    print(f"[run] Thread scaling → {out_path}")
    new_csv(out_path)
    circ = random_circuit(n, depth, seed=123)
    warmup(circ, backend="numba", threads=1)
    t1 = time_run(circ, "numba", threads=1)
    pool = numba_max_threads()
    print(f"  pool={pool}  T1={t1:.1f} ms")

    for t in threads_list:
        tt = min(int(t), pool)
        if tt != t:
            print(f"  requested t={t} > pool={pool}; using t={tt}")
        wall = time_run(circ, "numba", threads=tt)
        speedup = t1 / wall if wall > 0 else float("nan")
        write_row(out_path, timing_row(n, depth, "numba", tt, circ, wall))
        print(f"  t={tt}  wall={wall:.2f} ms  speedup={speedup:.2f}×")
    print("✓ done.\n")

def bench_grover(n, target, iterations_list, runs, backend, seed, out_path):
    """Success rate of Grover search as a function of the iteration count."""
    print(f"[run] Grover sweep → {out_path}")
    new_csv(out_path, GROVER_HEADER)
    optimal = grover.optimal_iterations(n)
    rng = np.random.default_rng(seed)
    for k in iterations_list:
        emp = grover.benchmark(n, target, runs=runs, iterations=k, rng=rng, backend=backend)
        exact = grover.success_probability(n, target, k, backend=backend)
        write_row(out_path, {
            "qubits": n, "target": target, "iterations": k, "runs": runs,
            "empirical": f"{emp:.4f}", "exact": f"{exact:.6f}", "optimal": optimal,
            "backend": backend, "timestamp": meta_row()["timestamp"],
        }, GROVER_HEADER)
        mark = "  <- optimal" if k == optimal else ""
        print(f"  k={k}  empirical={emp:.3f}  exact={exact:.4f}{mark}")
    print("✓ done.\n")

# ---------------------------------------------------------------------
def main(argv=None):
    p = argparse.ArgumentParser(description="qstate benchmarks → data/<backend>/*.csv (auto)")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_qubits = sub.add_parser("qubits")
    p_qubits.add_argument("--ns", type=str, required=True)
    p_qubits.add_argument("--depth", type=int, default=100)
    p_qubits.add_argument("--backend", type=str, default="numba", choices=["serial","numba"])

    p_threads = sub.add_parser("threads")
    p_threads.add_argument("--n", type=int, default=16)
    p_threads.add_argument("--depth", type=int, default=200)
    p_threads.add_argument("--threads", type=str, default="1,2,4,8,16")
    # threads always use numba backend
    p_threads.add_argument("--backend", type=str, default="numba", choices=["numba"])

    p_grover = sub.add_parser("grover")
    p_grover.add_argument("--n", type=int, default=3)
    p_grover.add_argument("--target", type=int, default=5)
    p_grover.add_argument("--iterations", type=str, default="0,1,2,3,4,5,6")
    p_grover.add_argument("--runs", type=int, default=500)
    p_grover.add_argument("--seed", type=int, default=0)
    p_grover.add_argument("--backend", type=str, default="serial", choices=["serial","numba"])

    args = p.parse_args(argv)

    base = backend_dir(args.backend)

    if args.cmd == "qubits":
        ns = [int(x) for x in args.ns.split(",")]
        bench_qubits(ns, args.depth, args.backend, os.path.join(base, "qubits.csv"))

    elif args.cmd == "threads":
        ts = [int(x) for x in args.threads.split(",")]
        bench_threads(args.n, args.depth, ts, os.path.join(base, "threads.csv"))

    elif args.cmd == "grover":
        ks = [int(x) for x in args.iterations.split(",")]
        bench_grover(args.n, args.target, ks, args.runs, args.backend, args.seed,
                     os.path.join(base, "grover.csv"))

if __name__ == "__main__":
    main()
