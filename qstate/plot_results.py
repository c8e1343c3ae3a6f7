# qstate/plot_results.py
import csv, os
import matplotlib.pyplot as plt
from collections import defaultdict
from statistics import median

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")

def load_rows(path):
    rows = []
    with open(path, "r") as f:
        r = csv.DictReader(f)
        for row in r:
            row["qubits"]  = int(row["qubits"])
            row["threads"] = int(row["threads"])
            row["wall_ms"] = float(row["wall_ms"])
            rows.append(row)
    return rows

def load_grover_rows(path):
    rows = []
    with open(path, "r") as f:
        for row in csv.DictReader(f):
            rows.append({
                "qubits": int(row["qubits"]),
                "iterations": int(row["iterations"]),
                "empirical": float(row["empirical"]),
                "exact": float(row["exact"]),
                "optimal": int(row["optimal"]),
            })
    return rows

def median_by_key(rows, key_fields):
    buckets = defaultdict(list)
    for r in rows:
        key = tuple(r[k] for k in key_fields)
        buckets[key].append(r["wall_ms"])
    agg = []
    for key, vals in buckets.items():
        out = dict(zip(key_fields, key))
        out["wall_ms"] = float(median(vals))
        agg.append(out)
    return agg

def plot_runtime_vs(rows, field, label, out_dir, tag, log=False):
    by_backend = defaultdict(list)
    for r in median_by_key(rows, ["backend", field]):
        by_backend[r["backend"]].append((r[field], r["wall_ms"]))
    if not by_backend:
        return
    plt.figure()
    for be, p in by_backend.items():
        xs, ys = zip(*sorted(p))
        plt.plot(xs, ys, marker="o", label=be)
    plt.xlabel(label)
    plt.ylabel("Runtime (ms)")
    if log:
        plt.yscale("log")
    plt.title(f"Runtime vs {label} [{tag}]")
    plt.grid(True, which="both", ls="--", lw=0.5)
    plt.legend()
    plt.savefig(os.path.join(out_dir, f"runtime_vs_{field}_{tag}.png"), dpi=200)
    plt.close()

def plot_speedup_vs_threads(rows, out_dir, tag):
    pts = sorted(median_by_key(rows, ["threads"]), key=lambda r: r["threads"])
    t1 = next((r["wall_ms"] for r in pts if r["threads"] == 1), None)
    if not t1:
        return
    xs = [r["threads"] for r in pts]
    ys = [t1 / r["wall_ms"] for r in pts]
    plt.figure()
    plt.plot(xs, ys, marker="o")
    plt.xlabel("Threads")
    plt.ylabel("Speedup (T1/Tt)")
    plt.title(f"Speedup vs Threads [{tag}]")
    plt.grid(True)
    plt.savefig(os.path.join(out_dir, f"speedup_vs_threads_{tag}.png"), dpi=200)
    plt.close()

def plot_grover_success(rows, out_dir, tag):
    if not rows:
        return
    rows = sorted(rows, key=lambda r: r["iterations"])
    xs = [r["iterations"] for r in rows]
    plt.figure()
    plt.plot(xs, [r["exact"] for r in rows], marker="o", label="exact")
    plt.plot(xs, [r["empirical"] for r in rows], marker="x", ls="--", label="empirical")
    plt.axvline(rows[0]["optimal"], color="gray", lw=0.8)
    plt.xlabel("Grover iterations")
    plt.ylabel("P(target)")
    plt.ylim(0, 1.05)
    plt.title(f"Grover success vs iterations, n={rows[0]['qubits']} [{tag}]")
    plt.grid(True)
    plt.legend()
    plt.savefig(os.path.join(out_dir, f"grover_success_{tag}.png"), dpi=200)
    plt.close()

def main():
    # find all CSVs recursively under data/
    csvs = []
    for root, _, files in os.walk(DATA_DIR):
        for f in files:
            if f.endswith(".csv"):
                csvs.append(os.path.join(root, f))

    if not csvs:
        print("No CSV files found under data/")
        return

    for path in csvs:
        tag = os.path.splitext(os.path.basename(path))[0]
        backend = os.path.basename(os.path.dirname(path))  # 'serial' or 'numba'
        out_dir = os.path.dirname(path)
        try:
            rows = load_grover_rows(path) if tag.startswith("grover") else load_rows(path)
        except (KeyError, ValueError) as e:
            print(f"Skipping {path}: {e}")
            continue

        print(f"Plotting from {backend}/{tag}.csv ({len(rows)} rows)...")

        if tag.startswith("qubits"):
            plot_runtime_vs(rows, "qubits", "Qubits (n)", out_dir, backend, log=True)
        elif tag.startswith("threads"):
            plot_speedup_vs_threads(rows, out_dir, backend)
            plot_runtime_vs(rows, "threads", "Threads", out_dir, backend)
        elif tag.startswith("grover"):
            plot_grover_success(rows, out_dir, backend)

    print("\nSaved all plots under data/<backend>/*.png")

if __name__ == "__main__":
    main()
