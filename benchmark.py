"""
Benchmark: docmerge merge strategies vs a plain dict deep merge.

Compares:
    1. Strategy.SORTED — linear merge-join over canonically ordered keys
    2. Strategy.LOOKUP — per-key lookup, output re-sorted on close
    3. A naive recursive merge over Python dicts (no document model)

The point is NOT raw speed against dicts: the comparison shows how the two
strategies scale with object width, and checks that all three agree.
"""

import sys
import os
import random
import time

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from docmerge.formats import from_python, to_python
from docmerge.merge import MergeOptions, Strategy, merge_with_options


# ═══════════════════════════════════════════════════════════════════
#  TEST DATA
# ═══════════════════════════════════════════════════════════════════

def make_doc(rng: random.Random, width: int, depth: int, overlap: float) -> dict:
    """Object of `width` keys; a share `overlap` of them is drawn from a common pool."""
    doc = {}
    for i in range(width):
        key = f"k{i}" if rng.random() < overlap else f"k{i}_{rng.randrange(10**6)}"
        roll = rng.random()
        if depth > 0 and roll < 0.3:
            doc[key] = make_doc(rng, max(1, width // 4), depth - 1, overlap)
        elif roll < 0.4:
            doc[key] = [rng.randrange(100) for _ in range(3)]
        else:
            doc[key] = rng.choice([None, True, 1, 2.5, "value"])
    return doc


def dict_merge(a, b):
    if not isinstance(a, dict):
        return b
    if not isinstance(b, dict):
        return a
    out = dict(a)
    for k, vb in b.items():
        va = a.get(k)
        if k in a and isinstance(va, dict) and isinstance(vb, dict):
            out[k] = dict_merge(va, vb)
        elif k in a and isinstance(va, list) and isinstance(vb, list):
            out[k] = va + vb
        else:
            out[k] = vb
    return out


def timed(fn, repeat: int = 5) -> float:
    best = float("inf")
    for _ in range(repeat):
        t0 = time.perf_counter()
        fn()
        best = min(best, time.perf_counter() - t0)
    return best


# ═══════════════════════════════════════════════════════════════════
#  RUN
# ═══════════════════════════════════════════════════════════════════

def main():
    rng = random.Random(42)
    sorted_opts = MergeOptions(strategy=Strategy.SORTED)
    lookup_opts = MergeOptions(strategy=Strategy.LOOKUP)

    print("=" * 70)
    print("  MERGE STRATEGIES")
    print("=" * 70)
    print(f"  {'width':>7}  {'sorted':>10}  {'lookup':>10}  {'dict':>10}  agree")

    for width in (10, 100, 1000, 5000):
        a_py = make_doc(rng, width, depth=2, overlap=0.6)
        b_py = make_doc(rng, width, depth=2, overlap=0.6)
        a = from_python(a_py)
        b = from_python(b_py)

        t_sorted = timed(lambda: merge_with_options(a, b, sorted_opts))
        t_lookup = timed(lambda: merge_with_options(a, b, lookup_opts))
        t_dict = timed(lambda: dict_merge(a_py, b_py))

        r_sorted = merge_with_options(a, b, sorted_opts)
        r_lookup = merge_with_options(a, b, lookup_opts)
        agree = r_sorted == r_lookup and to_python(r_sorted) == dict_merge(a_py, b_py)

        print(f"  {width:>7}  {t_sorted * 1e3:>8.2f}ms  {t_lookup * 1e3:>8.2f}ms"
              f"  {t_dict * 1e3:>8.2f}ms  {'yes' if agree else 'NO'}")


if __name__ == "__main__":
    main()
