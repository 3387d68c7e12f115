from itertools import count
from time import sleep, perf_counter

from decorators import HeadOf, MappedOf
from envelope import CollectionOf
from lazy import Mapped
from models import RefreshPolicy
from utils import measure_performance, setup_logging


def expensive_transform(x):
    # Simulate a costly step so laziness is visible
    print(f"  computing f({x}) ...")
    sleep(0.05)
    return x * x


def main():
    setup_logging()

    print("\n--- Demo: laziness (no work until iterated) ---")
    view = Mapped(expensive_transform, range(1, 10_000))
    print("Constructed view. No output yet (nothing computed).")
    print("\nBounding to the first 5 (should compute exactly 5 items):")
    t0 = perf_counter()
    head = HeadOf(5, view)
    print(f"Result: {head.to_array()}")
    print(f"Time: {perf_counter() - t0:.2f}s\n")

    print("--- Demo: bounding an infinite source ---")
    print(f"First 8 naturals: {HeadOf(8, count)}")

    print("\n--- Demo: recompute vs cache ---")
    recomputed = MappedOf(expensive_transform, [1, 2, 3])
    cached = MappedOf(expensive_transform, [1, 2, 3], refresh=RefreshPolicy.CACHE)
    print("Recomputed envelope, two traversals:")
    for _ in range(2):
        for _ in recomputed:
            pass
    print("Cached envelope, two traversals:")
    for _ in range(2):
        for _ in cached:
            pass

    print("\n--- Demo: structural equality ---")
    eager = CollectionOf([1, 2, 3])
    deferred = CollectionOf(lambda: [1, 2, 3])
    print(f"{eager} == {deferred}: {eager == deferred}")
    print(f"hashes: {hash(eager)} / {hash(deferred)}")

    info = measure_performance("head_of_large_range", lambda: HeadOf(1000, range(10_000_000)).to_array())
    print(f"\nHeadOf(1000, range(10M)): {info['execution_time_ms']:.2f} ms, "
          f"{info['memory_usage_mb']:.3f} MB peak")


if __name__ == "__main__":
    main()
