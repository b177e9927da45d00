"""
Quick Start Example for pyopticsof.

Scores a toy dataset made of two Gaussian clusters plus a few scattered
points and prints the most outlying objects.
"""

import logging

import numpy as np

from pyopticsof import CoreOPTICSOF


def main():
    """Run quick start example."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    rng = np.random.RandomState(42)
    dense = rng.normal(loc=0.0, scale=0.3, size=(100, 2))
    sparse = rng.normal(loc=5.0, scale=1.5, size=(50, 2))
    scattered = rng.uniform(low=-4.0, high=10.0, size=(5, 2))
    X = np.vstack([dense, sparse, scattered])
    ids = [f"dense-{i}" for i in range(100)]
    ids += [f"sparse-{i}" for i in range(50)]
    ids += [f"scattered-{i}" for i in range(5)]

    detector = CoreOPTICSOF(min_pts=10, contamination=0.05)
    detector.fit(X, ids=ids)
    result = detector.result_

    meta = result.meta
    print(f"Score range: [{meta.observed_min:.3f}, {meta.observed_max:.3f}] (baseline {meta.baseline})")
    print(f"Threshold at contamination {detector.contamination}: {detector.threshold_:.3f}\n")

    print("Top 10 outliers:")
    for rank, (oid, score) in enumerate(result.top_n(10), start=1):
        print(f"  {rank:2d}. {oid:<14s} OF={score:.3f}  normalized={meta.normalize_score(score):.3f}")


if __name__ == "__main__":
    main()
