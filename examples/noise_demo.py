#!/usr/bin/env python3
"""
Demo script showing the noise variants side by side.
"""

import numpy as np
import matplotlib.pyplot as plt
from py_noise import NoiseConfig, create_noise_field
from py_noise.utils.logging import configure_logging


def sample_grid(field, size: int, extent: float) -> np.ndarray:
    """Evaluate a field over a size x size grid covering [0, extent)."""
    grid = np.zeros((size, size))
    step = extent / size
    for j in range(size):
        for i in range(size):
            grid[j, i] = field.evaluate(i * step, j * step)
    return grid


def main():
    """Render one preview per variant."""
    configure_logging(level="INFO", fmt="plain")

    print("Py-Noise Variant Demo")
    print("=" * 40)

    size = 128
    base = NoiseConfig(seed=42, octaves=4, persistence=0.5, lacunarity=2.0)
    demos = [
        ("perlin", base, 4.0),
        ("simplex", base.replace(variant="simplex"), 4.0),
        ("wavelet", base.replace(variant="wavelet", wavelet={"tile_size": 64}), 32.0),
        ("gabor", base.replace(variant="gabor", octaves=1), 4.0),
        ("anisotropic", base.replace(variant="anisotropic", anisotropic={"angle": 0.6}), 4.0),
        ("worley f2-f1", base.replace(
            variant="worley", octaves=1, worley={"combine": "f2_minus_f1"}), 6.0),
        ("ridged perlin", base.replace(ridge=True, ridge_weighting=True), 4.0),
        ("warped perlin", base.replace(warp={"strength": 0.8, "passes": 2}), 4.0),
    ]

    plt.figure(figsize=(16, 8))

    for i, (title, config, extent) in enumerate(demos, 1):
        print(f"\nSampling {title}...")
        field = create_noise_field(config)
        grid = sample_grid(field, size, extent)
        low, high = field.value_range

        print(f"  Range: [{grid.min():.3f}, {grid.max():.3f}] (nominal [{low:.2f}, {high:.2f}])")

        plt.subplot(2, 4, i)
        plt.imshow(grid, cmap='gray', vmin=low, vmax=high)
        plt.title(title)
        plt.axis('off')

    plt.tight_layout()
    plt.savefig('noise_examples.png', dpi=150)
    print("\nSaved visualization to noise_examples.png")


if __name__ == "__main__":
    main()
