import logging
import time

import matplotlib.pyplot as plt
import numpy as np

from demagfft import DemagField, Topology
from demagfft.shapes import apply_mask, circular_mask, span_grid, uniform_m


def simulation():
    topology = Topology((50, 50, 1), (5e-9, 5e-9, 1.5e-9))
    n, dx = topology.cell_count, topology.cell_size
    ms = 8e5

    grid = span_grid(topology)
    # here we define two junctions
    r1 = r2 = 5
    gap = 20
    x0 = x1 = n[0] // 2
    y0 = 10
    y1 = y0 + gap + r1 // 2 + r2 // 2  # 2 * r/2 because we measure centre to centre
    mask1 = circular_mask(x0, y0, r1, grid)
    mask2 = circular_mask(x1, y1, r2, grid)
    # both junctions magnetized perpendicular to the film
    m = apply_mask(uniform_m(topology, (0, 0, 1), ms), mask1 | mask2)

    demag_start = time.time()
    demag = DemagField(topology, progress=True)
    demag_end = time.time()
    print(f"Demag computed in {demag_end-demag_start:.2f}")
    h_demag = demag.compute_field(m)
    hdemag_time = time.time()
    print(f"Field computed in {hdemag_time-demag_end:.2f}")
    hmag = h_demag.norms().reshape(n, order="F")[:, :, 0]
    with plt.style.context(["science", "nature"]):
        fig, ax = plt.subplots(dpi=300)
        ax.pcolormesh(
            np.arange(n[0]) * dx[0] * 1e9,
            np.arange(n[1]) * dx[1] * 1e9,
            np.log10(hmag).T,
        )
        ax.set_xlabel("X (nm)")
        ax.set_ylabel("Y (nm)")
        fig.savefig("demag.png")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    simulation()
