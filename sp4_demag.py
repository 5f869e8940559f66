"""
Timing of the demag field on the muMAG standard problem 4 geometry,
restricted transforms against the dense reference.
"""
import logging
import time

from tqdm import tqdm

from demagfft import DemagField, ReferenceDemagField, Topology, fft_cost_fraction
from demagfft.shapes import init_m

# setup mesh and material constants
n = (100, 25, 1)
dx = (5e-9, 5e-9, 3e-9)
ms = 8e5
iterations = 200


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    topology = Topology(n, dx)
    m = init_m(topology, ms)
    print("FFT cost fraction:", fft_cost_fraction(topology))

    results = {}
    for name, cls in (("restricted", DemagField), ("reference", ReferenceDemagField)):
        setup_start = time.time()
        demag = cls(topology, progress=True)
        print(f"{name} setup took: {time.time() - setup_start:.2f}s")

        start = time.time()
        for _ in tqdm(range(iterations), desc=name):
            h = demag.compute_field(m)
        results[name] = h
        print(f"{name}: {(time.time() - start) / iterations * 1e3:.3f} ms per field")

    diff = results["restricted"].sub(results["reference"]).max_norm()
    print(f"max deviation: {diff:.3e} A/m")
