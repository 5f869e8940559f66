import os
from math import pi

import numpy as np

DTYPE = np.float64
CDTYPE = np.complex128

MU0 = 4e-7 * pi

# name of the FFT backend picked when the solver is not handed one
FFT_BACKEND = os.environ.get("DEMAGFFT_FFT_BACKEND", "scipy")
FFT_WORKERS = int(os.environ.get("DEMAGFFT_FFT_WORKERS", "1"))

# process pool size for the kernel evaluation, 1 means serial
DEMAG_WORKERS = int(os.environ.get("DEMAGFFT_DEMAG_WORKERS", "1"))
