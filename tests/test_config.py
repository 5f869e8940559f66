import importlib

import numpy as np

from demagfft import config


def test_constants():
    assert config.DTYPE is np.float64
    assert config.CDTYPE is np.complex128
    assert config.MU0 == 4e-7 * np.pi
    names = {name for name in vars(config) if name.isupper()}
    assert names == {"DTYPE", "CDTYPE", "MU0", "FFT_BACKEND", "FFT_WORKERS", "DEMAG_WORKERS"}


def test_environment(monkeypatch):
    monkeypatch.setenv("DEMAGFFT_FFT_BACKEND", "numpy")
    monkeypatch.setenv("DEMAGFFT_FFT_WORKERS", "4")
    monkeypatch.setenv("DEMAGFFT_DEMAG_WORKERS", "2")
    try:
        reloaded = importlib.reload(config)
        assert reloaded.FFT_BACKEND == "numpy"
        assert reloaded.FFT_WORKERS == 4
        assert reloaded.DEMAG_WORKERS == 2
    finally:
        monkeypatch.undo()
        importlib.reload(config)
