"""
Deterministic value noise with fractal Brownian motion synthesis.

The field is a pure function of (seed, coordinate): integer lattice points
are hashed to pseudo-random values in [0, 1), which are blended with a
smoothstep kernel and summed over octaves. All functions accept scalars or
NumPy arrays and return the same kind.
"""

from typing import Union

import numpy as np

ArrayLike = Union[float, np.ndarray]

_MASK32 = 0xFFFFFFFF
_PRIME_X = 374761393
_PRIME_Y = 668265263
_PRIME_SEED = 2246822519
_SALT = 0x5BF03635
_MIX = 0x5BD1E995
_INV_2_32 = 1.0 / 4294967296.0


def seed_key(seed: float) -> int:
    """Reduce a numeric seed to the unsigned 32-bit key mixed into the hash."""
    return int(seed) & _MASK32


def _smoothstep(t: np.ndarray) -> np.ndarray:
    """3t^2 - 2t^3"""
    return t * t * (3.0 - 2.0 * t)


def _lerp(a: np.ndarray, b: np.ndarray, t: np.ndarray) -> np.ndarray:
    return a + (b - a) * t


def _as_result(value: np.ndarray) -> ArrayLike:
    return float(value) if value.ndim == 0 else value


class NoiseField:
    """
    Seeded 2D value noise.

    Args:
        seed: Numeric seed; only its truncated 32-bit integer key is used
    """

    def __init__(self, seed: float = 0):
        self.seed = seed
        # Seed contribution to the lattice hash, already reduced mod 2^32
        self._seed_term = (seed_key(seed) * _PRIME_SEED) & _MASK32

    def hash(self, ix: ArrayLike, iy: ArrayLike) -> ArrayLike:
        """
        Hash integer lattice coordinates to a value in [0, 1).

        Arithmetic is carried out on 32-bit unsigned words held in int64
        arrays so that products never overflow.
        """
        ix = np.asarray(ix, dtype=np.int64)
        iy = np.asarray(iy, dtype=np.int64)

        h = (ix * _PRIME_X + iy * _PRIME_Y + self._seed_term) & _MASK32
        h = h ^ _SALT
        h = ((h ^ (h >> 13)) * _MIX) & _MASK32
        h = h ^ (h >> 15)
        return _as_result(h.astype(np.float64) * _INV_2_32)

    def value_noise(self, x: ArrayLike, y: ArrayLike) -> ArrayLike:
        """
        Sample value noise at (x, y).

        The four surrounding lattice hashes are blended bilinearly with a
        smoothstep weight on each axis. Results lie in [0, 1).
        """
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)

        x0 = np.floor(x)
        y0 = np.floor(y)
        u = _smoothstep(x - x0)
        v = _smoothstep(y - y0)

        ix = x0.astype(np.int64)
        iy = y0.astype(np.int64)
        a = np.asarray(self.hash(ix, iy))
        b = np.asarray(self.hash(ix + 1, iy))
        c = np.asarray(self.hash(ix, iy + 1))
        d = np.asarray(self.hash(ix + 1, iy + 1))

        return _as_result(_lerp(_lerp(a, b, u), _lerp(c, d, u), v))

    def fbm(self, x: ArrayLike, y: ArrayLike, octaves: int = 4, frequency: float = 1.0) -> ArrayLike:
        """
        Fractal Brownian motion over ``octaves`` layers of value noise.

        Coordinates are scaled by the base ``frequency`` first; each octave
        then halves the amplitude and doubles the frequency, starting from
        amplitude 1. The sum is divided by the total amplitude used so the
        result stays in the range of a single octave.

        Args:
            x: X coordinate(s)
            y: Y coordinate(s)
            octaves: Number of layers, at least 1
            frequency: Base frequency applied before the octave loop

        Returns:
            Noise value(s) in [0, 1)
        """
        nx = np.asarray(x, dtype=np.float64) * frequency
        ny = np.asarray(y, dtype=np.float64) * frequency

        value = np.zeros(np.broadcast(nx, ny).shape, dtype=np.float64)
        amplitude = 1.0
        octave_frequency = 1.0
        total_amplitude = 0.0

        for _ in range(octaves):
            value = value + np.asarray(self.value_noise(nx * octave_frequency, ny * octave_frequency)) * amplitude
            total_amplitude += amplitude
            amplitude *= 0.5
            octave_frequency *= 2.0

        return _as_result(value / total_amplitude)
