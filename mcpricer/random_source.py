"""
Random number sources for the simulation engine.

Standard normal deviates come from the Box-Muller transform applied to
uniforms from a seedable numpy Generator:

    r = sqrt(-2 ln u),  θ = 2πv
    z1 = r cos θ,  z2 = r sin θ

Quasi-random normals replace the uniforms with two Van der Corput sequences
in distinct bases, which makes them fully deterministic for a given index.
"""

from typing import Optional, Tuple, Union

import numpy as np

# Smallest positive double; keeps log(u) finite when a uniform is exactly 0
_TINY = np.finfo(np.float64).tiny


def box_muller(u, v) -> Tuple[np.ndarray, np.ndarray]:
    """
    Transform two independent uniforms into two independent standard normals.

    Args:
        u: Uniform(0, 1) values used for the radius
        v: Uniform(0, 1) values used for the angle

    Returns:
        Tuple (r cos θ, r sin θ) with the broadcast shape of u and v
    """
    u = np.maximum(np.asarray(u, dtype=np.float64), _TINY)
    v = np.asarray(v, dtype=np.float64)
    radius = np.sqrt(-2.0 * np.log(u))
    theta = 2.0 * np.pi * v
    return radius * np.cos(theta), radius * np.sin(theta)


def van_der_corput(index: int, base: int) -> float:
    """
    Radical inverse of a non-negative integer in the given base.

    The base-b digits of index are mirrored about the radix point, e.g.
    index 6 = 110 in base 2 maps to 0.011 = 0.375.
    """
    if base < 2:
        raise ValueError(f"Van der Corput base must be >= 2, got {base}")
    if index < 0:
        raise ValueError(f"Van der Corput index must be >= 0, got {index}")

    result = 0.0
    weight = 1.0 / base
    n = index
    while n > 0:
        result += (n % base) * weight
        n //= base
        weight /= base
    return result


def van_der_corput_sequence(indices, base: int) -> np.ndarray:
    """Vectorized radical inverse for an array of non-negative indices."""
    if base < 2:
        raise ValueError(f"Van der Corput base must be >= 2, got {base}")

    n = np.array(indices, dtype=np.int64, copy=True)
    if np.any(n < 0):
        raise ValueError("Van der Corput indices must be >= 0")

    result = np.zeros(n.shape, dtype=np.float64)
    weight = 1.0 / base
    while np.any(n > 0):
        result += (n % base) * weight
        n //= base
        weight /= base
    return result


def quasi_normal_pairs(
    n_points: int, base1: int, base2: int
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Deterministic normal pairs for points i = 1..n_points.

    Point i uses u = vdc(i, base1) for the radius and v = vdc(i, base2) for
    the angle of a Box-Muller transform.

    Returns:
        Tuple (z1, z2), each with shape (n_points,)
    """
    if base1 == base2:
        raise ValueError("Van der Corput bases must be distinct")
    indices = np.arange(1, n_points + 1)
    u = van_der_corput_sequence(indices, base1)
    v = van_der_corput_sequence(indices, base2)
    return box_muller(u, v)


class RandomSource:
    """
    Reseedable source of standard normal deviates.

    Each pricing call owns one instance; reseeding it with the same value
    replays exactly the same sequence of draws.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed(seed)

    @property
    def current_seed(self) -> Optional[int]:
        return self._seed

    def seed(self, value: Optional[int]) -> None:
        """Reset the underlying generator to a deterministic state."""
        self._seed = value
        self._rng = np.random.default_rng(value)

    def next_uniform(self) -> float:
        """Uniform draw in (0, 1)."""
        u = self._rng.random()
        while u == 0.0:
            u = self._rng.random()
        return u

    def next_standard_normal(self) -> float:
        """Single N(0, 1) draw; the sine half of the pair is discarded."""
        z1, _ = self.next_standard_normal_pair()
        return z1

    def next_standard_normal_pair(self) -> Tuple[float, float]:
        """Both Box-Muller outputs (r cos θ, r sin θ) from one pair of uniforms."""
        u = self.next_uniform()
        v = self._rng.random()
        z1, z2 = box_muller(u, v)
        return float(z1), float(z2)

    def standard_normals(self, shape: Union[int, Tuple[int, ...]]) -> np.ndarray:
        """
        Array of N(0, 1) draws using both halves of every Box-Muller pair.

        Values are laid out in row-major order as z1, z2, z1, z2, ...; when
        the requested size is odd the final sine value is dropped.

        Args:
            shape: Output shape

        Returns:
            Array of standard normals with the requested shape
        """
        size = int(np.prod(shape))
        n_pairs = (size + 1) // 2

        u = self._rng.random(n_pairs)
        v = self._rng.random(n_pairs)
        z1, z2 = box_muller(u, v)

        z = np.empty(2 * n_pairs, dtype=np.float64)
        z[0::2] = z1
        z[1::2] = z2
        return z[:size].reshape(shape)
