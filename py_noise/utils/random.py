"""
Random number generation utilities.

This module provides seed handling for the noise generators. There is no
global PRNG here: every random draw is derived from (seed, lattice cell)
through the SquirrelNoise5 hash, so results never depend on evaluation order.
Python's random and NumPy's random should not be used in generator code.
"""

from typing import Optional

from ..core.squirrel_prng import SquirrelPRNG, noise_2d, noise_3d

_UINT64_MASK = 0xFFFFFFFFFFFFFFFF
_UINT32_MASK = 0xFFFFFFFF
_GOLDEN_GAMMA = 0x9E3779B9


def fold_seed(seed: int) -> int:
    """
    Fold a 64-bit seed (signed or unsigned) into 32 bits.

    Both halves contribute, so seeds that differ only in their upper 32 bits
    still produce different tables.

    Args:
        seed: Any integer representable in 64 bits

    Returns:
        Unsigned 32-bit seed
    """
    value = int(seed) & _UINT64_MASK
    return ((value >> 32) ^ value) & _UINT32_MASK


def mix_seed(seed: int, offset: int, salt: int = 0) -> int:
    """Derive an independent 32-bit seed from a base seed and an offset."""
    s = (fold_seed(seed) ^ ((offset * _GOLDEN_GAMMA) & _UINT32_MASK) ^ salt) & _UINT32_MASK
    # xorshift on 32 bits
    s ^= (s << 13) & _UINT32_MASK
    s ^= s >> 17
    s ^= (s << 5) & _UINT32_MASK
    return s & _UINT32_MASK


def cell_seed(seed: int, cx: int, cy: int, cz: Optional[int] = None) -> int:
    """
    Hash a lattice cell into a 32-bit seed.

    Args:
        seed: 32-bit generator seed
        cx, cy: Integer cell coordinates
        cz: Optional third cell coordinate

    Returns:
        32-bit seed unique to (seed, cell)
    """
    if cz is None:
        return noise_2d(cx, cy, seed)
    return noise_3d(cx, cy, cz, seed)


def cell_rng(seed: int, cx: int, cy: int, cz: Optional[int] = None) -> SquirrelPRNG:
    """
    Get a fresh random stream for one lattice cell.

    The stream depends only on (seed, cell), never on neighbouring cells or on
    how many draws other cells made.
    """
    return SquirrelPRNG(cell_seed(seed, cx, cy, cz))
