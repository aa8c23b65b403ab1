"""
Python implementation of the SquirrelNoise5 position hash.

Based on Squirrel Eiserloh's noise-based RNG. Unlike a stateful generator,
every value is a pure function of (position, seed), so the same draw can be
recomputed in any order from any thread. This is what keeps cell-local random
draws (feature points, impulses) independent of evaluation order.
"""

import numpy as np

SQ5_BIT_NOISE1 = 0xD2A80A3F
SQ5_BIT_NOISE2 = 0xA884F197
SQ5_BIT_NOISE3 = 0x6C736F4B
SQ5_BIT_NOISE4 = 0xB79F3ABB
SQ5_BIT_NOISE5 = 0x1B56C4F5

PRIME_Y = 198491317
PRIME_Z = 6542989

_ONE_OVER_MAX_UINT = 1.0 / 0xFFFFFFFF
_ONE_OVER_2_POW_32 = 2.3283064365386963e-10  # 2^-32


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


def squirrel_noise5(position, seed=0):
    """Hash a 32-bit position with a 32-bit seed into a 32-bit unsigned int."""
    mangled = _uint32(position)
    mangled = _uint32(mangled * SQ5_BIT_NOISE1)
    mangled = _uint32(mangled + _uint32(seed))
    mangled ^= mangled >> 9
    mangled = _uint32(mangled + SQ5_BIT_NOISE2)
    mangled ^= mangled >> 11
    mangled = _uint32(mangled * SQ5_BIT_NOISE3)
    mangled ^= mangled >> 13
    mangled = _uint32(mangled + SQ5_BIT_NOISE4)
    mangled ^= mangled >> 15
    mangled = _uint32(mangled * SQ5_BIT_NOISE5)
    mangled ^= mangled >> 17
    return mangled


def noise_2d(x, y, seed=0):
    """Hash an integer lattice coordinate pair."""
    return squirrel_noise5(x + PRIME_Y * y, seed)


def noise_3d(x, y, z, seed=0):
    """Hash an integer lattice coordinate triple."""
    return squirrel_noise5(x + PRIME_Y * y + PRIME_Z * z, seed)


def squirrel_noise5_array(positions, seed=0):
    """
    Vectorised ``squirrel_noise5`` over an integer array.

    Every product of two 32-bit values fits in 64 bits, so the arithmetic is
    done in uint64 and masked back to 32 bits after each step.
    """
    mask = np.uint64(0xFFFFFFFF)
    mangled = np.asarray(positions, dtype=np.int64).astype(np.uint64) & mask
    mangled = (mangled * np.uint64(SQ5_BIT_NOISE1)) & mask
    mangled = (mangled + np.uint64(_uint32(seed))) & mask
    mangled ^= mangled >> np.uint64(9)
    mangled = (mangled + np.uint64(SQ5_BIT_NOISE2)) & mask
    mangled ^= mangled >> np.uint64(11)
    mangled = (mangled * np.uint64(SQ5_BIT_NOISE3)) & mask
    mangled ^= mangled >> np.uint64(13)
    mangled = (mangled + np.uint64(SQ5_BIT_NOISE4)) & mask
    mangled ^= mangled >> np.uint64(15)
    mangled = (mangled * np.uint64(SQ5_BIT_NOISE5)) & mask
    mangled ^= mangled >> np.uint64(17)
    return mangled


def zero_to_one(value):
    """Map a 32-bit hash to [0, 1]."""
    return value * _ONE_OVER_MAX_UINT


def neg_one_to_one(value):
    """Map a 32-bit hash to [-1, 1]."""
    return -1.0 + 2.0 * zero_to_one(value)


class SquirrelPRNG:
    """
    Counter-based random stream on top of SquirrelNoise5.

    The stream is fully determined by its seed: the n-th call to ``random``
    always returns the same value. Instances are cheap and meant to be created
    per evaluation (per lattice cell), never shared between threads.
    """

    def __init__(self, seed):
        """Initialize with an integer seed (folded to 32 bits)."""
        self.seed = _uint32(seed)
        self.call_count = 0

    def next_uint32(self):
        """Return the next raw 32-bit value."""
        value = squirrel_noise5(self.call_count, self.seed)
        self.call_count += 1
        return value

    def random(self):
        """Generate next random number in [0, 1)."""
        return self.next_uint32() * _ONE_OVER_2_POW_32

    def uniform(self, low, high):
        """Generate next random number in [low, high)."""
        return low + (high - low) * self.random()
