from numba import njit, prange

__all__ = ["njit", "prange"]
