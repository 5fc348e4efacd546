"""3D LUT parsing, sampling and caching."""

from gradekit.lut.cache import LUTCache, LUTCacheStats
from gradekit.lut.cube import LUTData, apply_lut, create_identity_lut, parse_cube_lut, sample_lut

__all__ = [
    "LUTData",
    "parse_cube_lut",
    "create_identity_lut",
    "sample_lut",
    "apply_lut",
    "LUTCache",
    "LUTCacheStats",
]
