"""3D LUT data, .cube parsing and sampling.

Supports the Adobe/Resolve ``.cube`` subset used for grading: ``TITLE``,
``LUT_3D_SIZE``, ``DOMAIN_MIN``/``DOMAIN_MAX`` and ``LUT_3D_INPUT_RANGE``.
Data rows are RGB triplets with red varying fastest.

Example:
    >>> lut = parse_cube_lut(Path("film.cube").read_text())
    >>> sample_lut(0.5, 0.4, 0.3, lut, intensity=0.75)
    RGBValue(r=0.53, g=0.41, b=0.27)
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from gradekit.config.values import RGBValue
from gradekit.constants import DEFAULT_CUBE_SIZE, MAX_CUBE_SIZE, MIN_CUBE_SIZE
from gradekit.errors import MalformedLUT, UnsupportedLUTSize
from gradekit.lut.kernels import apply_lut_numba, trilinear_sample_numba
from gradekit.shared.frames import as_pixel_array

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class LUTData:
    """A parsed 3D LUT.

    Attributes:
        title: Optional title from the ``TITLE`` keyword
        size: Edge length of the cube
        domain_min: Input domain minimum (r, g, b)
        domain_max: Input domain maximum (r, g, b)
        data: Flat float32 values, ``size**3 * 3`` long, read-only

    Two LUTs compare equal when their content is equal, so a LUT can sit
    inside a hashable :class:`GradingDescriptor`.
    """

    title: str
    size: int
    domain_min: tuple[float, float, float]
    domain_max: tuple[float, float, float]
    data: NDArray[np.float32] = field(repr=False)
    fingerprint: str = field(init=False, repr=False)

    def __post_init__(self):
        if self.size < MIN_CUBE_SIZE or self.size > MAX_CUBE_SIZE:
            raise UnsupportedLUTSize(self.size, MIN_CUBE_SIZE, MAX_CUBE_SIZE)

        data = np.ascontiguousarray(np.asarray(self.data, dtype=np.float32).reshape(-1))
        expected = self.size**3 * 3
        if data.shape[0] != expected:
            raise MalformedLUT(
                f"expected {expected} values for LUT_3D_SIZE {self.size}, got {data.shape[0]}",
                expected=expected,
                actual=int(data.shape[0]),
            )
        data.flags.writeable = False

        domain_min = tuple(float(v) for v in self.domain_min)
        domain_max = tuple(float(v) for v in self.domain_max)
        if any(hi <= lo for lo, hi in zip(domain_min, domain_max, strict=True)):
            raise MalformedLUT(f"DOMAIN_MAX {domain_max} must exceed DOMAIN_MIN {domain_min}")

        digest = hashlib.sha1(data.tobytes())
        digest.update(repr((self.size, domain_min, domain_max)).encode())

        object.__setattr__(self, "data", data)
        object.__setattr__(self, "domain_min", domain_min)
        object.__setattr__(self, "domain_max", domain_max)
        object.__setattr__(self, "fingerprint", digest.hexdigest())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LUTData):
            return NotImplemented
        return self.fingerprint == other.fingerprint

    def __hash__(self) -> int:
        return hash(self.fingerprint)

    @property
    def table(self) -> NDArray[np.float32]:
        """Values as a [size, size, size, 3] view indexed ``[b, g, r]``."""
        return self.data.reshape(self.size, self.size, self.size, 3)

    @property
    def domain_arrays(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Domain bounds as float64 arrays for the kernels."""
        return (
            np.array(self.domain_min, dtype=np.float64),
            np.array(self.domain_max, dtype=np.float64),
        )

    def to_cube_text(self) -> str:
        """Serialize back to ``.cube`` text.

        :returns: File content that :func:`parse_cube_lut` reads back to an equal LUT
        """
        lines = []
        if self.title:
            lines.append(f'TITLE "{self.title}"')
        lines.append(f"LUT_3D_SIZE {self.size}")
        lines.append("DOMAIN_MIN {:.6f} {:.6f} {:.6f}".format(*self.domain_min))
        lines.append("DOMAIN_MAX {:.6f} {:.6f} {:.6f}".format(*self.domain_max))
        lines.append("")
        for r, g, b in self.data.reshape(-1, 3):
            lines.append(f"{r:.9g} {g:.9g} {b:.9g}")
        return "\n".join(lines) + "\n"


def _parse_floats(tokens: list[str], count: int, line: int, what: str) -> list[float]:
    if len(tokens) != count:
        raise MalformedLUT(f"{what} expects {count} numbers, got {len(tokens)}", line=line)
    try:
        return [float(t) for t in tokens]
    except ValueError:
        raise MalformedLUT(f"{what} has a non-numeric value: {' '.join(tokens)}", line=line) from None


def _parse_size(tokens: list[str], line: int) -> int:
    if len(tokens) != 1:
        raise MalformedLUT("LUT_3D_SIZE expects a single integer", line=line)
    try:
        size = int(tokens[0])
    except ValueError:
        raise MalformedLUT(f"LUT_3D_SIZE is not an integer: {tokens[0]}", line=line) from None
    if size < MIN_CUBE_SIZE or size > MAX_CUBE_SIZE:
        raise UnsupportedLUTSize(size, MIN_CUBE_SIZE, MAX_CUBE_SIZE)
    return size


def parse_cube_lut(text: str) -> LUTData:
    """Parse ``.cube`` text into a LUTData.

    Blank lines and ``#`` comments are skipped. Keywords are case-insensitive.
    Every other line must hold exactly three numbers.

    :param text: File content
    :returns: Parsed LUT
    :raises MalformedLUT: On structural errors or a value count other than ``size**3 * 3``
    :raises UnsupportedLUTSize: If the size is below 2 or above 256
    """
    title = ""
    size = None
    domain_min = [0.0, 0.0, 0.0]
    domain_max = [1.0, 1.0, 1.0]
    values: list[float] = []

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        tokens = line.split()
        keyword = tokens[0].upper()

        if keyword == "TITLE":
            title = line[len(tokens[0]) :].strip().strip('"')
        elif keyword == "LUT_3D_SIZE":
            size = _parse_size(tokens[1:], lineno)
        elif keyword == "DOMAIN_MIN":
            domain_min = _parse_floats(tokens[1:], 3, lineno, "DOMAIN_MIN")
        elif keyword == "DOMAIN_MAX":
            domain_max = _parse_floats(tokens[1:], 3, lineno, "DOMAIN_MAX")
        elif keyword == "LUT_3D_INPUT_RANGE":
            lo, hi = _parse_floats(tokens[1:], 2, lineno, "LUT_3D_INPUT_RANGE")
            domain_min = [lo, lo, lo]
            domain_max = [hi, hi, hi]
        elif keyword == "LUT_1D_SIZE":
            raise MalformedLUT("1D LUTs are not supported", line=lineno)
        else:
            values.extend(_parse_floats(tokens, 3, lineno, "data row"))

    if size is None:
        raise MalformedLUT("missing LUT_3D_SIZE")

    expected = size**3 * 3
    if len(values) != expected:
        raise MalformedLUT(
            f"expected {expected} values ({size}^3 triplets), got {len(values)}",
            expected=expected,
            actual=len(values),
        )

    lut = LUTData(
        title=title,
        size=size,
        domain_min=tuple(domain_min),
        domain_max=tuple(domain_max),
        data=np.array(values, dtype=np.float32),
    )
    logger.debug("[LUT] Parsed %s (size=%d)", title or "<untitled>", size)
    return lut


def create_identity_lut(size: int = DEFAULT_CUBE_SIZE, title: str = "Identity") -> LUTData:
    """Create a LUT that maps every lattice point to itself.

    :param size: Cube edge length
    :param title: LUT title
    :returns: Identity LUTData
    """
    grid = np.linspace(0.0, 1.0, size, dtype=np.float64)
    b, g, r = np.meshgrid(grid, grid, grid, indexing="ij")
    data = np.stack([r, g, b], axis=-1).astype(np.float32).reshape(-1)
    return LUTData(title=title, size=size, domain_min=(0.0, 0.0, 0.0), domain_max=(1.0, 1.0, 1.0), data=data)


def sample_lut(r: float, g: float, b: float, lut: LUTData, intensity: float = 1.0) -> RGBValue:
    """Sample a LUT at one RGB value.

    :param r: Red input
    :param g: Green input
    :param b: Blue input
    :param lut: LUT to sample
    :param intensity: Blend with the input, 0 = input, 1 = full LUT
    :returns: Blended value clamped to [0, 1]
    """
    domain_min, domain_max = lut.domain_arrays
    sampled = trilinear_sample_numba(lut.data, lut.size, domain_min, domain_max, float(r), float(g), float(b))

    out = []
    for value, s in zip((r, g, b), sampled, strict=True):
        blended = value + (s - value) * intensity
        out.append(min(max(blended, 0.0), 1.0))
    return RGBValue(*out)


def apply_lut(frame: NDArray, lut: LUTData, intensity: float = 1.0) -> NDArray[np.float32]:
    """Apply a LUT to every pixel of a frame.

    :param frame: RGB frame [H, W, 3] or [N, 3]
    :param lut: LUT to sample
    :param intensity: Blend with the input, 0 = input, 1 = full LUT
    :returns: New float32 frame of the same shape, clamped to [0, 1]
    """
    pixels, shape = as_pixel_array(frame)
    out = np.empty_like(pixels)
    domain_min, domain_max = lut.domain_arrays
    apply_lut_numba(pixels, lut.data, lut.size, domain_min, domain_max, float(intensity), out)
    return out.reshape(shape)
