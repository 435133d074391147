"""
Growth path generation for branches.

A growth path is an ordered list of GrowthFrames from the branch base to its
tip. Each step applies a small random pitch/yaw/roll to the cumulative
orientation and advances along the new forward direction by a constant
segment length.
"""

from typing import List, Optional
import numpy as np
import logging
from scipy.spatial.transform import Rotation

from ..core.rng import RandomSource
from ..core.types import GrowthFrame, FORWARD_AXIS

logger = logging.getLogger(__name__)

CURVATURE_EPSILON = 1e-6
CURVATURE_FLOOR = 1e-3
ROLL_FACTOR = 0.5


def generate_growth_path(
    segment_count: int,
    segment_length: float,
    curvature_strength: float,
    curvature_variation: float,
    seed: Optional[int] = None,
) -> List[GrowthFrame]:
    """
    Generate the frames of a curving branch centerline.

    Parameters
    ----------
    segment_count : int
        Number of frames to return (>= 1)
    segment_length : float
        Distance between consecutive frames (> 0)
    curvature_strength : float
        Pitch/yaw amplitude per step in radians
    curvature_variation : float
        Roll amplitude per step in radians (scaled by 0.5)
    seed : int, optional
        Seed for reproducibility

    Returns
    -------
    List[GrowthFrame]
        Frames from base (origin, identity orientation) to tip

    Notes
    -----
    Amplitudes below CURVATURE_EPSILON are replaced with CURVATURE_FLOOR so
    the sampling range is never empty.
    """
    if segment_count < 1:
        raise ValueError(f"segment_count must be >= 1, got {segment_count}")
    if not segment_length > 0:
        raise ValueError(f"segment_length must be > 0, got {segment_length}")

    if curvature_strength < CURVATURE_EPSILON:
        curvature_strength = CURVATURE_FLOOR
    if curvature_variation < CURVATURE_EPSILON:
        curvature_variation = CURVATURE_FLOOR

    rng = RandomSource(seed)

    position = np.zeros(3)
    orientation = Rotation.identity()
    frames = [GrowthFrame(position=position.copy(), orientation=orientation)]

    for _ in range(segment_count - 1):
        pitch = rng.uniform(-curvature_strength, curvature_strength)
        yaw = rng.uniform(-curvature_strength, curvature_strength)
        roll = rng.uniform(-curvature_variation, curvature_variation) * ROLL_FACTOR

        step = Rotation.from_euler("xyz", [pitch, yaw, roll])
        orientation = step * orientation

        position = position + orientation.apply(FORWARD_AXIS) * segment_length
        frames.append(GrowthFrame(position=position.copy(), orientation=orientation))

    logger.debug(
        f"Generated growth path: {segment_count} frames, "
        f"segment_length={segment_length:.4f}, seed={rng.seed}"
    )

    return frames


def frame_positions(frames: List[GrowthFrame]) -> np.ndarray:
    """Stack frame positions into an (N, 3) array."""
    if not frames:
        return np.zeros((0, 3))
    return np.array([f.position for f in frames])


def path_length(frames: List[GrowthFrame]) -> float:
    """Total centerline length of a growth path."""
    positions = frame_positions(frames)
    if len(positions) < 2:
        return 0.0
    return float(np.linalg.norm(np.diff(positions, axis=0), axis=1).sum())
