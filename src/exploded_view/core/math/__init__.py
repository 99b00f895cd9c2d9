"""Math utilities namespace."""

from .quat import quat_from_axis_angle, quat_normalize, quat_to_rotmat  # noqa: F401
from .transform import (  # noqa: F401
    compose_matrix,
    normal_matrix,
    transform_direction,
    transform_points,
)
from .vector import norm, unit, unit_or  # noqa: F401
