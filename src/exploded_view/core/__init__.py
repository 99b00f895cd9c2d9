"""Core engine: geometry, clustering, travel model and explosion control."""

from .config import ExplodeConfig  # noqa: F401
from .controller import (  # noqa: F401
    ExplodedAssembly,
    ExplosionController,
    ExplosionState,
    prepare_assembly,
)
from .geometry import Box, Plane  # noqa: F401
from .scene import SceneNode  # noqa: F401
