"""Assembly sources: JSON definitions and mesh files."""

from .assembly import (  # noqa: F401
    AssemblyLoadError,
    assembly_to_scene,
    load_assembly,
    open_assembly,
    save_assembly,
    scene_to_definition,
    validate_assembly,
)
