"""Error types raised by the elevation-to-STL pipeline"""


class TerrainStlError(ValueError):
    """Base class for all pipeline errors"""


class ResolutionError(TerrainStlError):
    """Latitude, longitude or elevation could not be located or interpreted"""


class StructuralError(TerrainStlError):
    """Grid shape is inconsistent or too small to triangulate"""


class ExportError(TerrainStlError):
    """Mesh parts could not be merged or serialized"""
