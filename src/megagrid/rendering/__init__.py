from .raster_surface import RasterSurface

__all__ = ["RasterSurface"]
