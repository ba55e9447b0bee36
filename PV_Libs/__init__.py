"""
PV_Libs - Pixel Voxel Library Modules

This package contains the asset core of the Pixel Voxel pixel-art manager,
organized into specialized sub-packages:

- ColorLib: Hex/RGB codec, color maps, palette analysis and matching
- ImageEditingLib: Raster surfaces, layers, drawing tools, undo history and the editor session
- ImportLib: Scale detection, hard-edge downscaling and validated import
"""

__version__ = "0.1.0"
