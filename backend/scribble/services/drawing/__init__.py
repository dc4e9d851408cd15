"""Raster drawing engine: pixel buffer, strokes, flood fill, undo and accuracy scoring."""
