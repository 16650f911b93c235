from __future__ import annotations


class IdPhotoError(Exception):
    """Base class for errors surfaced to the caller."""


class InvalidGeometry(IdPhotoError, ValueError):
    """Non-finite, non-positive or inverted rectangle/size input."""


class InvalidCrop(InvalidGeometry):
    """A crop rectangle with no usable area reached the rasterizer."""


class BufferLoadFailure(IdPhotoError):
    """The source image could not be decoded."""


class NoOutputProduced(IdPhotoError):
    """A collaborator step returned no usable image."""
