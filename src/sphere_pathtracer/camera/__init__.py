"""Camera module: pinhole camera and kernel-side ray generation."""

from .pinhole import PinholeCamera, primary_ray

__all__ = ["PinholeCamera", "primary_ray"]
