"""Material model.

A material combines a diffuse lobe, a mirror lobe chosen with probability
specular_chance, and an emission term. The albedos also set the Russian
roulette continuation probability.

Components:
    material: Host-side Material and kernel-side MaterialRecord
    lambertian: Diffuse lobe (uniform hemisphere sampling)
    specular: Mirror lobe
"""

from .lambertian import scatter_diffuse
from .material import Material, MaterialRecord, continuation_probability
from .specular import scatter_specular

__all__ = [
    "Material",
    "MaterialRecord",
    "continuation_probability",
    "scatter_diffuse",
    "scatter_specular",
]
