"""Surface material model: diffuse + mirror lobes with emission.

A material mixes two scattering lobes and an emitter:

- diffuse: albedo of the diffuse lobe (uniform hemisphere bounce)
- specular: tint of the perfect mirror lobe
- specular_chance: probability of picking the mirror lobe at a bounce
- emission: radiance emitted by the surface, unbounded above zero

Host code builds ``Material`` instances (validated, immutable). Kernels see the
same data as ``MaterialRecord``.

Example:
    >>> from sphere_pathtracer.materials.material import Material
    >>> light = Material(emission=(4.0, 4.0, 4.0))
    >>> chrome = Material(diffuse=(0.1, 0.1, 0.1), specular=(0.9, 0.9, 0.9), specular_chance=0.8)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from sphere_pathtracer.core.ray import as_vec3_tuple, max_component

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Material:
    """Host-side material description.

    Attributes:
        diffuse: Diffuse albedo (R, G, B), each component in [0, 1].
        emission: Emitted radiance (R, G, B), each component >= 0.
        specular: Mirror tint (R, G, B), each component in [0, 1].
        specular_chance: Probability in [0, 1] of sampling the mirror lobe.

    Raises:
        ValueError: If any component is outside its allowed range.
    """

    diffuse: tuple[float, float, float] = (0.0, 0.0, 0.0)
    emission: tuple[float, float, float] = (0.0, 0.0, 0.0)
    specular: tuple[float, float, float] = (0.0, 0.0, 0.0)
    specular_chance: float = 0.0

    def __post_init__(self) -> None:
        diffuse = as_vec3_tuple(self.diffuse, "diffuse")
        emission = as_vec3_tuple(self.emission, "emission")
        specular = as_vec3_tuple(self.specular, "specular")

        # Albedos above 1 would give a continuation probability above 1
        for name, color in (("diffuse", diffuse), ("specular", specular)):
            for i, component in enumerate(color):
                if component < 0.0 or component > 1.0:
                    raise ValueError(
                        f"{name} component {i} = {component} is outside [0, 1]. "
                        "This would violate energy conservation."
                    )
        for i, component in enumerate(emission):
            if component < 0.0:
                raise ValueError(f"emission component {i} = {component} must be non-negative")

        chance = float(self.specular_chance)
        if not 0.0 <= chance <= 1.0:
            raise ValueError(f"specular_chance must be in [0, 1], got {chance}")

        object.__setattr__(self, "diffuse", diffuse)
        object.__setattr__(self, "emission", emission)
        object.__setattr__(self, "specular", specular)
        object.__setattr__(self, "specular_chance", chance)


@ti.dataclass
class MaterialRecord:
    """Kernel-side copy of a Material.

    Attributes:
        diffuse: Diffuse albedo (RGB).
        emission: Emitted radiance (RGB).
        specular: Mirror tint (RGB).
        specular_chance: Probability of the mirror lobe.
    """

    diffuse: vec3
    emission: vec3
    specular: vec3
    specular_chance: ti.f32


@ti.func
def continuation_probability(material: MaterialRecord) -> ti.f32:
    """Russian roulette survival probability from the material's albedos.

    The largest diffuse channel, or the largest specular channel when the
    mirror lobe can be sampled at all, whichever is greater.
    """
    q = max_component(material.diffuse)
    if material.specular_chance > 0.0:
        q = ti.max(q, max_component(material.specular))
    return q
