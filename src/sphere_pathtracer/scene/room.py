"""Reference room scene built entirely from spheres.

The room is a unit box, roughly [-1, 1] on every axis, whose walls are huge
spheres (radius 1000) placed just outside it, so that their visible caps are
nearly flat:

- Left wall: red diffuse
- Right wall: blue diffuse
- Ceiling: white diffuse, emissive (the only light source)
- Floor and back wall: grey diffuse
- A small yellow sphere and a larger cyan sphere on the floor

The front of the room is open toward the camera, which sits at z = -4 looking
down +z.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sphere_pathtracer.scene.room import create_room_scene
    >>> scene, camera = create_room_scene()
    >>> len(scene)
    7
"""

from dataclasses import dataclass

from sphere_pathtracer.camera.pinhole import PinholeCamera
from sphere_pathtracer.materials.material import Material
from sphere_pathtracer.scene.scene import Scene, SphereInfo

# =============================================================================
# Room Constants
# =============================================================================

# Radius of the wall spheres and the distance of their centers from the origin
WALL_RADIUS = 1000.0
WALL_OFFSET = 1001.0

RED_WALL_ALBEDO = (0.8, 0.1, 0.1)
BLUE_WALL_ALBEDO = (0.1, 0.1, 0.8)
CEILING_ALBEDO = (0.8, 0.8, 0.8)
GREY_ALBEDO = (0.6, 0.6, 0.6)
YELLOW_SPHERE_ALBEDO = (0.9, 0.9, 0.1)
CYAN_SPHERE_ALBEDO = (0.1, 0.9, 0.9)

CAMERA_EYE = (0.0, 0.0, -4.0)
CAMERA_LOOK_AT = (0.0, 0.0, 6.0)
CAMERA_VFOV = 36.0


@dataclass
class RoomParams:
    """Parameters for customizing the room scene.

    Attributes:
        light_emission: Emitted radiance of the ceiling (RGB).
        mirror_chance: Probability that a bounce off the cyan sphere is a
            mirror reflection. 0 keeps it purely diffuse.
        background: Radiance for rays leaving through the open front.
    """

    light_emission: tuple[float, float, float] = (1.0, 1.0, 1.0)
    mirror_chance: float = 0.0
    background: tuple[float, float, float] = (0.0, 0.0, 0.0)


def create_room_spheres(params: RoomParams | None = None) -> list[SphereInfo]:
    """Build the sphere list of the room without uploading it."""
    if params is None:
        params = RoomParams()

    def wall(center: tuple[float, float, float], material: Material) -> SphereInfo:
        return SphereInfo(center=center, radius=WALL_RADIUS, material=material)

    return [
        wall((-WALL_OFFSET, 0.0, 0.0), Material(diffuse=RED_WALL_ALBEDO)),
        wall((WALL_OFFSET, 0.0, 0.0), Material(diffuse=BLUE_WALL_ALBEDO)),
        wall(
            (0.0, WALL_OFFSET, 0.0),
            Material(diffuse=CEILING_ALBEDO, emission=params.light_emission),
        ),
        wall((0.0, -WALL_OFFSET, 0.0), Material(diffuse=GREY_ALBEDO)),
        wall((0.0, 0.0, WALL_OFFSET), Material(diffuse=GREY_ALBEDO)),
        SphereInfo(
            center=(-0.6, -0.7, -0.6),
            radius=0.3,
            material=Material(diffuse=YELLOW_SPHERE_ALBEDO),
        ),
        SphereInfo(
            center=(0.3, -0.4, 0.3),
            radius=0.6,
            material=Material(
                diffuse=CYAN_SPHERE_ALBEDO,
                specular=(1.0, 1.0, 1.0),
                specular_chance=params.mirror_chance,
            ),
        ),
    ]


def create_room_scene(params: RoomParams | None = None) -> tuple[Scene, PinholeCamera]:
    """Create the reference room scene and its camera.

    Args:
        params: Optional customization. Defaults to RoomParams().

    Returns:
        Tuple of (scene, camera).

    Example:
        >>> scene, camera = create_room_scene(RoomParams(mirror_chance=0.3))
        >>> camera.vfov
        36.0
    """
    if params is None:
        params = RoomParams()

    scene = Scene(create_room_spheres(params))
    camera = PinholeCamera(
        eye=CAMERA_EYE,
        look_at=CAMERA_LOOK_AT,
        vfov=CAMERA_VFOV,
        background=params.background,
    )
    return scene, camera
