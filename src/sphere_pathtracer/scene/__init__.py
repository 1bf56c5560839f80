"""Scene module: sphere container, nearest-hit queries and the room scene."""

from .room import RoomParams, create_room_scene, create_room_spheres
from .scene import HitInfo, Scene, SphereInfo

__all__ = [
    "HitInfo",
    "RoomParams",
    "Scene",
    "SphereInfo",
    "create_room_scene",
    "create_room_spheres",
]
