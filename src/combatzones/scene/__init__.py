"""In-memory host scene with an OpenCV drawing backend."""

from combatzones.scene.canvas import CvZoneLayer
from combatzones.scene.entity import BodyData, Scene, SceneEntity, Viewer
from combatzones.scene.loader import load_scene, scene_from_dict

__all__ = [
    "BodyData",
    "CvZoneLayer",
    "Scene",
    "SceneEntity",
    "Viewer",
    "load_scene",
    "scene_from_dict",
]
