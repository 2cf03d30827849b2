"""Unity YAML Editor - structure-preserving editor for Unity scene and prefab files."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("unity-yaml-editor")
except PackageNotFoundError:
    # Package not installed (development mode without editable install)
    __version__ = "0.3.0"

from unity_yaml_editor.core.document import UnityDocument

__all__ = ["__version__", "UnityDocument"]
