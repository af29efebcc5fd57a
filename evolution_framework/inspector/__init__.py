from .base_inspector import BaseInspector, StaticInspector
from .filesystem_inspector import FilesystemInspector

__all__ = ["BaseInspector", "StaticInspector", "FilesystemInspector"]
