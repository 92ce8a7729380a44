# appforge/media/__init__.py
from .images import ImagePipeline, infer_mime_type

__all__ = ["ImagePipeline", "infer_mime_type"]
