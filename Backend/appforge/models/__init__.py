from .project import Project, User
from .conversation import Message, Plan, GalleryImage

DOCUMENT_MODELS = [Project, User, Message, Plan, GalleryImage]

__all__ = ["Project", "User", "Message", "Plan", "GalleryImage", "DOCUMENT_MODELS"]
