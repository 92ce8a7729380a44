# appforge/services/__init__.py
from .container import Services, build_services

__all__ = ["Services", "build_services"]
