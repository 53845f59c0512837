from .shape import Shape, translate

__all__ = ["Shape", "translate"]
