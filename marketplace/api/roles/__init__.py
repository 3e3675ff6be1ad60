from .routes import roles_bp

__all__ = ["roles_bp"]
