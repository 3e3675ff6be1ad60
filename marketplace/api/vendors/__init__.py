from .routes import vendors_bp

__all__ = ["vendors_bp"]
