from .routes import feature_flags_bp

__all__ = ["feature_flags_bp"]
