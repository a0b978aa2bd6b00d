from app.models.policy import Policy

__all__ = ["Policy"]
