from .base import UUIDModel, TimestampedModel

__all__ = ['UUIDModel', 'TimestampedModel']
