# blogapp/services/__init__.py
from .directory import AdminDirectory
from .posts import ContentStoreGateway
from .profiles import ProfileStore

__all__ = ["AdminDirectory", "ContentStoreGateway", "ProfileStore"]
