# blogapp/models/__init__.py
"""
Paquete de modelos de la aplicación.
Importa aquí los modelos para que puedan ser referenciados como:
from blogapp.models import Post
"""
from .blogUser import BlogUser, ROLES
from .post import Post

__all__ = ["Post", "BlogUser", "ROLES"]
