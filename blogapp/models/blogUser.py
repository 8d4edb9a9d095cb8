from datetime import datetime
from blogapp.extensions import db

ROLES = ("user", "admin")


class BlogUser(db.Model):
    """Perfil local de un usuario; la identidad vive en el proveedor externo."""
    __tablename__ = "blog_users"

    id = db.Column(db.String(128), primary_key=True)  # uid del proveedor de identidad
    email = db.Column(db.String(120), nullable=False)
    display_name = db.Column(db.String(120), nullable=False)

    role = db.Column(db.String(20), nullable=False, default="user")  # 'user' o 'admin'
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=True)

    # Se incrementa en cada logout; los JWT con otra versión dejan de valer
    token_version = db.Column(db.Integer, nullable=False, default=0)

    @property
    def is_admin(self):
        return self.role == "admin"

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "display_name": self.display_name,
            "role": self.role,
            "is_admin": self.is_admin,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<BlogUser {self.email} ({self.role})>"
