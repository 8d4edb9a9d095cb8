from blogapp.extensions import db


# blogapp/models/post.py
class Post(db.Model):
    __tablename__ = "posts"

    id = db.Column(db.Integer, primary_key=True)

    # 🧠 Contenido principal
    title = db.Column(db.String(255), nullable=False)
    sub_title = db.Column(db.String(500), nullable=True)
    content = db.Column(db.Text, nullable=False, default="")
    category = db.Column(db.String(100), nullable=True)

    # 🖼️ Imagen destacada (la URL ya viene subida desde el front)
    image_url = db.Column(db.String, nullable=True)

    # 👤 Autor: uid de la identidad, no cambia después de crear el post
    author_id = db.Column(db.String(128), nullable=False, index=True)

    is_published = db.Column(db.Boolean, nullable=False, default=False)

    slug = db.Column(db.String(255), unique=True, nullable=False)

    # ⏰ Timestamps: created_at lo pone el cliente (ISO), timestamp lo asigna la base
    created_at = db.Column(db.String(40), nullable=True)
    timestamp = db.Column(db.DateTime, server_default=db.func.now(), index=True)
    updated_at = db.Column(db.DateTime, nullable=True)

    # Campos que un PATCH puede tocar; author_id, slug y timestamp quedan fuera
    EDITABLE_FIELDS = ("title", "sub_title", "content", "category", "image_url", "is_published")

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "sub_title": self.sub_title,
            "content": self.content,
            "category": self.category,
            "image_url": self.image_url,
            "author_id": self.author_id,
            "is_published": self.is_published,
            "slug": self.slug,
            "created_at": self.created_at,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Post {self.title}>"
