# blogapp/routes/__init__.py
from flask import Flask

def register_routes(app: Flask):
    """
    Registrar todos los blueprints de la carpeta routes.
    Llamá a register_routes(app) desde blogapp.create_app().
    """
    # Import local para evitar problemas de import circular al inicializar la app
    from .post_routes import post_bp
    from .auth import auth_bp
    from .admin_routes import admin_bp
    app.register_blueprint(post_bp, url_prefix="/posts")
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(admin_bp, url_prefix="/admin")
