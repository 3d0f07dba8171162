from .auth_routes import auth_bp
from .day_routes import day_bp
from .week_routes import week_bp
from .group_routes import group_bp
from .copy_routes import copy_bp
from .reaction_routes import reaction_bp

def register_routes(app):
    app.register_blueprint(auth_bp)
    app.register_blueprint(day_bp)
    app.register_blueprint(week_bp)
    app.register_blueprint(group_bp)
    app.register_blueprint(copy_bp)
    app.register_blueprint(reaction_bp)
