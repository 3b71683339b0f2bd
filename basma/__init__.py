from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData
from flask_migrate import Migrate
from flask_bcrypt import Bcrypt


# 1. Create extension instances WITHOUT an app
# They will be "connected" to the app inside the factory

# Define naming convention for SQLAlchemy
convention = {
    "ix": 'ix_%(column_0_label)s',
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}
metadata = MetaData(naming_convention=convention)

db = SQLAlchemy(metadata=metadata)
bcrypt = Bcrypt()
migrate = Migrate()
from flask_mail import Mail
mail = Mail()
from flask_caching import Cache
cache = Cache()


from flask_login import LoginManager
login_manager = LoginManager()
login_manager.login_view = 'auth_bp.login'
login_manager.login_message_category = 'info'

from flask_principal import Principal, Identity, AnonymousIdentity, identity_loaded
principal = Principal(use_sessions=False)


def create_app(config_class='config.Config'):
    """
    Application Factory Function
    """

    app = Flask(__name__, instance_relative_config=True)

    # Load configuration from the config.py file
    app.config.from_object(config_class)

    db.init_app(app)
    bcrypt.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    principal.init_app(app)
    mail.init_app(app)
    cache.init_app(app)

    # Set up identity loader for Flask-Principal
    from flask_login import current_user
    from flask_principal import RoleNeed, UserNeed

    @principal.identity_loader
    def load_identity_from_session():
        """Derive the Principal identity from the Flask-Login session on every request."""
        if current_user.is_authenticated:
            return Identity(current_user.id)
        return AnonymousIdentity()

    @identity_loaded.connect_via(app)
    def on_identity_loaded(sender, identity):
        """Load the member role need into identity."""
        from .models import Member

        if isinstance(identity, AnonymousIdentity) or identity.id is None:
            return

        identity.member = db.session.get(Member, identity.id)

        if identity.member:
            identity.provides.add(UserNeed(identity.id))
            identity.provides.add(RoleNeed(identity.member.role_name))

    register_error_handlers(app)

    # Register Blueprints
    # Imports are *inside* the factory to avoid circular import issues
    with app.app_context():
        from .auth.routes import auth_bp
        from .feed_routes import feed_bp
        from .blog_routes import blog_bp
        from .admin_blog_routes import admin_blog_bp
        from .meetings_routes import meetings_bp
        from .members_routes import members_bp
        from .points_routes import points_bp
        from .leaderboard_routes import leaderboard_bp
        from .public_routes import public_bp

        # Import models so SQLAlchemy knows about them
        from . import models

        app.register_blueprint(auth_bp)
        app.register_blueprint(feed_bp)
        app.register_blueprint(blog_bp)
        app.register_blueprint(admin_blog_bp)
        app.register_blueprint(meetings_bp)
        app.register_blueprint(members_bp)
        app.register_blueprint(points_bp)
        app.register_blueprint(leaderboard_bp)
        app.register_blueprint(public_bp)

    # Register CLI commands
    from basma.commands.create_admin import create_admin
    from basma.commands.recalculate_points import recalculate_points

    app.cli.add_command(create_admin)
    app.cli.add_command(recalculate_points)

    return app


def register_error_handlers(app):
    """Map the service exception hierarchy onto JSON responses."""
    from sqlalchemy.exc import OperationalError
    from .exceptions import BasmaError, ValidationError, BackendUnavailableError, PermissionDeniedError

    @app.errorhandler(BasmaError)
    def handle_basma_error(error):
        db.session.rollback()
        payload = {'success': False, 'error': str(error)}
        if isinstance(error, ValidationError) and error.details:
            payload['details'] = error.details
        if isinstance(error, PermissionDeniedError):
            app.logger.warning(f"Permission denied: {error}")
        elif isinstance(error, BackendUnavailableError):
            app.logger.error(f"Backend unavailable: {error}")
        return jsonify(payload), error.status_code

    @app.errorhandler(OperationalError)
    def handle_operational_error(error):
        db.session.rollback()
        app.logger.error(f"Database error: {error}")
        return jsonify({'success': False, 'error': str(BackendUnavailableError())}), 503

    @app.errorhandler(403)
    def forbidden(error):
        return jsonify({'success': False, 'error': 'Forbidden'}), 403

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'success': False, 'error': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'success': False, 'error': 'Method not allowed'}), 405

    @app.errorhandler(413)
    def payload_too_large(error):
        return jsonify({'success': False, 'error': 'File too large'}), 413
