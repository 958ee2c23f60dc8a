import logging
import os

import click
from flask import Flask

from donorlink.config import config_by_name
from donorlink.errors import register_error_handlers
from donorlink.extensions import db, migrate, bcrypt, jwt, cors


def create_app(config_object=None):
    """Flask application factory"""
    app = Flask(__name__)

    if config_object is None:
        config_object = config_by_name[os.environ.get('DONORLINK_CONFIG', 'default')]
    app.config.from_object(config_object)

    logging.basicConfig(format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    app.logger.setLevel(app.config['LOG_LEVEL'])
    logging.getLogger('donorlink').setLevel(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    bcrypt.init_app(app)
    jwt.init_app(app)
    cors.init_app(app)

    # Import here so models and JWT callbacks register against the shared extensions
    from donorlink import auth  # noqa: F401
    from donorlink.controllers.auth_controller import auth_bp
    from donorlink.controllers.donor_controller import donor_bp
    from donorlink.controllers.blood_request_controller import blood_request_bp
    from donorlink.controllers.report_controller import report_bp

    app.register_blueprint(auth_bp, url_prefix='/api/v1/auth')
    app.register_blueprint(donor_bp, url_prefix='/api/v1/donors')
    app.register_blueprint(blood_request_bp, url_prefix='/api/v1/bloodrequests')
    app.register_blueprint(report_bp, url_prefix='/api/v1/reports')

    register_error_handlers(app)

    @app.cli.command('create-admin')
    @click.argument('email')
    @click.password_option()
    def create_admin(email, password):
        """Create an admin account"""
        from donorlink.services.accounts import create_user
        user = create_user(email, password, role='admin')
        click.echo(f'Admin {user.email} created')

    return app


if __name__ == '__main__':
    app = create_app(config_by_name['development'])
    app.run(debug=True)
