# Creates the Flask app (App Factory)
from collections import namedtuple
from flask import Flask, jsonify
from flask_cors import CORS
import os
import logging
from .captcha import ChallengeVerifier
from .comments import CommentStore
from .config import Config, Settings
from .errors import FlatlogError
from .posts import PostRepository
from .security import TokenAuthenticator

Services = namedtuple('Services', 'settings auth posts comments challenge')


def build_services(settings: Settings, clock=None) -> Services:
    auth_kwargs = {'clock': clock} if clock is not None else {}
    comments = CommentStore(settings.comments_dir)
    return Services(
        settings=settings,
        auth=TokenAuthenticator(settings.admin_password, window=settings.token_window, **auth_kwargs),
        posts=PostRepository(settings.posts_dir, comments=comments),
        comments=comments,
        challenge=ChallengeVerifier(
            settings.hcaptcha_site_key,
            settings.hcaptcha_secret_key,
            settings.hcaptcha_verify_url,
            settings.hcaptcha_timeout,
        ),
    )


# Application Factory Function
def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.from_mapping(test_config)

    # Logging configuration
    level = app.config.get('LOG_LEVEL', 'INFO')
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level,
                            format='%(asctime)s %(levelname)s %(name)s - %(message)s')
    app.logger.setLevel(level)

    settings = Settings.from_mapping(app.config)
    if settings.uses_default_password:
        app.logger.warning('ADMIN_PASSWORD is not set; the default password is in use')

    # Ensure folders exist
    for folder in (settings.posts_dir, settings.comments_dir):
        os.makedirs(os.path.join(folder, 'trash'), exist_ok=True)

    app.extensions['flatlog'] = build_services(settings, clock=app.config.get('CLOCK'))

    # Extensions
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    @app.errorhandler(FlatlogError)
    def handle_flatlog_error(error):
        app.logger.debug(f'{type(error).__name__}: {error.message}')
        return jsonify({'message': error.message}), error.status_code

    from .routes import api as api_blueprint
    from .pages import pages as pages_blueprint
    app.register_blueprint(api_blueprint, url_prefix='/api')
    app.register_blueprint(pages_blueprint)

    app.logger.debug('Application created and configured')
    return app
