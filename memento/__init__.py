import logging
import redis
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix
from .config import Config
from .errors import VaultError
from .models import db
from flask_migrate import Migrate
from dotenv import load_dotenv

load_dotenv()


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config())
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    db.init_app(app)
    Migrate(app, db)
    # Trust reverse proxy headers (Render/Heroku)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    with app.app_context():
        db.create_all()

    from .routes_public import bp as public_bp
    from .routes_api import bp as api_bp, vault_error, cache_error
    from .routes_admin import bp as admin_bp
    app.register_blueprint(public_bp)
    app.register_blueprint(api_bp, url_prefix='/api')
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_error_handler(VaultError, vault_error)
    app.register_error_handler(redis.RedisError, cache_error)

    @app.get('/health')
    def health():
        return {'ok': True}

    return app
