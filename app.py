from flask import Flask, g, jsonify
from config import Config
from extensions import db, migrate, csrf
from services import DreamLab
from services.storage import DatabaseStorage
from utils.images import normalize_image

def create_app(config_class=Config, storage=None, analyzer=None, illustrator=None, oracle=None):
    # Create and configure the app
    app = Flask(__name__)
    app.config.from_object(config_class)
    config_class.init_app(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)  # Initialize Flask-Migrate
    csrf.init_app(app)

    # Import models here to avoid circular imports
    import models  # noqa: F401

    from ai_services import DreamAnalyzer, DreamIllustrator, Oracle
    api_key = app.config.get('GOOGLE_API_KEY')
    analyzer = analyzer or DreamAnalyzer(api_key, app.config['ANALYSIS_MODEL'])
    illustrator = illustrator or DreamIllustrator(api_key, app.config['IMAGE_MODEL'])
    oracle = oracle or Oracle(api_key, app.config['ORACLE_MODEL'])

    def normalize(image_url):
        return normalize_image(
            image_url,
            max_size=app.config['IMAGE_MAX_SIZE'],
            quality=app.config['IMAGE_QUALITY'],
        )

    # Register blueprints
    from routes.dashboard import dashboard_bp
    from routes.journal import journal_bp
    from routes.collections import collections_bp
    from routes.premium import premium_bp
    from routes.assistant import assistant_bp

    app.register_blueprint(dashboard_bp, url_prefix='/')
    app.register_blueprint(journal_bp, url_prefix='/journal')
    app.register_blueprint(collections_bp, url_prefix='/collections')
    app.register_blueprint(premium_bp, url_prefix='/premium')
    app.register_blueprint(assistant_bp, url_prefix='/assistant')

    @app.before_request
    def acquire_journal():
        app.extensions['dreamlab'].lock.acquire()
        g.journal_locked = True

    @app.teardown_request
    def release_journal(error=None):
        if g.pop('journal_locked', False):
            app.extensions['dreamlab'].lock.release()

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': error.description}), 404

    # Create database tables and load the journal
    with app.app_context():
        db.create_all()
        app.extensions['dreamlab'] = DreamLab(
            storage or DatabaseStorage(),
            analyzer,
            illustrator,
            oracle,
            promo_code=app.config['PROMO_CODE'],
            normalize_image=normalize,
        )

    return app

if __name__ == '__main__':
    app = create_app()
    app.run(debug=True)
