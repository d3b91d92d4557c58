from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5000",
    "http://127.0.0.1:5000",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)


def build_store(flask_app):
    """Build the strategy store named by STRATEGY_STORE."""
    from fhevault.services.storage import MemoryStrategyStore, SqlStrategyStore
    kind = flask_app.config.get('STRATEGY_STORE', 'memory')
    if kind == 'memory':
        return MemoryStrategyStore()
    if kind == 'sql':
        return SqlStrategyStore(db)
    raise ValueError(f"Unknown STRATEGY_STORE: {kind!r}")


def get_store():
    from flask import current_app
    return current_app.extensions['strategy_store']


def create_app(config_class=Config, store=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    flask_app.extensions['strategy_store'] = store if store is not None else build_store(flask_app)

    from fhevault.main import main
    flask_app.register_blueprint(main)

    from fhevault.api.strategies import strategies
    flask_app.register_blueprint(strategies, url_prefix='/api/strategies')

    from fhevault.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @flask_app.errorhandler(404)
    def not_found(_error):
        return jsonify({'success': False, 'error': 'Not found'}), 404

    @flask_app.errorhandler(405)
    def method_not_allowed(_error):
        return jsonify({'success': False, 'error': 'Method not allowed'}), 405

    @flask_app.errorhandler(500)
    def internal_error(_error):
        return jsonify({'success': False, 'error': 'Internal server error'}), 500

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the strategy tables."""
        import fhevault.models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    @click.command('demo')
    @click.option('--risk-level', default=7, type=click.IntRange(1, 10), show_default=True)
    @click.option('--allocation', default=75, type=click.IntRange(0, 100), show_default=True)
    @click.option('--timeframe', default=90, type=click.IntRange(1, 365), show_default=True)
    def demo_command(risk_level, allocation, timeframe):
        """Runs encrypt -> submit -> compute -> decrypt against the configured store."""
        from fhevault.services.codec import classify, decrypt_score, encrypt_strategy, generate_keypair
        from fhevault.services.scoring import compute_strategy
        keys = generate_keypair()
        encrypted = encrypt_strategy(risk_level, allocation, timeframe, keys.public_key)
        with flask_app.app_context():
            store = get_store()
            record = store.create({
                'riskLevel': risk_level,
                'allocation': allocation,
                'timeframe': timeframe,
                'encryptedData': encrypted.encrypted_data,
                'encryptedHash': encrypted.hash,
            })
            record = compute_strategy(store, record.id)
        score = decrypt_score(record.encrypted_score, keys.private_key)
        analysis = classify(score)
        click.echo(f"strategy {record.id}")
        click.echo(f"hash     {encrypted.hash}")
        click.echo(f"score    {score}/100 ({analysis['category']}, {analysis['percentile']}th percentile)")
        click.echo(analysis['recommendation'])

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(demo_command)

    return flask_app
