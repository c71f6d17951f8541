import os
import logging
from flask import Flask, jsonify
from flask_migrate import Migrate
from dotenv import load_dotenv
from models import db
from extensions import csrf
from errors import TrackerError, StorageError
from routes import main_bp, settings_bp, api_bp
from services.stats_engine import GREEN, RED, GRAY
from utils import format_date

load_dotenv()

logging.basicConfig(
    level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
)
logger = logging.getLogger(__name__)

app = Flask(__name__)

app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev_key_change_in_prod')
app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('SQLALCHEMY_DATABASE_URI', 'sqlite:///db.sqlite3')
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
# 'sql' keeps the document in the database, 'json' in TRACKER_DATA_FILE
app.config['TRACKER_STORAGE'] = os.environ.get('TRACKER_STORAGE', 'sql')
app.config['TRACKER_DATA_FILE'] = os.environ.get('TRACKER_DATA_FILE', 'data.json')
# Pin "today" (YYYY-MM-DD), mostly for demos and tests
app.config['TRACKER_TODAY'] = os.environ.get('TRACKER_TODAY')

db.init_app(app)
migrate = Migrate(app, db)
csrf.init_app(app)
csrf.exempt(api_bp)

app.register_blueprint(main_bp)
app.register_blueprint(settings_bp, url_prefix='/settings')
app.register_blueprint(api_bp, url_prefix='/api')

@app.errorhandler(TrackerError)
def handle_tracker_error(error):
    if isinstance(error, StorageError):
        logger.error('%s: %s', error.kind, error.message)
    return jsonify(error.to_dict()), error.status_code

@app.template_filter('short_date')
def short_date(value):
    return f"{value.strftime('%b')} {value.day}" if hasattr(value, 'strftime') else value

@app.template_filter('iso_date')
def iso_date(value):
    return format_date(value)

@app.context_processor
def dot_colors():
    return {'GREEN': GREEN, 'RED': RED, 'GRAY': GRAY}

@app.cli.command('init-db')
def init_db():
    """Create the database tables."""
    db.create_all()
    logger.info('Database tables created at %s', app.config['SQLALCHEMY_DATABASE_URI'])

if __name__ == '__main__':
    app.run(debug=True)
