from flask import Blueprint

main_bp = Blueprint('main', __name__)
settings_bp = Blueprint('settings', __name__)
api_bp = Blueprint('api', __name__)

from . import main, settings, api
