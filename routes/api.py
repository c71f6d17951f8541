from flask import request, jsonify
from . import api_bp
from errors import InvalidHabit, MalformedImport
from services.storage import get_store
from services.stats_engine import calculate_report_stats, calculate_tracking_info, calculate_summary_stats
from services import tracker_service
from utils import current_date
from .settings import export_response

@api_bp.route('/report', methods=['GET'])
def report():
    today = current_date()
    stats = calculate_report_stats(get_store().load(today), today)
    return jsonify(stats.to_dict())

@api_bp.route('/tracking', methods=['GET'])
def tracking():
    today = current_date()
    info = calculate_tracking_info(get_store().load(today), today)
    return jsonify(info.to_dict())

@api_bp.route('/summary', methods=['GET'])
def summary():
    return jsonify(calculate_summary_stats(get_store().load()).to_dict())

@api_bp.route('/toggle', methods=['POST'])
def toggle():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise InvalidHabit('Request body must be a JSON object')
    day = data.get('day')
    habit = data.get('habit')
    if 'checked' in data:
        state = tracker_service.set_completion(get_store(), day, habit, bool(data['checked']))
    else:
        state = tracker_service.toggle_completion(get_store(), day, habit)
    return jsonify({'status': 'success', 'day': day, 'habit': habit, 'checked': state})

@api_bp.route('/export', methods=['GET'])
def export():
    return export_response(tracker_service.export_document(get_store()))

@api_bp.route('/import', methods=['POST'])
def import_data():
    upload = request.files.get('import_file')
    if upload and upload.filename:
        payload = upload.read()
    else:
        payload = request.get_json(silent=True)
        if payload is None:
            raise MalformedImport('Request body is not a JSON document')

    document = tracker_service.import_document(get_store(), payload)
    return jsonify({'status': 'success', 'habits': len(document.habits), 'days': len(document.days)})
