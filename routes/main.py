from flask import render_template, request, jsonify
from . import main_bp
from services.storage import get_store
from services.stats_engine import calculate_tracking_info, calculate_report_stats
from services.tracker_service import set_completion
from utils import current_date

@main_bp.route('/')
def tracker():
    today = current_date()
    document = get_store().load(today)
    info = calculate_tracking_info(document, today)
    return render_template('tracker.html', info=info)

@main_bp.route('/toggle', methods=['POST'])
def toggle():
    day = request.form.get('day', '')
    column = request.form.get('column', '')
    checked = request.form.get('checked', '') == 'true'

    state = set_completion(get_store(), day, column, checked)
    return jsonify({'status': 'success', 'day': day, 'column': column, 'checked': state})

@main_bp.route('/report')
def report():
    today = current_date()
    document = get_store().load(today)
    stats = calculate_report_stats(document, today)
    return render_template('report.html', stats=stats, habits=document.habits)

@main_bp.route('/manifest.json')
def manifest():
    base = request.script_root.rstrip('/') + '/'
    response = jsonify({
        'name': 'Habit Tracker',
        'short_name': 'Habits',
        'start_url': base,
        'display': 'standalone',
        'background_color': '#f8fafc',
        'theme_color': '#334155',
        'icons': [{
            'src': "data:image/svg+xml,<svg xmlns='http://www.w3.org/2000/svg' viewBox='0 0 100 100'>"
                   "<rect fill='%23334155' width='100' height='100' rx='20'/>"
                   "<path d='M25 50l15 15 35-35' stroke='white' stroke-width='8' fill='none' "
                   "stroke-linecap='round' stroke-linejoin='round'/></svg>",
            'sizes': 'any',
            'type': 'image/svg+xml',
            'purpose': 'any'
        }]
    })
    response.mimetype = 'application/manifest+json'
    return response
