import json
from flask import render_template, request, jsonify, Response
from . import settings_bp
from errors import MalformedImport
from services.storage import get_store
from services.stats_engine import calculate_summary_stats
from services import tracker_service
from utils import current_date, format_date

def export_response(document_dict):
    filename = f"habit-tracker-backup-{format_date(current_date())}.json"
    return Response(
        json.dumps(document_dict, indent=4, ensure_ascii=False),
        mimetype='application/json',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'}
    )

@settings_bp.route('/', methods=['GET'])
def settings():
    document = get_store().load()
    stats = calculate_summary_stats(document)
    return render_template('settings.html', stats=stats)

@settings_bp.route('/', methods=['POST'])
def settings_action():
    store = get_store()
    form = request.form
    action = form.get('action', '')

    if action == 'add_habit':
        habit = tracker_service.add_habit(store, form.get('habit_name', ''), form.get('frequency'))
        return jsonify({'status': 'success', 'habit': habit.to_dict()})

    elif action == 'update_habit_frequency':
        habit = tracker_service.update_habit_frequency(store, form.get('habit_name', ''), form.get('frequency'))
        return jsonify({'status': 'success', 'habit': habit.to_dict()})

    elif action == 'rename_habit':
        habit = tracker_service.rename_habit(store, form.get('habit_name', ''), form.get('new_name', ''))
        return jsonify({'status': 'success', 'habit': habit.to_dict()})

    elif action == 'remove_habit':
        habit = tracker_service.remove_habit(store, form.get('habit_name', ''))
        return jsonify({'status': 'success', 'removed': habit.name})

    elif action == 'update_settings':
        period = tracker_service.update_period(store, form.get('start_date', ''), form.get('number_of_days', ''))
        return jsonify({
            'status': 'success',
            'startDate': format_date(period.start_date),
            'endDate': format_date(period.end_date)
        })

    elif action == 'reset_data':
        cleared = tracker_service.reset_data(store)
        return jsonify({'status': 'success', 'cleared_days': cleared})

    elif action == 'export_data':
        return export_response(tracker_service.export_document(store))

    elif action == 'import_data':
        upload = request.files.get('import_file')
        if not upload or not upload.filename:
            raise MalformedImport('No import file was uploaded')
        document = tracker_service.import_document(store, upload.read())
        return jsonify({'status': 'success', 'habits': len(document.habits), 'days': len(document.days)})

    return jsonify({'status': 'error', 'message': f'Unknown action "{action}"'}), 400
