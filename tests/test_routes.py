import io
import json
from datetime import date
from services.storage import get_store

def seed(client):
    client.post('/settings/', data={'action': 'add_habit', 'habit_name': 'Run', 'frequency': '3'})
    client.post('/settings/', data={'action': 'update_settings', 'start_date': '2024-01-01', 'number_of_days': '7'})

def test_tracker_page(client):
    seed(client)
    response = client.get('/')
    assert response.status_code == 200
    assert b'7 Days' in response.data
    assert b'LUN 01/01' in response.data
    assert b'id="today"' in response.data
    assert b'4d left' in response.data

def test_tracker_page_empty(client):
    response = client.get('/')
    assert response.status_code == 200
    assert b'1 Days' in response.data

def test_toggle(client):
    seed(client)
    response = client.post('/toggle', data={'day': '2024-01-02', 'column': 'Run', 'checked': 'true'})
    assert response.status_code == 200
    assert response.json['status'] == 'success'
    assert response.json['checked'] is True
    assert get_store().load().days == {date(2024, 1, 2): {'Run'}}

    client.post('/toggle', data={'day': '2024-01-02', 'column': 'Run', 'checked': 'false'})
    assert get_store().load().days == {}

def test_toggle_invalid(client):
    seed(client)
    response = client.post('/toggle', data={'day': '2024-01-02', 'column': 'Swim', 'checked': 'true'})
    assert response.status_code == 400
    assert response.json['kind'] == 'InvalidHabit'

    response = client.post('/toggle', data={})
    assert response.status_code == 400

def test_report_page(client):
    seed(client)
    client.post('/toggle', data={'day': '2024-01-01', 'column': 'Run', 'checked': 'true'})
    response = client.get('/report')
    assert response.status_code == 200
    assert b'Run' in response.data
    assert b'3x/wk' in response.data
    assert b'1/3' in response.data
    assert response.data.count(b'dot-green') == 1
    assert response.data.count(b'dot-gray') == 2
    assert b'33%' in response.data

def test_report_page_without_habits(client):
    response = client.get('/report')
    assert response.status_code == 200
    assert b'No habits yet' in response.data

def test_settings_page(client):
    seed(client)
    response = client.get('/settings/')
    assert response.status_code == 200
    assert b'Run' in response.data
    assert b'2024-01-01' in response.data

def test_settings_habit_actions(client):
    response = client.post('/settings/', data={'action': 'add_habit', 'habit_name': 'Read'})
    assert response.status_code == 200
    assert response.json['habit'] == {'name': 'Read', 'frequency': 7}

    response = client.post('/settings/', data={'action': 'add_habit', 'habit_name': 'Read'})
    assert response.status_code == 400
    assert response.json['kind'] == 'InvalidHabit'

    response = client.post('/settings/', data={'action': 'update_habit_frequency', 'habit_name': 'Read', 'frequency': '4'})
    assert response.json['habit']['frequency'] == 4

    response = client.post('/settings/', data={'action': 'rename_habit', 'habit_name': 'Read', 'new_name': 'Study'})
    assert response.json['habit']['name'] == 'Study'

    response = client.post('/settings/', data={'action': 'remove_habit', 'habit_name': 'Study'})
    assert response.status_code == 200
    assert get_store().load().habits == []

def test_settings_period(client):
    response = client.post('/settings/', data={'action': 'update_settings', 'start_date': '2024-03-01', 'number_of_days': '31'})
    assert response.json['endDate'] == '2024-03-31'

    response = client.post('/settings/', data={'action': 'update_settings', 'start_date': '2024-03-01', 'number_of_days': '0'})
    assert response.status_code == 400
    assert response.json['kind'] == 'InvalidPeriod'

def test_settings_reset(client):
    seed(client)
    client.post('/toggle', data={'day': '2024-01-01', 'column': 'Run', 'checked': 'true'})
    response = client.post('/settings/', data={'action': 'reset_data'})
    assert response.json['cleared_days'] == 1
    document = get_store().load()
    assert document.days == {}
    assert document.habit_names == ['Run']

def test_settings_export(client):
    seed(client)
    response = client.post('/settings/', data={'action': 'export_data'})
    assert response.status_code == 200
    assert 'habit-tracker-backup-2024-01-04.json' in response.headers['Content-Disposition']
    assert json.loads(response.data)['columns'] == [{'name': 'Run', 'frequency': 3}]

def test_settings_import(client):
    payload = json.dumps({'columns': ['Read'], 'days': {'2024-01-02': {'Read': True}}}).encode('utf-8')
    response = client.post('/settings/', data={
        'action': 'import_data',
        'import_file': (io.BytesIO(payload), 'backup.json')
    }, content_type='multipart/form-data')
    assert response.status_code == 200
    assert response.json['habits'] == 1
    assert get_store().load().get_habit('Read').frequency == 7

def test_settings_import_malformed(client):
    seed(client)
    payload = json.dumps({'columns': []}).encode('utf-8')
    response = client.post('/settings/', data={
        'action': 'import_data',
        'import_file': (io.BytesIO(payload), 'backup.json')
    }, content_type='multipart/form-data')
    assert response.status_code == 400
    assert response.json['kind'] == 'MalformedImport'
    assert get_store().load().habit_names == ['Run']

def test_settings_import_without_file(client):
    response = client.post('/settings/', data={'action': 'import_data'})
    assert response.status_code == 400
    assert response.json['kind'] == 'MalformedImport'

def test_settings_unknown_action(client):
    response = client.post('/settings/', data={'action': 'explode'})
    assert response.status_code == 400
    assert response.json['status'] == 'error'

def test_manifest(client):
    response = client.get('/manifest.json')
    assert response.status_code == 200
    assert response.mimetype == 'application/manifest+json'
    assert response.json['short_name'] == 'Habits'
