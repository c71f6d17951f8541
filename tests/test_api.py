import io
import json
from datetime import date
from services.storage import get_store

DOCUMENT = {
    'columns': [{'name': 'Run', 'frequency': 3}, {'name': 'Read', 'frequency': 7}],
    'days': {
        '2024-01-01': {'Run': True, 'Read': True},
        '2024-01-02': {'Read': True},
    },
    'startDate': '2024-01-01',
    'endDate': '2024-01-14'
}

def import_document(client, document=DOCUMENT):
    response = client.post('/api/import', json=document)
    assert response.status_code == 200
    return response

def test_report(client):
    import_document(client)
    response = client.get('/api/report')
    assert response.status_code == 200
    data = response.json
    assert data['today'] == '2024-01-04'
    assert data['trackingDays'] == 14
    assert data['elapsedDays'] == 4
    assert data['daysRemaining'] == 11
    assert data['habitStats'] == {'Run': 1, 'Read': 2}
    assert data['habitExpected'] == {'Run': 6, 'Read': 14}
    assert data['habitElapsedExpected'] == {'Run': 2, 'Read': 4}
    assert data['totalChecks'] == 3
    assert data['totalPossible'] == 20
    assert data['progressPercent'] == 15
    run = data['habitDots']['Run']
    assert (run['green'], run['red'], run['gray']) == (1, 0, 5)
    assert [w['status'] for w in run['weeks']] == ['current', 'future']

def test_tracking(client):
    import_document(client)
    data = client.get('/api/tracking').json
    assert data['trackingDays'] == 14
    assert data['daysRemaining'] == 11
    assert data['progressPercent'] == 21
    assert len(data['rows']) == 14
    assert data['rows'][0]['checked'] == {'Run': True, 'Read': True}
    assert data['rows'][3]['isToday'] is True

def test_summary(client):
    import_document(client)
    data = client.get('/api/summary').json
    assert data['habitsCount'] == 2
    assert data['daysWithData'] == 2
    assert data['totalChecks'] == 3

def test_toggle(client):
    import_document(client)
    response = client.post('/api/toggle', json={'day': '2024-01-03', 'habit': 'Run'})
    assert response.json['checked'] is True
    response = client.post('/api/toggle', json={'day': '2024-01-03', 'habit': 'Run'})
    assert response.json['checked'] is False
    assert date(2024, 1, 3) not in get_store().load().days

    response = client.post('/api/toggle', json={'day': '2024-01-03', 'habit': 'Run', 'checked': True})
    assert response.json['checked'] is True

def test_toggle_unknown_habit(client):
    response = client.post('/api/toggle', json={'day': '2024-01-03', 'habit': 'Swim'})
    assert response.status_code == 400
    assert response.json == {'kind': 'InvalidHabit', 'message': 'Unknown habit "Swim"'}

def test_toggle_non_text_habit(client):
    import_document(client)
    response = client.post('/api/toggle', json={'day': '2024-01-02', 'habit': 5})
    assert response.status_code == 400
    assert response.json['kind'] == 'InvalidHabit'

    response = client.post('/api/toggle', json={'day': '2024-01-02', 'habit': 5, 'checked': True})
    assert response.status_code == 400
    assert response.json['kind'] == 'InvalidHabit'

def test_toggle_body_not_object(client):
    response = client.post('/api/toggle', json=[1, 2])
    assert response.status_code == 400
    assert response.json['kind'] == 'InvalidHabit'

def test_export(client):
    import_document(client)
    response = client.get('/api/export')
    assert response.status_code == 200
    assert 'attachment' in response.headers['Content-Disposition']
    assert json.loads(response.data) == DOCUMENT

def test_import_missing_days_leaves_data(client):
    import_document(client)
    response = client.post('/api/import', json={'columns': ['Swim']})
    assert response.status_code == 400
    assert response.json['kind'] == 'MalformedImport'
    assert get_store().load().habit_names == ['Run', 'Read']

def test_import_legacy_file_upload(client):
    payload = json.dumps({'columns': ['Read', 'Exercise'], 'days': {}}).encode('utf-8')
    response = client.post('/api/import', data={
        'import_file': (io.BytesIO(payload), 'legacy.json')
    }, content_type='multipart/form-data')
    assert response.status_code == 200
    habits = get_store().load().habits
    assert [(h.name, h.frequency) for h in habits] == [('Read', 7), ('Exercise', 7)]

def test_import_not_json(client):
    response = client.post('/api/import', data='nope', content_type='text/plain')
    assert response.status_code == 400
    assert response.json['kind'] == 'MalformedImport'
