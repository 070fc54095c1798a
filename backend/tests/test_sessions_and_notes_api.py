from fastapi.testclient import TestClient

from study_planner.main import app

client = TestClient(app)


def _session(date, **overrides):
    body = {'subjectId': 1, 'title': 'Revision', 'startTime': '09:00', 'endTime': '10:30', 'date': date}
    body.update(overrides)
    return body


def test_create_session_applies_defaults():
    r = client.post('/api/study-sessions', json=_session('2030-01-10'))
    assert r.status_code == 201
    s = r.json()
    assert s['status'] == 'upcoming'
    assert s['actualDuration'] == 0
    assert s['description'] is None
    assert s['subjectId'] == 1


def test_sessions_filtered_by_date():
    client.post('/api/study-sessions', json=_session('2030-02-01', title='a'))
    client.post('/api/study-sessions', json=_session('2030-02-01', title='b'))
    client.post('/api/study-sessions', json=_session('2030-02-02', title='c'))
    r = client.get('/api/study-sessions', params={'date': '2030-02-01'})
    assert r.status_code == 200
    assert sorted(s['title'] for s in r.json()) == ['a', 'b']
    everything = client.get('/api/study-sessions').json()
    assert {'2030-02-01', '2030-02-02'} <= {s['date'] for s in everything}


def test_session_status_update_and_delete():
    sid = client.post('/api/study-sessions', json=_session('2030-03-01')).json()['id']
    r = client.patch(f'/api/study-sessions/{sid}', json={'status': 'completed', 'actualDuration': 85})
    assert r.status_code == 200
    assert r.json()['status'] == 'completed'
    assert r.json()['actualDuration'] == 85
    assert r.json()['title'] == 'Revision'
    assert client.delete(f'/api/study-sessions/{sid}').status_code == 204
    r2 = client.patch(f'/api/study-sessions/{sid}', json={'status': 'upcoming'})
    assert r2.status_code == 404
    assert r2.json() == {'message': 'Study session not found'}


def test_invalid_session_payload():
    r = client.post('/api/study-sessions', json=_session('2030-03-02', status='paused'))
    assert r.status_code == 400
    assert r.json()['message'] == 'Invalid session data'
    r2 = client.post('/api/study-sessions', json={'title': 'no subject'})
    assert r2.status_code == 400
    locs = [e['loc'] for e in r2.json()['errors']]
    assert ['subjectId'] in locs
    assert ['startTime'] in locs


def test_notes_filtered_by_subject_and_ordered():
    subject_id = client.post('/api/subjects', json={'name': 'Biology'}).json()['id']
    other_id = client.post('/api/subjects', json={'name': 'Geography'}).json()['id']
    client.post('/api/notes', json={'subjectId': subject_id, 'title': 'second', 'content': 'x',
                                    'createdAt': '2024-05-02T08:00:00Z'})
    client.post('/api/notes', json={'subjectId': other_id, 'title': 'elsewhere', 'content': 'x',
                                    'createdAt': '2024-05-01T09:00:00Z'})
    client.post('/api/notes', json={'subjectId': subject_id, 'title': 'first', 'content': 'x',
                                    'createdAt': '2024-05-01T08:00:00Z'})
    r = client.get('/api/notes', params={'subjectId': subject_id})
    assert r.status_code == 200
    assert [n['title'] for n in r.json()] == ['first', 'second']
    assert all(n['subjectId'] == subject_id for n in r.json())
    titles = [n['title'] for n in client.get('/api/notes').json()]
    assert titles.index('first') < titles.index('elsewhere') < titles.index('second')


def test_notes_subject_filter_must_be_numeric():
    r = client.get('/api/notes', params={'subjectId': 'abc'})
    assert r.status_code == 400
    assert 'errors' in r.json()


def test_note_update_and_delete():
    note = client.post('/api/notes', json={'subjectId': 7, 'title': 'draft', 'content': 'v1',
                                           'createdAt': '2024-06-01T00:00:00Z'}).json()
    r = client.patch(f"/api/notes/{note['id']}", json={'content': 'v2'})
    assert r.status_code == 200
    assert r.json() == {**note, 'content': 'v2'}
    assert client.delete(f"/api/notes/{note['id']}").status_code == 204
    assert client.delete(f"/api/notes/{note['id']}").json() == {'message': 'Note not found'}


def test_invalid_note_payload():
    r = client.post('/api/notes', json={'subjectId': 1, 'title': 'no content'})
    assert r.status_code == 400
    assert r.json()['message'] == 'Invalid note data'


def test_wrongly_typed_update_is_not_stored():
    session = client.post('/api/study-sessions', json=_session('2030-04-01', actualDuration=20)).json()
    r = client.patch(f"/api/study-sessions/{session['id']}", json={'actualDuration': 'lots'})
    assert r.status_code == 500
    assert r.json() == {'message': 'Failed to update study session'}

    listing = client.get('/api/study-sessions', params={'date': '2030-04-01'})
    assert listing.status_code == 200
    assert [s['actualDuration'] for s in listing.json()] == [20]
    assert client.get('/api/study-sessions').status_code == 200


def test_numeric_string_update_is_stored_as_integer():
    session = client.post('/api/study-sessions', json=_session('2030-04-02')).json()
    r = client.patch(f"/api/study-sessions/{session['id']}", json={'actualDuration': '45'})
    assert r.status_code == 200
    assert r.json()['actualDuration'] == 45
