from hotel_api import create_app
from hotel_api.logging_config import build_logging_config


def test_health(client):
    response = client.get('/')
    assert response.status_code == 200
    assert b'Running' in response.data


def test_unknown_route_is_json(client):
    response = client.get('/nowhere')
    assert response.status_code == 404
    assert response.get_json() == {'error': 'Not found'}


def test_wrong_method_is_json(client):
    response = client.put('/rooms')
    assert response.status_code == 405
    assert response.get_json() == {'error': 'Method not allowed'}


def test_cors_headers(client):
    origin = 'https://hotel.example.com'
    response = client.get('/rooms', headers={'Origin': origin})
    assert response.headers['Access-Control-Allow-Origin'] in ('*', origin)


def test_json_log_format():
    config = build_logging_config('DEBUG', 'json')
    assert config['handlers']['console']['formatter'] == 'json'
    assert config['handlers']['console']['level'] == 'DEBUG'


def test_testing_config_is_loaded():
    app = create_app('hotel_api.config.TestingConfig')
    assert app.config['TESTING'] is True
    assert app.config['SQLALCHEMY_DATABASE_URI'] == 'sqlite://'
