"""
Integration tests for API routes.

Tests for Flask endpoints using the test client.
"""

import base64
import json

import cv2
import pytest


@pytest.fixture
def client():
    """Create a test client for the Flask app."""
    from run import create_app
    app = create_app()
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


def _encode_png(frame) -> str:
    ok, buffer = cv2.imencode('.png', frame)
    assert ok
    return base64.b64encode(buffer).decode('utf-8')


class TestAPIRoutes:
    """Test suite for API routes."""

    def test_index_route(self, client):
        response = client.get('/')
        assert response.status_code == 200
        assert cv2.__version__ in response.get_data(as_text=True)

    def test_health_check(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['status'] == 'healthy'
        assert data['camera_running'] is False
        assert data['codes'] == []

    def test_version(self, client):
        response = client.get('/version')
        assert response.status_code == 200
        assert json.loads(response.data) == {'opencv_version': cv2.__version__}

    def test_stop_camera_when_idle(self, client):
        response = client.post('/stop_camera')
        assert response.status_code == 200


class TestDehomogenize:
    """Test suite for the dehomogenize endpoint."""

    def test_nested_points(self, client):
        response = client.post('/dehomogenize', json={'points': [[1, -1, 1], [4, 2, 2]]})
        assert response.status_code == 200
        assert json.loads(response.data)['points'] == [[1.0, -1.0], [2.0, 1.0]]

    def test_flat_points_with_dims(self, client):
        response = client.post('/dehomogenize', json={'points': [2, 4, 6, 2], 'dims': 4})
        assert response.status_code == 200
        assert json.loads(response.data)['points'] == [[1.0, 2.0, 3.0]]

    def test_missing_points(self, client):
        response = client.post('/dehomogenize', json={'dims': 3})
        assert response.status_code == 400

    def test_unsupported_dims(self, client):
        response = client.post('/dehomogenize', json={'points': [[1, 2]]})
        assert response.status_code == 400
        assert 'error' in json.loads(response.data)

    @pytest.mark.parametrize('dims', [0, 'three'])
    def test_invalid_dims(self, client, dims):
        response = client.post('/dehomogenize', json={'points': [1, 2, 3], 'dims': dims})
        assert response.status_code == 400
        assert 'error' in json.loads(response.data)


class TestProcessFrame:
    """Test suite for the process_frame endpoint."""

    def test_invalid_json(self, client):
        response = client.post(
            '/process_frame',
            data='not json',
            content_type='application/json'
        )
        assert response.status_code == 400

    def test_missing_image(self, client, clink_data):
        response = client.post('/process_frame', json={'clink_data': clink_data.tolist()})
        assert response.status_code == 400

    def test_missing_clink_data(self, client, code_frame):
        response = client.post('/process_frame', json={'image': _encode_png(code_frame)})
        assert response.status_code == 400

    def test_image_too_small(self, client, clink_data):
        response = client.post(
            '/process_frame',
            json={'image': 'abcd', 'clink_data': clink_data.tolist()}
        )
        assert response.status_code == 400

    def test_wrong_clink_data_size(self, client, code_frame):
        response = client.post(
            '/process_frame',
            json={'image': _encode_png(code_frame), 'clink_data': [0, 1, 2]}
        )
        assert response.status_code == 400

    @pytest.mark.parametrize('bad_value', [2 ** 40, 1.7])
    def test_bad_clink_data_values(self, client, code_frame, clink_data, bad_value):
        data = clink_data.tolist()
        data[0] = bad_value
        response = client.post(
            '/process_frame',
            json={'image': _encode_png(code_frame), 'clink_data': data}
        )
        assert response.status_code == 400
        assert 'error' in json.loads(response.data)

    def test_decodes_clinkcode(self, client, valid_code, code_frame, clink_data):
        code, _ = valid_code
        response = client.post(
            '/process_frame',
            json={'image': _encode_png(code_frame), 'clink_data': clink_data.tolist()}
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['clinkcode_detected'] is True
        assert [c['code'] for c in data['codes']] == [code]
        assert data['marker'] == pytest.approx([250.0, 250.0])


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
