# =============================================================================
# AgriManage Backend
# client.py - API Client
#
# Thin requests-based client for the AgriManage REST API. Every call carries
# the bearer token and a timeout; responses are unwrapped from the
# {"success": ..., "data": ...} envelope and failures become the same error
# types the server raises.
# =============================================================================

import logging

import requests

from agrimanage.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFound,
    PersistenceError,
    ReferentialIntegrityError,
    UnexpectedShapeError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Server status -> client error; a 400 is refined by its error title
STATUS_ERRORS = {
    400: ValidationError,
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFound,
    409: ReferentialIntegrityError,
}


class AgriManageClient:
    """
    Client for the AgriManage API.

    Args:
        base_url: Server root, e.g. 'http://localhost:5000'
        token: Access token sent as 'Authorization: Bearer <token>'
        session: requests.Session (or compatible) to send requests with
        timeout: Seconds before a request is abandoned
    """

    def __init__(self, base_url, token=None, session=None, timeout=10):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    # =========================================================================
    # Transport
    # =========================================================================

    def _headers(self):
        headers = {'Accept': 'application/json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def _request(self, method, path, json=None, params=None):
        url = f'{self.base_url}/api{path}'

        try:
            response = self.session.request(
                method,
                url,
                headers=self._headers(),
                json=json,
                params=params,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise PersistenceError(f'Could not reach the API: {e}')

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            self._raise_for(response.status_code, body)

        if not isinstance(body, dict):
            raise UnexpectedShapeError(
                'Response body is not a JSON object',
                details={'path': path}
            )
        return body

    def _raise_for(self, status_code, body):
        message = None
        details = None
        if isinstance(body, dict):
            message = body.get('message')
            details = body.get('details')

        error = STATUS_ERRORS.get(status_code)
        if status_code == 400 and isinstance(body, dict) \
                and body.get('error') == UnexpectedShapeError.title:
            error = UnexpectedShapeError
        if error is not None:
            raise error(message, details=details)
        raise PersistenceError(
            message or f'API request failed with status {status_code}',
            details=details
        )

    def _data(self, method, path, json=None, params=None):
        return self._request(method, path, json=json, params=params).get('data')

    def _list(self, path, params=None):
        data = self._data('GET', path, params=params)
        if isinstance(data, dict) and 'items' in data:
            data = data['items']
        if not isinstance(data, list):
            raise UnexpectedShapeError(
                'Expected a list in the response',
                details={'path': path, 'received': type(data).__name__}
            )
        return data

    # =========================================================================
    # Auth
    # =========================================================================

    def login(self, email, password):
        """Log in and keep the access token for subsequent calls."""
        body = self._request('POST', '/auth/login', json={'email': email, 'password': password})
        self.token = body.get('access_token')
        return body.get('user')

    # =========================================================================
    # Plants and diseases
    # =========================================================================

    def list_plants(self, search=None, page=1, per_page=20):
        params = {'page': page, 'per_page': per_page}
        if search:
            params['search'] = search
        return self._list('/plants/', params=params)

    def get_plant(self, plant_id):
        return self._data('GET', f'/plants/{plant_id}')

    def create_plant(self, payload):
        return self._data('POST', '/plants/', json=payload)

    def update_plant(self, plant_id, payload):
        return self._data('PUT', f'/plants/{plant_id}', json=payload)

    def delete_plant(self, plant_id):
        return self._request('DELETE', f'/plants/{plant_id}').get('message')

    def diseases_for_plant(self, plant_id):
        return self._list(f'/diseases/plant/{plant_id}')

    def get_disease(self, disease_id):
        return self._data('GET', f'/diseases/{disease_id}')

    def create_disease(self, payload):
        return self._data('POST', '/diseases/', json=payload)

    def update_disease(self, disease_id, payload):
        return self._data('PUT', f'/diseases/{disease_id}', json=payload)

    def delete_disease(self, disease_id):
        return self._request('DELETE', f'/diseases/{disease_id}').get('message')

    # =========================================================================
    # Locations and crops
    # =========================================================================

    def list_locations(self, search=None, page=1, per_page=20):
        params = {'page': page, 'per_page': per_page}
        if search:
            params['search'] = search
        return self._list('/locations/', params=params)

    def get_location(self, location_id):
        return self._data('GET', f'/locations/{location_id}')

    def create_location(self, payload):
        return self._data('POST', '/locations/', json=payload)

    def location_allocation(self, location_id):
        return self._data('GET', f'/locations/{location_id}/allocation')

    def crops_for_location(self, location_id):
        return self._list(f'/crops/location/{location_id}')

    def create_crop(self, payload):
        return self._data('POST', '/crops/', json=payload)

    def delete_crop(self, crop_id):
        return self._request('DELETE', f'/crops/{crop_id}').get('message')

    # =========================================================================
    # Cost calculator
    # =========================================================================

    def calculator_options(self):
        return self._data('GET', '/costCalculator/options')

    def calculate(self, crop, area, water_resources, soil_type):
        return self._data('POST', '/costCalculator/calculate', json={
            'crop': crop,
            'area': area,
            'waterResources': water_resources,
            'soilType': soil_type
        })

    def user_calculations(self):
        return self._list('/costCalculator/userCalculations')
