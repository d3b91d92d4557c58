import requests


class ApiError(Exception):
    def __init__(self, status_code, message):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class StrategyApiClient:
    """HTTP client for the /api/strategies endpoints."""

    def __init__(self, base_url="http://localhost:5000", session=None, timeout=None):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method, path, **kwargs):
        url = f"{self.base_url}/api/strategies{path}"
        if self.timeout is not None:
            kwargs.setdefault('timeout', self.timeout)
        response = getattr(self.session, method)(url, **kwargs)
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            raise ApiError(response.status_code, 'Unexpected response body')
        if response.status_code >= 400 or not body.get('success'):
            raise ApiError(response.status_code, body.get('error') or 'Request failed')
        return body

    def submit(self, risk_level, allocation, timeframe, encrypted_data, encrypted_hash):
        body = self._request('post', '/submit', json={
            'riskLevel': risk_level,
            'allocation': allocation,
            'timeframe': timeframe,
            'encryptedData': encrypted_data,
            'encryptedHash': encrypted_hash,
        })
        return body['strategyId']

    def compute(self, strategy_id):
        body = self._request('post', f'/{strategy_id}/compute')
        return body['encryptedScore']

    def get(self, strategy_id):
        return self._request('get', f'/{strategy_id}')['strategy']

    def list(self):
        return self._request('get', '')['strategies']

    def stats(self):
        body = self._request('get', '/stats')
        return {'total': body['total'], 'completed': body['completed']}
