"""
HTTP client for the agenda and booking API.

Wraps an httpx.Client and translates error responses into the shared error
taxonomy so the store can decide what is retryable.
"""

import logging

import httpx

from utils.errors import BackendError, ConflictError, NotFoundError, StudioError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f'HTTP {resp.status_code}'
    if isinstance(body, dict) and body.get('message'):
        return body['message']
    return f'HTTP {resp.status_code}'


def _raise_for_status(resp: httpx.Response) -> None:
    status = resp.status_code
    if status < 400:
        return
    message = _error_message(resp)
    if status == 404:
        raise NotFoundError(message)
    if status == 409:
        raise ConflictError(message)
    if status >= 500:
        raise BackendError(message, status)
    raise ValidationError(message, status)


class AgendaApiClient:
    """
    Thin client over the /api routes.

    Args:
        base_url: Server root, e.g. 'http://localhost:5000'
        http: Optional preconfigured httpx.Client (tests inject one built on
            httpx.WSGITransport)
        headers: Extra headers (session cookie, CSRF token)
        timeout: Request timeout in seconds
    """

    def __init__(self, base_url: str = None, http: httpx.Client = None,
                 headers: dict = None, timeout: float = DEFAULT_TIMEOUT):
        if http is None:
            http = httpx.Client(base_url=base_url or '', timeout=timeout, headers=headers)
        elif headers:
            http.headers.update(headers)
        self._http = http

    def close(self) -> None:
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> dict:
        try:
            resp = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning('%s %s failed: %s', method, path, e)
            raise BackendError(f'No se pudo contactar al servidor: {e}') from e

        _raise_for_status(resp)
        if not resp.content:
            return {}
        try:
            body = resp.json()
        except ValueError as e:
            raise BackendError('Respuesta inválida del servidor.') from e
        if isinstance(body, dict) and body.get('success') is False:
            raise StudioError(body.get('message') or 'Error desconocido', resp.status_code)
        return body

    # -------- AGENDA --------

    def fetch_all_slots(self) -> list:
        """Every photographer's slots in one request."""
        return self._request('GET', '/api/agenda').get('items', [])

    def fetch_slots(self, photographer_id: int) -> list:
        return self._request(
            'GET', '/api/agenda', params={'photographerId': photographer_id}
        ).get('items', [])

    def save_slots(self, photographer_id: int, registros: list) -> dict:
        """
        Upsert a photographer's records.

        Returns:
            Response body {success, upserted, items, message}
        """
        return self._request('PATCH', f'/api/agenda/{photographer_id}', json={'registros': registros})

    # -------- RESERVATIONS --------

    def update_reservation(self, reservation_id: int, fecha: str = None, hora: str = None,
                           photographer_id: int = None, estado: str = None) -> dict:
        payload = {'fecha': fecha, 'hora': hora}
        if photographer_id is not None:
            payload['idfotografo'] = photographer_id
        if estado is not None:
            payload['estado'] = estado
        return self._request('PATCH', f'/api/reservas/{reservation_id}', json=payload).get('item')

    def bulk_update_reservations(self, reservation_ids: list, nuevo_estado: str) -> dict:
        return self._request(
            'PATCH', '/api/reservas/actualizar-multiples',
            json={'reservas': list(reservation_ids), 'nuevo_estado': nuevo_estado},
        )
