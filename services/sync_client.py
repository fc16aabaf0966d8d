"""
Sync Client - HTTP client for the SiteBook sync gateway.

One method per gateway route. Bodies are camelCase JSON. Failures raise
GatewayError with the server's message (and diagnostic trace when the
gateway sends one). Nothing is retried here; callers that retry a create
must reuse the id they generated the first time.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from services.errors import GatewayError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class SyncClient:
    """requests.Session wrapper bound to one gateway base URL (e.g. http://host/api)."""

    def __init__(self, base_url: str, session: requests.Session = None,
                 timeout: int = DEFAULT_TIMEOUT, organization_id: str = None, user_id: str = None):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout
        self.organization_id = organization_id
        self.user_id = user_id

    def set_organization(self, organization_id: Optional[str], user_id: Optional[str] = None) -> None:
        """Tenant and acting user, sent as X-Organization-Id and X-User-Id on every request."""
        self.organization_id = organization_id
        self.user_id = user_id

    def _request(self, method: str, path: str, json: Dict = None, params: Dict = None) -> Any:
        url = f"{self.base_url}{path}"
        headers = {'Accept': 'application/json'}
        if self.organization_id:
            headers['X-Organization-Id'] = self.organization_id
        if self.user_id:
            headers['X-User-Id'] = self.user_id

        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(
                method, url, json=json, params=params, headers=headers, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Gateway unreachable: {method} {url}: {e}")
            raise GatewayError(f"Gateway request failed: {e}") from e

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            message = body.get('message') or f"{response.status_code} {response.reason}"
            logger.warning(f"Gateway error {response.status_code} on {method} {path}: {message}")
            raise GatewayError(message, status_code=response.status_code, trace=body.get('trace'))

        try:
            return response.json()
        except ValueError as e:
            raise GatewayError(f"Gateway returned a non-JSON body for {method} {path}",
                               status_code=response.status_code) from e

    # =========================================================================
    # SNAPSHOT & USERS
    # =========================================================================

    def fetch_data(self, email: str) -> Dict:
        """Full snapshot for a user. Unknown email gives {'user': None, ...}."""
        return self._request('GET', '/data', params={'email': email})

    def signup(self, payload: Dict) -> Dict:
        return self._request('POST', '/signup', json=payload)

    def update_user(self, user: Dict) -> Dict:
        return self._request('POST', '/user/update', json=user)

    # =========================================================================
    # PROJECTS
    # =========================================================================

    def create_project(self, project: Dict) -> Dict:
        return self._request('POST', '/project', json=project)

    def update_project(self, project: Dict) -> Dict:
        return self._request('POST', '/project/update', json=project)

    def delete_project(self, project_id: str) -> Dict:
        return self._request('DELETE', '/project', json={'id': project_id})

    def add_project_update(self, update: Dict) -> Dict:
        return self._request('POST', '/project/update-post', json=update)

    def edit_project_update(self, update_id: str, message: str) -> Dict:
        return self._request('PUT', '/project/update', json={'id': update_id, 'message': message})

    def delete_project_update(self, update_id: str) -> Dict:
        return self._request('DELETE', '/project/update', json={'id': update_id})

    # =========================================================================
    # TASKS
    # =========================================================================

    def create_task(self, task: Dict) -> Dict:
        return self._request('POST', '/task', json=task)

    def update_task(self, task: Dict) -> Dict:
        return self._request('POST', '/task/update', json=task)

    def complete_task(self, task_id: str, completed_by: str, note: str = None,
                      image: str = None, completion_images: List[str] = None) -> Dict:
        payload = {'taskId': task_id, 'completedBy': completed_by, 'note': note, 'image': image}
        if completion_images is not None:
            payload['completionImages'] = completion_images
        return self._request('POST', '/task/complete', json=payload)

    def uncomplete_task(self, task_id: str) -> Dict:
        return self._request('POST', '/task/uncomplete', json={'taskId': task_id})

    def delete_task(self, task_id: str) -> Dict:
        return self._request('DELETE', '/task', json={'id': task_id})

    def add_comment(self, comment: Dict) -> Dict:
        return self._request('POST', '/task/comment', json=comment)

    def delete_comment(self, comment_id: str, user_id: str = None) -> Dict:
        return self._request('DELETE', '/task/comment', json={'id': comment_id, 'userId': user_id})

    # =========================================================================
    # INVOICES
    # =========================================================================

    def create_invoice(self, invoice: Dict) -> Dict:
        return self._request('POST', '/invoice', json=invoice)

    def update_invoice(self, invoice: Dict) -> Dict:
        return self._request('POST', '/invoice/update', json=invoice)

    def update_invoice_status(self, invoice_id: str, status: str) -> Dict:
        return self._request('POST', '/invoice/status', json={'id': invoice_id, 'status': status})

    def delete_invoice(self, invoice_id: str) -> Dict:
        return self._request('DELETE', '/invoice', json={'id': invoice_id})

    # =========================================================================
    # SCHEDULE
    # =========================================================================

    def create_meeting(self, meeting: Dict) -> Dict:
        return self._request('POST', '/meeting', json=meeting)

    def update_meeting(self, meeting: Dict) -> Dict:
        return self._request('POST', '/meeting/update', json=meeting)

    def complete_meeting(self, meeting_id: str, completed_by: str = None) -> Dict:
        return self._request('POST', '/meeting/complete', json={'id': meeting_id, 'completedBy': completed_by})

    def delete_meeting(self, meeting_id: str) -> Dict:
        return self._request('DELETE', '/meeting', json={'id': meeting_id})

    def create_reminder(self, reminder: Dict) -> Dict:
        return self._request('POST', '/reminder', json=reminder)

    def update_reminder(self, reminder: Dict) -> Dict:
        return self._request('POST', '/reminder/update', json=reminder)

    def delete_reminder(self, reminder_id: str) -> Dict:
        return self._request('DELETE', '/reminder', json={'id': reminder_id})

    def create_other_matter(self, matter: Dict) -> Dict:
        return self._request('POST', '/other-matter', json=matter)

    def update_other_matter(self, matter: Dict) -> Dict:
        return self._request('PUT', '/other-matter', json=matter)

    def delete_other_matter(self, matter_id: str) -> Dict:
        return self._request('DELETE', '/other-matter', json={'id': matter_id})

    # =========================================================================
    # NOTIFICATIONS & ORGANIZATIONS
    # =========================================================================

    def mark_notification_read(self, notification_id: str) -> Dict:
        return self._request('POST', '/notification/read', json={'id': notification_id})

    def list_organizations(self) -> Dict:
        return self._request('GET', '/organizations')

    def update_organization_status(self, org_id: str, status: str) -> Dict:
        return self._request('POST', '/organization/status', json={'id': org_id, 'status': status})

    def delete_organization(self, org_id: str) -> Dict:
        return self._request('DELETE', '/organization', json={'id': org_id})
