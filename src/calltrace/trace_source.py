"""
Trace Source

Runs trace queries against Google BigQuery and hands back plain row dicts.
"""

import json
from typing import Any, Dict, List, Optional

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import bigquery
from google.oauth2 import service_account

from .errors import CredentialsError, TraceSourceError

DEFAULT_LOCATION = "US"
TOKEN_URI = "https://oauth2.googleapis.com/token"


def load_credentials(credentials_file: str) -> Dict[str, Any]:
    """Read a service account key file."""
    try:
        with open(credentials_file, 'r', encoding='utf-8') as f:
            credentials = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CredentialsError(f"Could not load credentials from {credentials_file}: {e}") from e
    if not isinstance(credentials, dict):
        raise CredentialsError(f"Credentials in {credentials_file} must be a JSON object")
    missing = [key for key in ('client_email', 'private_key') if not credentials.get(key)]
    if missing:
        raise CredentialsError(f"Credentials in {credentials_file} are missing: {', '.join(missing)}")
    return credentials


class BigQueryTraceSource:
    """
    Executes a query as one blocking BigQuery job.
    """

    def __init__(self, credentials_file: Optional[str] = None, location: str = DEFAULT_LOCATION):
        self.credentials_file = credentials_file
        self.location = location
        self._client: Optional[bigquery.Client] = None

    def _create_client(self) -> bigquery.Client:
        if not self.credentials_file:
            # Application default credentials / GOOGLE_APPLICATION_CREDENTIALS
            return bigquery.Client()
        info = load_credentials(self.credentials_file)
        credentials = service_account.Credentials.from_service_account_info({
            'client_email': info['client_email'],
            'private_key': info['private_key'],
            'token_uri': info.get('token_uri', TOKEN_URI),
        })
        project_id = info.get('project_id') or info.get('projectId')
        return bigquery.Client(credentials=credentials, project=project_id)

    @property
    def client(self) -> bigquery.Client:
        if self._client is None:
            try:
                self._client = self._create_client()
            except (auth_exceptions.GoogleAuthError, ValueError) as e:
                raise CredentialsError(f"Could not authenticate with BigQuery: {e}") from e
        return self._client

    def execute(self, query: str) -> List[Dict[str, Any]]:
        """Run the query and return every row."""
        client = self.client
        try:
            job = client.query(query, location=self.location)
            return [dict(row.items()) for row in job.result()]
        except (google_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as e:
            raise TraceSourceError(f"BigQuery query failed: {e}") from e
