from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import requests

from contexter.config import Settings
from contexter.models import Project
from contexter.planner import plan_request

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
PROJECTS_ENDPOINT = "/api/v1/projects"


class ApiError(Exception):
    def __init__(self, message: str, status: Optional[int] = None,
                 status_text: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.status_text = status_text


class ContexterApi:
    """
    Thin client for the contexter server. One request per call; failures
    surface as ApiError and are never retried.
    """
    def __init__(self, settings: Settings, session: Optional[requests.Session] = None,
                 timeout: float = DEFAULT_TIMEOUT):
        self.settings = settings
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, endpoint: str, body: Optional[Dict[str, Any]] = None) -> Any:
        api_key, server_url = self.settings.api_key, self.settings.server_url
        if not api_key or not server_url:
            raise ApiError("API Key or Server URL is missing")

        url = f"{server_url}{endpoint}"
        headers = {"X-API-Key": api_key, "Content-Type": "application/json"}
        logger.debug("%s %s", method, url)

        try:
            response = self.session.request(method, url, headers=headers, json=body,
                                            timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ApiError(f"Network error: {e}") from e

        if not response.ok:
            raise ApiError(f"Request failed: {response.reason}", response.status_code,
                           response.reason)
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"Network error: invalid JSON from {url}") from e

    def _project_endpoint(self, project_name: str) -> str:
        return f"{PROJECTS_ENDPOINT}/{quote(project_name, safe='')}"

    def fetch_projects(self) -> List[Project]:
        data = self._request("GET", PROJECTS_ENDPOINT)
        return [Project.model_validate(p) for p in data.get("projects", [])]

    def fetch_project_metadata(self, project_name: str) -> Project:
        return Project.model_validate(self._request("GET", self._project_endpoint(project_name)))

    def fetch_project_content(self, project_name: str, selected_files: Sequence[str],
                              all_files: Sequence[str]) -> str:
        paths = plan_request(selected_files, all_files)
        logger.info("Fetching %s (%s)", project_name,
                    "all files" if not paths else f"{len(paths)} files")
        data = self._request("POST", self._project_endpoint(project_name), {"paths": paths})
        return data.get("content", "")

    def validate_api_key(self) -> bool:
        try:
            self._request("GET", PROJECTS_ENDPOINT)
            return True
        except ApiError as e:
            logger.warning("API key validation failed: %s", e.message)
            return False
