# app/client.py
"""
Python client for the Chatbot Platform API.

Credentials live in an explicit ApiSession handed to the client rather than
in ambient storage. Every call goes through ChatbotPlatformClient._request,
which attaches the bearer token and clears the session on a 401.
"""
from typing import List, Optional

import requests

DEFAULT_TIMEOUT = 30


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class SessionExpiredError(ApiError):
    """The server rejected the session's token; the session has been cleared."""


class ApiSession:
    def __init__(self, token: Optional[str] = None, user: Optional[dict] = None):
        self.token = token
        self.user = user

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def start(self, token: str, user: dict) -> None:
        self.token = token
        self.user = user

    def clear(self) -> None:
        self.token = None
        self.user = None


class ChatbotPlatformClient:
    def __init__(self, base_url: str, session: Optional[ApiSession] = None, http=None, timeout: float = DEFAULT_TIMEOUT):
        """
        `http` is anything with a requests-style `request(method, url, **kwargs)`;
        defaults to a new requests.Session.
        """
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else ApiSession()
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> dict:
        headers = dict(kwargs.pop("headers", None) or {})
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"

        response = self.http.request(
            method, f"{self.base_url}{path}", headers=headers, timeout=self.timeout, **kwargs
        )

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code == 401:
            self.session.clear()
            raise SessionExpiredError(401, body.get("message", "Unauthorized"))
        if response.status_code >= 400 or body.get("success") is False:
            raise ApiError(response.status_code, body.get("message", "Request failed"))
        return body

    def _data(self, method: str, path: str, **kwargs) -> dict:
        return self._request(method, path, **kwargs).get("data") or {}

    # Auth

    def register(self, email: str, password: str, name: Optional[str] = None) -> dict:
        data = self._data("POST", "/api/auth/register", json={"email": email, "password": password, "name": name})
        self.session.start(data["token"], data["user"])
        return data["user"]

    def login(self, email: str, password: str) -> dict:
        data = self._data("POST", "/api/auth/login", json={"email": email, "password": password})
        self.session.start(data["token"], data["user"])
        return data["user"]

    def me(self) -> dict:
        user = self._data("GET", "/api/auth/me")["user"]
        self.session.user = user
        return user

    def logout(self) -> None:
        self.session.clear()

    # Projects

    def list_projects(self) -> List[dict]:
        return self._data("GET", "/api/projects")["projects"]

    def create_project(self, name: str, system_prompt: str, description: Optional[str] = None) -> dict:
        payload = {"name": name, "systemPrompt": system_prompt, "description": description}
        return self._data("POST", "/api/projects", json=payload)["project"]

    def get_project(self, project_id: str) -> dict:
        return self._data("GET", f"/api/projects/{project_id}")["project"]

    def update_project(self, project_id: str, **fields) -> dict:
        return self._data("PUT", f"/api/projects/{project_id}", json=fields)["project"]

    def delete_project(self, project_id: str) -> None:
        self._request("DELETE", f"/api/projects/{project_id}")

    # Chats

    def create_chat(self, project_id: str, title: Optional[str] = None) -> dict:
        return self._data("POST", f"/api/chat/projects/{project_id}/chats", json={"title": title})["chat"]

    def list_chats(self, project_id: str) -> List[dict]:
        return self._data("GET", f"/api/chat/projects/{project_id}/chats")["chats"]

    def list_messages(self, chat_id: str) -> List[dict]:
        return self._data("GET", f"/api/chat/chats/{chat_id}/messages")["messages"]

    def send_message(self, chat_id: str, content: str, file_ids: Optional[List[str]] = None,
                     preferred_backend: Optional[str] = None) -> dict:
        payload = {"content": content}
        if file_ids:
            payload["fileIds"] = file_ids
        if preferred_backend:
            payload["preferredBackend"] = preferred_backend
        return self._data("POST", f"/api/chat/chats/{chat_id}/messages", json=payload)

    # Files

    def list_files(self, project_id: str) -> List[dict]:
        return self._data("GET", f"/api/files/projects/{project_id}/files")["files"]

    def delete_file(self, file_id: str) -> None:
        self._request("DELETE", f"/api/files/{file_id}")

    def get_file_content(self, file_id: str) -> dict:
        return self._data("GET", f"/api/files/{file_id}/content")

    def health(self) -> dict:
        return self._request("GET", "/health")
