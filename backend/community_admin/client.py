"""
HTTP client for the admin API, mirroring the routes one method each.

    client = AdminApiClient("https://admin.example.org")
    client.login("Elsipogtog First Nation", "secret")
    news = client.list_news(community="Elsipogtog First Nation")
"""
import logging
from typing import Optional
from urllib.parse import quote

import httpx

logger = logging.getLogger("community-admin.client")


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _params(**kwargs) -> dict:
    return {k: v for k, v in kwargs.items() if v is not None}


class AdminApiClient:
    """Synchronous client; pass http_client to reuse a configured httpx.Client."""

    def __init__(self, base_url: str = "", token: Optional[str] = None,
                 http_client: Optional[httpx.Client] = None, timeout: float = 60.0):
        self._http = http_client or httpx.Client(base_url=base_url, timeout=timeout)
        self.token = token

    def close(self):
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        response = self._http.request(method, path, headers=headers, **kwargs)

        new_token = response.headers.get("X-New-Token")
        if new_token:
            self.token = new_token

        if response.status_code >= 400:
            try:
                message = response.json().get("error") or response.reason_phrase
            except ValueError:
                message = response.text or response.reason_phrase
            logger.warning(f"{method} {path} failed: {response.status_code} {message}")
            raise ApiError(response.status_code, message)
        return response

    def _json(self, method: str, path: str, **kwargs):
        return self._request(method, path, **kwargs).json()

    # --- Communities ---
    def _community_auth(self, name: str, password: str, action: str) -> dict:
        data = self._json("POST", "/api/communities", json={"communityName": name, "password": password, "action": action})
        self.token = data.get("token")
        return data

    def login(self, name: str, password: str) -> dict:
        return self._community_auth(name, password, "login")

    def register(self, name: str, password: str) -> dict:
        return self._community_auth(name, password, "register")

    def community_exists(self, name: str) -> bool:
        return self._json("GET", "/api/communities", params={"name": name})["exists"]

    def resolve_community(self, name: str) -> dict:
        return self._json("GET", f"/api/communities/{quote(name, safe='')}/identity")

    def associate_community(self, name: str, include_unaffiliated: bool = False) -> dict:
        params = {"associateNullUsers": "true"} if include_unaffiliated else {}
        return self._json("POST", f"/api/communities/{quote(name, safe='')}/associate", params=params)

    # --- Users ---
    def list_users(self, community: Optional[str] = None) -> list:
        return self._json("GET", "/api/users", params=_params(community=community))

    def get_user(self, user_id: str) -> dict:
        return self._json("GET", f"/api/users/{user_id}")

    def create_user(self, data: dict) -> dict:
        return self._json("POST", "/api/users", json=data)

    def update_user(self, user_id: str, data: dict) -> dict:
        return self._json("PUT", f"/api/users/{user_id}", json=data)

    def delete_user(self, user_id: str):
        self._request("DELETE", f"/api/users/{user_id}")

    def migrate_users(self, dry_run: bool = True) -> dict:
        return self._json("POST", "/api/users/migrate", params={"dryRun": str(dry_run).lower()})

    # --- Posts ---
    def list_posts(self, user_id: Optional[str] = None, community: Optional[str] = None,
                   category: Optional[str] = None) -> list:
        return self._json("GET", "/api/posts", params=_params(userId=user_id, community=community, category=category))

    def create_post(self, data: dict) -> dict:
        return self._json("POST", "/api/posts", json=data)

    def update_post(self, post_id: str, data: dict) -> dict:
        return self._json("PUT", f"/api/posts/{post_id}", json=data)

    def delete_post(self, post_id: str):
        self._request("DELETE", f"/api/posts/{post_id}")

    # --- News / businesses / resources ---
    def list_news(self, community: Optional[str] = None) -> list:
        return self._json("GET", "/api/news", params=_params(community=community))

    def create_news(self, data: dict) -> dict:
        return self._json("POST", "/api/news", json=data)

    def update_news(self, news_id: str, data: dict) -> dict:
        return self._json("PUT", f"/api/news/{news_id}", json=data)

    def delete_news(self, news_id: str):
        self._request("DELETE", f"/api/news/{news_id}")

    def list_businesses(self, community: Optional[str] = None) -> list:
        return self._json("GET", "/api/businesses", params=_params(community=community))

    def create_business(self, data: dict) -> dict:
        return self._json("POST", "/api/businesses", json=data)

    def update_business(self, business_id: str, data: dict) -> dict:
        return self._json("PUT", f"/api/businesses/{business_id}", json=data)

    def delete_business(self, business_id: str):
        self._request("DELETE", f"/api/businesses/{business_id}")

    def list_resources(self, community: Optional[str] = None) -> list:
        return self._json("GET", "/api/resources", params=_params(community=community))

    def create_resource(self, data: dict) -> dict:
        return self._json("POST", "/api/resources", json=data)

    def update_resource(self, resource_id: str, data: dict) -> dict:
        return self._json("PUT", f"/api/resources/{resource_id}", json=data)

    def delete_resource(self, resource_id: str):
        self._request("DELETE", f"/api/resources/{resource_id}")

    # --- Resource content ---
    def list_resource_content(self, resource_id: Optional[str] = None, community: Optional[str] = None) -> list:
        return self._json("GET", "/api/resource-content", params=_params(resourceId=resource_id, community=community))

    def get_resource_content(self, content_id: str) -> dict:
        return self._json("GET", f"/api/resource-content/{content_id}")

    def create_resource_content(self, data: dict) -> dict:
        return self._json("POST", "/api/resource-content", json=data)

    def update_resource_content(self, content_id: str, data: dict) -> dict:
        return self._json("PUT", f"/api/resource-content/{content_id}", json=data)

    def delete_resource_content(self, content_id: str):
        self._request("DELETE", f"/api/resource-content/{content_id}")

    # --- Documents ---
    def list_documents(self, category: Optional[str] = None, community: Optional[str] = None) -> list:
        return self._json("GET", "/api/documents", params=_params(category=category, community=community))

    def document_categories(self) -> list:
        return self._json("GET", "/api/documents/categories")

    def get_document(self, document_id: str) -> dict:
        return self._json("GET", f"/api/documents/{document_id}")

    def update_document(self, document_id: str, data: dict) -> dict:
        return self._json("PUT", f"/api/documents/{document_id}", json=data)

    def delete_document(self, document_id: str):
        self._request("DELETE", f"/api/documents/{document_id}")

    def document_file_url(self, document_id: str) -> Optional[str]:
        """Viewing URL for a document's file, or None when it has none."""
        try:
            return self._json("GET", f"/api/documents/{document_id}/file").get("url")
        except (ApiError, httpx.HTTPError) as e:
            logger.debug(f"No file URL for document {document_id}: {e}")
            return None

    def download_document(self, document_id: str, url: Optional[str] = None) -> bytes:
        return self._request("GET", f"/api/documents/{document_id}/file/download", params=_params(url=url)).content
