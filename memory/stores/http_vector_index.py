"""HTTP client for an external vector index service.

Endpoints (relative to ``base_url``):

- ``GET /health``
- ``PUT /namespaces/{ns}/vectors/{id}`` with ``{"content", "embedding", "metadata"}``
- ``POST /namespaces/{ns}/search`` with ``{"vector", "k"}`` returning
  ``{"results": [{"id", "similarity"} | {"id", "distance"}]}``
- ``DELETE /namespaces/{ns}/vectors/{id}``

Every transport, encoding or protocol failure surfaces as ``VectorIndexError``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from core.errors import VectorIndexError
from memory.stores.vector_index import VectorHit, VectorIndex, VectorPayload

logger = logging.getLogger("rb.vector_index.http")


class HttpVectorIndex(VectorIndex):
    """Vector index adapter backed by a remote HNSW service."""

    def __init__(
        self,
        base_url: str,
        namespace: str,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.namespace = namespace
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.Client | None = None

    def _require_client(self) -> httpx.Client:
        if self._client is None:
            raise VectorIndexError("HTTP vector index is not initialized")
        return self._client

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        client = self._require_client()
        try:
            request = client.build_request(method, path, **kwargs)
            response = client.send(request)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, TypeError) as exc:
            raise VectorIndexError(f"{method} {path} failed: {exc}") from exc
        return response

    def initialize(self) -> None:
        if self._client is not None:
            return
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )
        try:
            self._request("GET", "/health")
        except VectorIndexError:
            self._client.close()
            self._client = None
            raise
        logger.info("Connected to vector index at %s (namespace=%s)", self.base_url, self.namespace)

    def store(self, item_id: str, payload: VectorPayload) -> None:
        body = {
            "content": payload["content"],
            "embedding": list(payload["embedding"]),
            "metadata": payload["metadata"],
        }
        self._request("PUT", f"/namespaces/{self.namespace}/vectors/{item_id}", json=body)

    def search(self, query_embedding: list[float], k: int) -> list[VectorHit]:
        response = self._request(
            "POST",
            f"/namespaces/{self.namespace}/search",
            json={"vector": list(query_embedding), "k": k},
        )
        try:
            rows = response.json()["results"]
            hits: list[VectorHit] = []
            for row in rows:
                if "similarity" in row:
                    similarity = float(row["similarity"])
                else:
                    similarity = 1.0 - float(row["distance"])
                hits.append({"id": str(row["id"]), "similarity": similarity})
        except (ValueError, KeyError, TypeError) as exc:
            raise VectorIndexError(f"Malformed search response: {exc}") from exc
        return hits

    def delete(self, item_id: str) -> None:
        self._request("DELETE", f"/namespaces/{self.namespace}/vectors/{item_id}")

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def is_available(self) -> bool:
        return self._client is not None
