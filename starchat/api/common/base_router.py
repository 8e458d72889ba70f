from typing import Any, Callable, Optional, Sequence

from fastapi import APIRouter
from fastapi.params import Depends

from starchat.api.common.decorators import handle_route_errors, log_route_call

Endpoint = Callable[..., Any]


class BaseRouter:
    """
    Owns an APIRouter and registers every endpoint with service error mapping
    and call logging applied. Include ``api_router`` in the app.
    """

    def __init__(
        self,
        prefix: str = "",
        tags: Optional[Sequence[str]] = None,
        dependencies: Optional[Sequence[Depends]] = None,
    ):
        self.api_router = APIRouter(prefix=prefix)
        self.tags = list(tags or [])
        self.dependencies = list(dependencies or [])

    def add_route(
        self,
        method: str,
        path: str,
        endpoint: Endpoint,
        tags: Optional[Sequence[str]] = None,
        **kwargs: Any,
    ) -> None:
        wrapped = log_route_call(handle_route_errors(endpoint))
        self.api_router.add_api_route(
            path,
            wrapped,
            methods=[method],
            tags=list(dict.fromkeys([*self.tags, *(tags or [])])),
            dependencies=self.dependencies,
            **kwargs,
        )

    def route(self, method: str, path: str, **kwargs: Any) -> Callable[[Endpoint], Endpoint]:
        def decorator(endpoint: Endpoint) -> Endpoint:
            self.add_route(method, path, endpoint, **kwargs)
            return endpoint

        return decorator

    def get(self, path: str, **kwargs: Any) -> Callable[[Endpoint], Endpoint]:
        return self.route("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Callable[[Endpoint], Endpoint]:
        return self.route("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Callable[[Endpoint], Endpoint]:
        return self.route("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Callable[[Endpoint], Endpoint]:
        return self.route("DELETE", path, **kwargs)
