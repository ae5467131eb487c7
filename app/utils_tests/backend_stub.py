from typing import Callable, Union

import httpx

Reply = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class BackendStub:
    """Scripted backend: answers with queued replies and records every request."""

    def __init__(self, *replies: Reply):
        self.replies: list[Reply] = list(replies)
        self.requests: list[httpx.Request] = []

    def reply(self, *replies: Reply) -> "BackendStub":
        self.replies.extend(replies)
        return self

    def json(self, status_code: int, body, headers=None) -> "BackendStub":
        return self.reply(httpx.Response(status_code, json=body, headers=headers))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.replies:
            return httpx.Response(200, json={})
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        return reply

    def client(self, config=None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.MockTransport(self.handler), follow_redirects=False
        )

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]
