import pytest

from apimanager.http import HttpResponse
from apimanager.registry import reset_registry


@pytest.fixture(autouse=True)
def _fresh_registry():
    reset_registry()
    yield
    reset_registry()


class RecordingTransport:
    """In-memory transport that replays canned responses and records requests."""

    def __init__(self, *responses: HttpResponse) -> None:
        self._responses = list(responses) or [HttpResponse(status_code=200, text="{}")]
        self.requests = []
        self.closed = False

    async def send(self, request):
        self.requests.append(request)
        if len(self._responses) > 1:
            return self._responses.pop(0)
        return self._responses[0]

    def close(self):
        self.closed = True


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def transport_factory():
    return RecordingTransport
