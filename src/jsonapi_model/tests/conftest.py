import pytest

from ..config import set_default_transport
from .testing import RecordingTransport


@pytest.fixture
def transport():
    retval = RecordingTransport()
    set_default_transport(retval)
    yield retval
    set_default_transport(None)
