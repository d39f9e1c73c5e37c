import pytest

from queue_viewer.config import RECONNECT_INTERVAL_S, ViewerConfig, endpoint_from_origin


@pytest.mark.parametrize(
    ("origin", "expected"),
    [
        ("http://localhost", "ws://localhost/ws"),
        ("https://mail.test:8443", "wss://mail.test:8443/ws"),
        ("http://127.0.0.1:8080/index.html?x=1#top", "ws://127.0.0.1:8080/ws"),
        ("ws://queue.local:9000", "ws://queue.local:9000/ws"),
    ],
)
def test_endpoint_from_origin(origin, expected):
    assert endpoint_from_origin(origin) == expected


def test_endpoint_custom_path():
    assert endpoint_from_origin("http://h", "stream") == "ws://h/stream"


@pytest.mark.parametrize("origin", ["ftp://h", "localhost:8080", "http://"])
def test_endpoint_rejects_bad_origins(origin):
    with pytest.raises(ValueError):
        endpoint_from_origin(origin)


def test_config_defaults():
    config = ViewerConfig()

    assert config.endpoint == "ws://localhost/ws"
    assert config.reconnect_interval_s == RECONNECT_INTERVAL_S == 5.0
