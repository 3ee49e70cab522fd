import socket
import threading

import pytest

from Transport import SuccessorUnreachable, TcpLink, TcpListener


@pytest.fixture
def listener():
    server = TcpListener("localhost", 0, accept_timeout=0.2)
    yield server
    server.close()


def _free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("localhost", 0))
        return sock.getsockname()[1]


def test_one_record_per_connection(listener):
    link = TcpLink("localhost", listener.port)

    link.send("TOKEN:1:1000")
    assert listener.accept_record() == "TOKEN:1:1000"

    link.send("TOKEN:1:800:STOP")
    assert listener.accept_record() == "TOKEN:1:800:STOP"


def test_accept_is_bounded(listener):
    assert listener.accept_record() is None


def test_empty_connection_is_ignored(listener):
    socket.create_connection(("localhost", listener.port)).close()

    assert listener.accept_record() is None


def test_refused_connection_is_unreachable():
    link = TcpLink("localhost", _free_port(), connect_timeout=1.0)

    with pytest.raises(SuccessorUnreachable):
        link.send("TOKEN:1:1000")


def test_serve_delivers_records_until_stopped(listener):
    received = []
    done = threading.Event()
    running = [True]

    def on_record(record):
        received.append(record)
        if len(received) == 2:
            running[0] = False
            done.set()

    server = threading.Thread(target=listener.serve, args=(lambda: running[0], on_record))
    server.start()
    link = TcpLink("localhost", listener.port)
    link.send("TOKEN:1:1000")
    link.send("TOKEN:abc")

    assert done.wait(2.0)
    server.join(2.0)
    assert not server.is_alive()
    assert received == ["TOKEN:1:1000", "TOKEN:abc"]


def test_close_stops_serving(listener):
    server = threading.Thread(target=listener.serve, args=(lambda: True, lambda record: None))
    server.start()

    listener.close()
    server.join(2.0)

    assert not server.is_alive()
