"""
Fixtures communes : faux lien réseau, horloge contrôlable, noeuds câblés.
"""

import pytest

from MessageDistributor import reset_message_distributor
from NodeConfig import NodeConfig
from NodeContext import NodeContext
from ProtocolEngine import ProtocolEngine
from RingCom import RingCom
from Transport import SuccessorUnreachable


class FakeClock:
    """Horloge monotone pilotée par le test."""

    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeLink:
    """Lien qui enregistre les envois ; échoue `failures` fois d'abord."""

    def __init__(self, failures=0):
        self.sent = []
        self.failures = failures
        self.attempts = 0

    def send(self, record):
        self.attempts += 1
        if self.failures:
            self.failures -= 1
            raise SuccessorUnreachable("connection refused")
        self.sent.append(record)

    @property
    def last(self):
        return self.sent[-1] if self.sent else None

    def __str__(self):
        return "FakeLink"


class Wired:
    """Un noeud prêt à être piloté à la main : contexte, lien, middleware, moteur."""

    def __init__(self, config, clock):
        self.clock = clock
        self.context = NodeContext(config, clock=clock)
        self.link = FakeLink()
        self.com = RingCom(self.context, self.link)
        self.engine = ProtocolEngine(self.context, self.com)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_config():
    def factory(node_id=1, **overrides):
        settings = dict(retry_delay=0, settle_delay=8.0, token_timeout=8.0,
                        monitor_interval=2.0)
        settings.update(overrides)
        return NodeConfig(node_id, 0, 0, **settings)
    return factory


@pytest.fixture
def fake_link():
    return FakeLink()


@pytest.fixture
def make_node(make_config, clock):
    def factory(node_id=1, **overrides):
        return Wired(make_config(node_id, **overrides), clock)
    return factory


@pytest.fixture
def ring(make_node):
    """Anneau de démonstration à 4 ATM (transactions par défaut)."""
    return [make_node(node_id) for node_id in range(1, 5)]


@pytest.fixture
def fresh_distributor():
    reset_message_distributor()
    yield
    reset_message_distributor()
