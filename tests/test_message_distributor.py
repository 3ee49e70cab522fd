"""
Tests du routage par le bus PyBus vers les boîtes aux lettres.
"""

import pytest

from Mailbox import Mailbox
from MessageDistributor import get_message_distributor, post
from MonitorTick import MonitorTick
from TokenMessage import TokenMessage


pytestmark = pytest.mark.usefixtures("fresh_distributor")


def test_singleton():
    assert get_message_distributor() is get_message_distributor()


def test_token_record_reaches_addressed_mailbox():
    distributor = get_message_distributor()
    atm1, atm2 = Mailbox(1, "ATM1"), Mailbox(2, "ATM2")
    distributor.register_mailbox(1, atm1)
    distributor.register_mailbox(2, atm2)

    post(TokenMessage(2, "TOKEN:1:1000"))

    message = atm2.wait_for_message(timeout=2.0)
    assert isinstance(message, TokenMessage)
    assert message.getRecord() == "TOKEN:1:1000"
    assert atm1.wait_for_message(timeout=0.1) is None


def test_monitor_tick_reaches_mailbox():
    distributor = get_message_distributor()
    mailbox = Mailbox(1, "ATM1")
    distributor.register_mailbox(1, mailbox)

    post(MonitorTick(1))

    assert isinstance(mailbox.wait_for_message(timeout=2.0), MonitorTick)


def test_unregistered_node_loses_record():
    distributor = get_message_distributor()
    mailbox = Mailbox(3, "ATM3")
    distributor.register_mailbox(3, mailbox)
    distributor.unregister_mailbox(3)

    post(TokenMessage(3, "TOKEN:1:1000"))

    assert mailbox.wait_for_message(timeout=0.2) is None
    assert 3 not in distributor.mailboxes
