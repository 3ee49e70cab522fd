import threading

from Mailbox import Mailbox
from MonitorTick import MonitorTick
from TokenMessage import TokenMessage


def test_messages_are_delivered_in_order():
    mailbox = Mailbox(1, "ATM1")
    first = TokenMessage(1, "TOKEN:1:1000")
    second = MonitorTick(1)

    mailbox.deposit_message(first)
    mailbox.deposit_message(second)

    assert mailbox.get_message() is first
    assert mailbox.wait_for_message(timeout=0.1) is second
    assert mailbox.get_message() is None


def test_bounded_wait_returns_none():
    mailbox = Mailbox(1, "ATM1")

    assert mailbox.get_message() is None
    assert mailbox.wait_for_message(timeout=0.05) is None


def test_wait_wakes_up_on_deposit():
    mailbox = Mailbox(2, "ATM2")
    message = TokenMessage(2, "TOKEN:1:800")
    threading.Timer(0.05, mailbox.deposit_message, args=(message,)).start()

    assert mailbox.wait_for_message(timeout=2.0) is message
