"""
Tests du moteur de protocole : circulation, section critique,
terminaison et robustesse face aux enregistrements invalides.
"""

from NodeState import NodeState
from PendingOperation import PendingOperation


def _bootstrap(authority, clock):
    clock.advance(authority.context.config.settle_delay)
    return authority.engine.handle_tick()


def _relay(sender, receiver):
    return receiver.engine.handle_record(sender.link.last)


def test_scenario_full_circuit_on_demo_ring(ring, clock):
    atm1, atm2, atm3, atm4 = ring

    _bootstrap(atm1, clock)
    assert atm1.link.sent == ["TOKEN:1:1000"]

    _relay(atm1, atm2)
    assert atm2.link.last == "TOKEN:1:800"
    _relay(atm2, atm3)
    assert atm3.link.last == "TOKEN:1:900"
    _relay(atm3, atm4)
    assert atm4.link.last == "TOKEN:1:400"

    assert _relay(atm4, atm1) is NodeState.STOPPED
    assert atm1.link.last == "TOKEN:1:400:STOP"

    for sender, receiver in ((atm1, atm2), (atm2, atm3), (atm3, atm4)):
        assert _relay(sender, receiver) is NodeState.STOPPED
        assert receiver.link.last == "TOKEN:1:400:STOP"

    for atm in ring:
        assert atm.context.is_stopped()
        assert atm.context.last_token.balance == 400


def test_operations_execute_at_most_once(ring):
    atm2 = ring[1]

    atm2.engine.handle_record("TOKEN:1:1000")
    atm2.engine.handle_record("TOKEN:1:1000")

    assert atm2.link.sent == ["TOKEN:1:800", "TOKEN:1:1000"]
    assert atm2.context.pending is None
    assert atm2.context.executions == 1


def test_insufficient_funds_consumes_operation(make_node):
    atm4 = make_node(4)

    atm4.engine.handle_record("TOKEN:1:300")
    atm4.engine.handle_record("TOKEN:1:900")

    assert atm4.link.sent == ["TOKEN:1:300", "TOKEN:1:900"]
    assert atm4.context.pending is None


def test_origin_is_never_changed_on_forward(make_node):
    node = make_node(3, pending=PendingOperation.deposit(10))

    node.engine.handle_record("TOKEN:7:50")

    assert node.link.last == "TOKEN:7:60"


def test_node_without_operation_forwards_unchanged(make_node):
    node = make_node(5)

    assert node.engine.handle_record("TOKEN:1:1000") is NodeState.AWAITING_TOKEN
    assert node.link.sent == ["TOKEN:1:1000"]


def test_malformed_record_is_dropped(make_node, clock):
    node = make_node(2)
    seen_before = node.context.last_token_seen
    clock.advance(3)

    assert node.engine.handle_record("TOKEN:abc") is NodeState.AWAITING_TOKEN

    assert node.link.sent == []
    assert node.context.last_token_seen == seen_before
    assert node.context.pending == PendingOperation.withdraw(200)


def test_crashed_node_absorbs_everything(make_node):
    node = make_node(3, crashed=True)

    assert node.engine.handle_record("TOKEN:1:1000") is NodeState.CRASHED
    assert node.engine.handle_record("TOKEN:1:1000:STOP") is NodeState.CRASHED

    assert node.link.attempts == 0
    assert node.context.pending == PendingOperation.deposit(100)


def test_stop_token_never_runs_critical_section(make_node):
    node = make_node(2)

    assert node.engine.handle_record("TOKEN:1:1000:STOP") is NodeState.STOPPED

    assert node.link.sent == ["TOKEN:1:1000:STOP"]
    assert node.context.pending is not None
    assert node.context.executions == 0


def test_stopped_node_ignores_further_tokens(make_node):
    node = make_node(2)
    node.engine.handle_record("TOKEN:1:1000:STOP")

    node.engine.handle_record("TOKEN:1:1000:STOP")
    node.engine.handle_record("TOKEN:1:1000")

    assert node.link.sent == ["TOKEN:1:1000:STOP"]


def test_authority_does_not_run_operation_on_completed_circuit(make_node):
    atm1 = make_node(1, pending=PendingOperation.deposit(5))

    atm1.engine.handle_record("TOKEN:1:500")

    assert atm1.link.sent == ["TOKEN:1:500:STOP"]
    assert atm1.context.executions == 0


def test_authority_forwards_foreign_origin_tokens(make_node):
    atm1 = make_node(1)

    assert atm1.engine.handle_record("TOKEN:2:500") is NodeState.AWAITING_TOKEN
    assert atm1.link.sent == ["TOKEN:2:500"]


def test_receipt_refreshes_liveness(make_node, clock):
    node = make_node(2)
    clock.advance(5)

    node.engine.handle_record("TOKEN:1:1000")

    assert node.context.last_token_seen == clock.now


def test_stop_forward_is_bounded(make_node):
    node = make_node(4, stop_send_attempts=3)
    node.link.failures = 10

    assert node.engine.handle_record("TOKEN:1:400:STOP") is NodeState.STOPPED
    assert node.link.attempts == 3
    assert node.link.sent == []
