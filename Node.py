"""
Node.py - ATM de l'anneau à jeton

Ce module implémente un noeud avec :
- Un thread d'écoute TCP qui publie chaque ligne reçue sur le bus
- Un moniteur de timeout qui publie des battements sur le bus
- Un thread propriétaire (le noeud lui-même) qui vide sa boîte aux
  lettres et pilote le moteur de protocole

Usage :
    python Node.py 1 5001 5002
    python Node.py 3 5003 5004 CRASH
"""

import sys
from threading import Thread

from Mailbox import Mailbox
from MessageDistributor import get_message_distributor, post
from MonitorTick import MonitorTick
from NodeConfig import parse_args
from NodeContext import NodeContext
from NodeState import NodeState
from ProtocolEngine import ProtocolEngine
from RingCom import RingCom
from TimeoutMonitor import TimeoutMonitor
from TokenMessage import TokenMessage
from Transport import TcpLink, TcpListener


class Node(Thread):
    """
    Noeud (ATM) de l'anneau.

    Responsabilités :
    - Câblage du transport, du bus, du moniteur et du moteur
    - Boucle principale : un événement à la fois, jamais deux jetons
    """

    def __init__(self, config, listener=None, link=None):
        """
        Initialise un noeud sans le démarrer.

        Args:
            config (NodeConfig): Configuration validée
            listener (TcpListener, optional): Socket d'écoute déjà liée
            link (TcpLink, optional): Lien vers le successeur
        """
        Thread.__init__(self, name="MainThread-" + config.name)

        self.config = config
        self.context = NodeContext(config)
        self.alive = True

        self.listener = listener or TcpListener(config.host, config.listen_port, config.accept_timeout)

        self.mailbox = Mailbox(config.node_id, config.name)
        get_message_distributor().register_mailbox(config.node_id, self.mailbox)

        self.link = link or TcpLink(config.successor_host, config.successor_port)
        self.com = RingCom(self.context, self.link)
        self.engine = ProtocolEngine(self.context, self.com)

        self.listener_thread = Thread(target=self._listen, name="Listener-" + config.name, daemon=True)
        self.monitor = TimeoutMonitor(config.node_id, config.monitor_interval)

        if self.context.is_crashed():
            print(f"💥 {config.name} starts CRASHED (fail-stop)")

    @property
    def node_id(self):
        return self.config.node_id

    @property
    def port(self):
        return self.listener.port

    def _listen(self):
        print(f"👂 {self.config.name} listening on port {self.listener.port}")
        self.listener.serve(
            lambda: self.alive,
            lambda record: post(TokenMessage(self.node_id, record)))

    def run(self):
        self.listener_thread.start()
        self.monitor.start()
        try:
            while self.alive:
                message = self.mailbox.wait_for_message(timeout=self.config.monitor_interval)
                if message is None:
                    continue
                if isinstance(message, TokenMessage):
                    self.engine.handle_record(message.getRecord())
                elif isinstance(message, MonitorTick):
                    self.monitor.tick_consumed()
                    self.engine.handle_tick()
                if self.context.is_stopped():
                    break
        finally:
            self._shutdown()
        print(f"{self.name} stopped ({self.context.state.value})")

    def _shutdown(self):
        self.alive = False
        self.com.halt()
        self.monitor.stop()
        self.listener.close()
        get_message_distributor().unregister_mailbox(self.node_id)
        self._drain_mailbox()

    def _drain_mailbox(self):
        """
        Vide la boîte aux lettres après l'arrêt.

        Returns:
            int: Nombre d'événements abandonnés
        """
        dropped = 0
        while self.mailbox.get_message() is not None:
            dropped += 1
        if dropped:
            print(f"🗑️ {self.config.name} dropped {dropped} pending event(s) on shutdown")
        return dropped

    def get_status(self):
        return self.context.get_status()

    def is_stopped(self):
        return self.context.state is NodeState.STOPPED

    def stop(self):
        """Arrêt externe (opérateur ou lanceur) : nécessaire pour un noeud crashé."""
        self.alive = False
        self.com.halt()

    def waitStopped(self, timeout=None):
        self.join(timeout)


def main(argv=None):
    """
    Point d'entrée d'un processus ATM.

    Returns:
        int: 0 lorsque le noeud a atteint l'état STOPPED
    """
    config = parse_args(argv)
    try:
        node = Node(config)
    except OSError as e:
        print(f"❌ {config.name} cannot listen on {config.host}:{config.listen_port}: {e}")
        return 1

    node.start()
    try:
        while node.is_alive():
            node.join(1.0)
    except KeyboardInterrupt:
        print(f"\n🛑 {config.name} interrupted by the operator")
        node.stop()
        node.join()
        return 130
    return 0 if node.is_stopped() else 1


if __name__ == '__main__':
    sys.exit(main())
