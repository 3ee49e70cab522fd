"""
MessageDistributor.py - Distributeur central des événements de l'anneau

Cette classe s'enregistre au bus PyBus et dépose automatiquement
chaque événement dans la boîte aux lettres du noeud destinataire.
"""

import threading
from pyeventbus3.pyeventbus3 import PyBus, Mode, subscribe
from TokenMessage import TokenMessage
from MonitorTick import MonitorTick


class MessageDistributor:
    """
    Distributeur qui route les événements vers les mailboxes des noeuds.

    Fait le lien entre le bus PyBus global (alimenté par les threads
    d'écoute et les moniteurs) et les boîtes aux lettres des noeuds.
    """

    def __init__(self):
        self.mailboxes = {}  # {node_id: mailbox}
        self.lock = threading.Lock()

        PyBus.Instance().register(self, self)
        print("📡 MessageDistributor initialized and registered to PyBus")

    def register_mailbox(self, node_id, mailbox):
        """
        Enregistre la boîte aux lettres d'un noeud.

        Args:
            node_id (int): ID du noeud
            mailbox (Mailbox): Boîte aux lettres du noeud
        """
        with self.lock:
            self.mailboxes[node_id] = mailbox
            print(f"📡➡️ Mailbox registered for ATM{node_id}")

    def unregister_mailbox(self, node_id):
        with self.lock:
            if node_id in self.mailboxes:
                del self.mailboxes[node_id]
                print(f"📡❌ Mailbox unregistered for ATM{node_id}")

    def _deliver(self, event):
        with self.lock:
            mailbox = self.mailboxes.get(event.getNodeId())
        if mailbox is None:
            return False
        mailbox.deposit_message(event)
        return True

    @subscribe(threadMode=Mode.PARALLEL, onEvent=TokenMessage)
    def distribute_token_message(self, event):
        """
        Distribue un enregistrement de jeton vers le noeud destinataire.

        Args:
            event (TokenMessage): Ligne reçue par le thread d'écoute
        """
        if self._deliver(event):
            print(f"📡🎯 Record delivered to ATM{event.getNodeId()}: {event.getRecord()}")
        else:
            print(f"📡❌ No mailbox found for ATM{event.getNodeId()}, record lost: {event.getRecord()}")

    @subscribe(threadMode=Mode.PARALLEL, onEvent=MonitorTick)
    def distribute_monitor_tick(self, event):
        # Un battement sans destinataire n'a pas d'importance
        self._deliver(event)

    def reset(self):
        """
        Oublie toutes les boîtes aux lettres.

        Le distributeur reste abonné au bus : PyBus ne garantit pas le
        désabonnement, une seule instance est donc créée par processus.
        """
        with self.lock:
            self.mailboxes.clear()
        print("📡🔄 MessageDistributor reset (no mailbox registered)")


# Instance globale singleton du distributeur
_message_distributor = None
_distributor_lock = threading.Lock()


def get_message_distributor():
    """
    Retourne l'instance singleton du distributeur de messages.

    Returns:
        MessageDistributor: Instance du distributeur
    """
    global _message_distributor
    if _message_distributor is None:
        with _distributor_lock:
            if _message_distributor is None:
                _message_distributor = MessageDistributor()
    return _message_distributor


def post(event):
    """Publie un événement de l'anneau sur le bus global."""
    get_message_distributor()
    PyBus.Instance().post(event)


def reset_message_distributor():
    """Vide le distributeur singleton (fin d'un anneau, tests)."""
    if _message_distributor is not None:
        _message_distributor.reset()
