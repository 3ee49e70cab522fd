"""
Mailbox.py - Boîte aux lettres d'un ATM

File thread-safe alimentée par le distributeur de messages et vidée par
le seul thread propriétaire du noeud. C'est le canal de commande unique
par lequel passent les jetons reçus et les battements du moniteur.
"""

from threading import Lock, Condition
from collections import deque


class Mailbox:
    """
    Boîte aux lettres thread-safe pour la communication asynchrone.

    Permet au noeud de :
    - Recevoir des événements déposés par d'autres threads
    - Récupérer des événements sans attente active
    - Attendre un événement pendant une durée bornée
    """

    def __init__(self, owner_node_id, owner_node_name):
        """
        Initialise une boîte aux lettres pour un noeud.

        Args:
            owner_node_id (int): ID du noeud propriétaire
            owner_node_name (str): Nom du noeud propriétaire (ex: "ATM1")
        """
        self.owner_id = owner_node_id
        self.owner_name = owner_node_name

        # File d'attente des événements (FIFO)
        self.messages = deque()

        # Synchronisation thread-safe
        self.lock = Lock()
        self.condition = Condition(self.lock)

        print(f"📬 Mailbox created for {owner_node_name} (ID: {owner_node_id})")

    def deposit_message(self, message):
        """
        Dépose un événement dans la boîte aux lettres.

        Args:
            message (RingMessage): Événement à déposer
        """
        with self.condition:
            self.messages.append(message)
            # Réveiller le thread propriétaire
            self.condition.notify_all()

    def get_message(self):
        """
        Récupère le prochain événement sans attendre.

        Returns:
            RingMessage | None: Le prochain événement ou None si aucun disponible
        """
        with self.lock:
            if len(self.messages) > 0:
                return self.messages.popleft()
            return None

    def wait_for_message(self, timeout=None):
        """
        Attend l'arrivée d'un événement.

        Args:
            timeout (float, optional): Timeout en secondes. None = attente infinie

        Returns:
            RingMessage | None: Événement reçu ou None si timeout
        """
        with self.condition:
            if not self.condition.wait_for(lambda: len(self.messages) > 0, timeout):
                return None
            return self.messages.popleft()
