"""
NodeContext.py - Contexte explicite d'un ATM

Toutes les données mutables d'un noeud sont regroupées ici et passées
au moteur de protocole, au middleware et au moniteur.

Le timestamp de dernière réception et le drapeau "jeton en transit" sont
lus et modifiés par plusieurs activités : ils sont protégés par un verrou.
"""

import time
from threading import Lock

from NodeState import NodeState


class NodeContext:
    """
    État d'un noeud de l'anneau.

    Responsabilités :
    - Identité et configuration du noeud
    - Transaction en attente (consommée une seule fois)
    - Drapeaux de vivacité protégés par verrou
    """

    def __init__(self, config, clock=time.monotonic):
        """
        Initialise le contexte.

        Args:
            config (NodeConfig): Configuration validée du noeud
            clock (callable): Source de temps monotone (remplaçable en test)
        """
        self.config = config
        self.node_id = config.node_id
        self.name = config.name
        self.clock = clock

        self.pending = config.pending
        self.state = NodeState.CRASHED if config.crashed else NodeState.AWAITING_TOKEN
        self.executions = 0
        self.last_token = None

        self.lock = Lock()
        self.started_at = clock()
        self.ring_ready = False
        self.last_token_seen = self.started_at
        self.token_in_transit = False

    @property
    def is_authority(self):
        return self.config.is_authority

    def is_crashed(self):
        return self.state is NodeState.CRASHED

    def is_stopped(self):
        return self.state is NodeState.STOPPED

    # === VIVACITÉ (protégée par le verrou) ===

    def touch(self, now=None):
        """Met à jour l'instant de dernière réception du jeton."""
        with self.lock:
            self.last_token_seen = self.clock() if now is None else now

    def seconds_since_token(self, now=None):
        with self.lock:
            return (self.clock() if now is None else now) - self.last_token_seen

    def mark_in_transit(self):
        with self.lock:
            self.token_in_transit = True

    def clear_in_transit(self):
        with self.lock:
            self.token_in_transit = False

    def is_in_transit(self):
        with self.lock:
            return self.token_in_transit

    def mark_ring_ready(self):
        with self.lock:
            self.ring_ready = True

    def is_ring_ready(self):
        with self.lock:
            return self.ring_ready

    # === TRANSACTION ===

    def take_pending(self):
        """Retire et retourne la transaction en attente (None si déjà consommée)."""
        operation, self.pending = self.pending, None
        return operation

    def get_status(self):
        """
        Retourne l'état actuel du noeud.

        Returns:
            dict: État complet (état, drapeaux, transaction, dernier jeton)
        """
        with self.lock:
            return {
                'id': self.node_id,
                'state': self.state,
                'ring_ready': self.ring_ready,
                'token_in_transit': self.token_in_transit,
                'last_token_seen': self.last_token_seen,
                'pending': self.pending,
                'executions': self.executions,
                'last_token': self.last_token,
            }
