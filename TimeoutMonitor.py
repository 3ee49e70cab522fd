"""
TimeoutMonitor.py - Surveillance de la perte du jeton

Un thread par noeud publie un battement périodique ; le noeud décide
ensuite, dans son propre thread, s'il faut amorcer l'anneau ou régénérer
le jeton.

SEUL le noeud autorité peut régénérer le jeton, et seulement si :
- il n'est pas en panne
- l'anneau est considéré stable (ring_ready)
- son propre jeton n'est pas en transit
- le timeout est réellement dépassé
"""

from threading import Thread, Event

from MessageDistributor import post
from MonitorTick import MonitorTick


def should_bootstrap(context, now):
    """L'autorité crée le premier jeton une fois le délai d'installation écoulé."""
    if context.is_crashed() or context.is_stopped() or not context.is_authority:
        return False
    with context.lock:
        return not context.ring_ready and now - context.started_at >= context.config.settle_delay


def should_regenerate(context, now):
    """
    Garde anti-duplication de la régénération.

    Le temps écoulé seul ne distingue pas un jeton perdu d'un jeton lent :
    tant que le jeton de l'autorité est en transit, rien n'est régénéré.

    Args:
        context (NodeContext): Contexte du noeud
        now (float): Instant courant (horloge du contexte)

    Returns:
        bool: True si un nouveau jeton doit être créé
    """
    if context.is_crashed() or context.is_stopped() or not context.is_authority:
        return False
    with context.lock:
        return (context.ring_ready
                and not context.token_in_transit
                and now - context.last_token_seen > context.config.token_timeout)


class TimeoutMonitor(Thread):
    """
    Thread qui publie un MonitorTick toutes les `interval` secondes.

    Au plus un battement attend dans la boîte aux lettres : tant que le
    noeud n'a pas consommé le précédent (par exemple pendant un envoi qui
    réessaie), les battements suivants sont sautés.
    """

    def __init__(self, node_id, interval, publish=post):
        Thread.__init__(self, name=f"Monitor-ATM{node_id}", daemon=True)
        self.node_id = node_id
        self.interval = interval
        self.publish = publish
        self._stopped = Event()
        self._tick_pending = Event()

    def run(self):
        while not self._stopped.wait(self.interval):
            if self._tick_pending.is_set():
                continue
            self._tick_pending.set()
            self.publish(MonitorTick(self.node_id))

    def tick_consumed(self):
        """Appelé par le noeud lorsqu'il traite un battement."""
        self._tick_pending.clear()

    def stop(self):
        self._stopped.set()
