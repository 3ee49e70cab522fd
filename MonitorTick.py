"""
MonitorTick.py - Battement périodique du moniteur de timeout

À chaque battement, le noeud vérifie s'il doit amorcer l'anneau ou
régénérer un jeton perdu.
"""

from RingMessage import RingMessage


class MonitorTick(RingMessage):

    def __init__(self, node_id):
        RingMessage.__init__(self, node_id, "TICK")
