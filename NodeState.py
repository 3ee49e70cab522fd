"""
NodeState.py - États d'un ATM dans l'anneau à jeton

Cette énumération définit les différents états possibles d'un noeud
pendant la circulation du jeton.
"""

from enum import Enum

class NodeState(Enum):
    """
    États possibles d'un noeud de l'anneau.

    Transitions possibles :
    AWAITING_TOKEN → PROCESSING_TOKEN (réception d'un jeton valide)
    PROCESSING_TOKEN → FORWARDING (section critique terminée)
    FORWARDING → AWAITING_TOKEN (jeton transmis au successeur)
    PROCESSING_TOKEN → STOPPED (tour complet détecté ou STOP reçu)

    STOPPED et CRASHED sont absorbants.
    """

    AWAITING_TOKEN = "awaiting_token"       # En attente du jeton
    PROCESSING_TOKEN = "processing_token"   # Jeton décodé, possédé par le noeud
    FORWARDING = "forwarding"               # Transmission au successeur
    STOPPED = "stopped"                     # Terminaison distribuée atteinte
    CRASHED = "crashed"                     # Panne simulée (fail-stop)

    def is_terminal(self):
        return self in (NodeState.STOPPED, NodeState.CRASHED)
