"""
RingMessage.py - Classe de base des événements internes d'un ATM

Les activités concurrentes d'un noeud (écoute réseau, moniteur de timeout)
ne modifient jamais l'état du protocole : elles publient un événement sur
le bus, adressé au noeud propriétaire, qui le traite dans son propre thread.
"""


class RingMessage:
    """Événement adressé à un noeud de l'anneau."""

    def __init__(self, node_id, payload):
        """
        Initialise un événement.

        Args:
            node_id (int): ID du noeud destinataire
            payload (str): Contenu de l'événement
        """
        self.node_id = node_id
        self.payload = payload

    def getNodeId(self):
        """
        Retourne l'ID du noeud destinataire.

        Returns:
            int: ID du noeud qui doit traiter l'événement
        """
        return self.node_id

    def __repr__(self):
        return f"{self.__class__.__name__}(node={self.node_id}, payload={self.payload!r})"
