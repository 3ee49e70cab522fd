"""
TokenMessage.py - Enregistrement de jeton reçu du prédécesseur

Publié par le thread d'écoute dès qu'une ligne arrive sur la socket ;
le décodage est laissé au moteur de protocole.
"""

from RingMessage import RingMessage


class TokenMessage(RingMessage):
    """Ligne brute reçue sur le réseau, à destination d'un noeud."""

    def __init__(self, node_id, record):
        RingMessage.__init__(self, node_id, record)

    def getRecord(self):
        """
        Retourne la ligne reçue, telle quelle.

        Returns:
            str: Enregistrement non décodé (peut être mal formé)
        """
        return self.payload
