"""
RingCom.py - Middleware de communication d'un ATM

Centralise tout ce qui concerne l'envoi du jeton au successeur :
- tentatives répétées quand le successeur est indisponible
- marquage "en transit" des jetons envoyés par le noeud autorité
- création (mint) d'un nouveau jeton par l'autorité
"""

from threading import Event

from Token import Token
from Transport import SuccessorUnreachable


class RingCom:
    """
    Middleware d'envoi vers le successeur dans l'anneau.

    Responsabilités :
    - Transmission fiable "au mieux" (réessai à intervalle fixe)
    - Gestion du drapeau anti-duplication de l'autorité
    - Interruption des réessais à l'arrêt du noeud
    """

    def __init__(self, context, link):
        """
        Initialise le middleware.

        Args:
            context (NodeContext): Contexte du noeud propriétaire
            link (TcpLink): Lien vers le successeur (doit offrir send(record))
        """
        self.context = context
        self.link = link
        self.retry_delay = context.config.retry_delay
        self._halted = Event()

        print(f"🔧 RingCom initialized for {context.name} (next: {link})")

    def forward(self, token, attempts=None):
        """
        Transmet le jeton au successeur.

        Sans limite de tentatives, le noeud réessaie jusqu'à la livraison :
        il n'existe aucun autre chemin dans l'anneau.

        Args:
            token (Token): Jeton à transmettre
            attempts (int, optional): Nombre maximal de tentatives

        Returns:
            bool: True si le jeton a été livré
        """
        record = token.encode()
        attempt = 0
        while not self._halted.is_set():
            attempt += 1
            try:
                self.link.send(record)
            except SuccessorUnreachable as e:
                print(f"⚠️ {self.context.name} successor unavailable ({e}), retrying...")
                if attempts is not None and attempt >= attempts:
                    print(f"❌ {self.context.name} gives up sending {record} after {attempt} attempts")
                    return False
                self._halted.wait(self.retry_delay)
                continue

            print(f"➡️ {self.context.name} forwarded {record}")
            # L'autorité ne doit jamais avoir deux de ses jetons dans l'anneau
            if self.context.is_authority and not token.stop:
                self.context.mark_in_transit()
            return True

        print(f"🛑 {self.context.name} send of {record} abandoned (node halted)")
        return False

    def mint(self):
        """
        Crée un nouveau jeton au nom de l'autorité et l'envoie.

        Returns:
            Token: Le jeton créé
        """
        token = Token.mint(self.context.node_id, self.context.config.initial_balance)
        print(f"🪙 {self.context.name} created {token}")
        self.forward(token)
        return token

    def halt(self):
        """Interrompt les réessais en cours et à venir."""
        self._halted.set()

    def is_halted(self):
        return self._halted.is_set()
