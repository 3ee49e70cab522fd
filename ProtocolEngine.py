"""
ProtocolEngine.py - Machine à états de l'anneau à jeton d'un ATM

Traite chaque enregistrement reçu dans l'ordre suivant :
1. noeud en panne : ignore tout
2. décodage (un enregistrement mal formé est abandonné)
3. mise à jour de l'instant de dernière réception
4. fin de tour détectée par l'autorité : envoi du STOP et arrêt
5. STOP reçu : propagation unique et arrêt
6. section critique si une transaction est en attente
7. transmission du jeton au successeur, origine inchangée

Traite aussi les battements du moniteur (amorçage et régénération).
"""

from NodeState import NodeState
from TerminationDetector import TerminationDetector
from TimeoutMonitor import should_bootstrap, should_regenerate
from Token import MalformedTokenError, Token


class ProtocolEngine:
    """
    Moteur de protocole d'un noeud.

    N'est appelé que depuis le thread propriétaire du noeud : un seul jeton
    est possédé à la fois, de sa réception à sa transmission.
    """

    def __init__(self, context, com):
        """
        Args:
            context (NodeContext): Contexte du noeud
            com (RingCom): Middleware d'envoi vers le successeur
        """
        self.context = context
        self.com = com
        self.detector = TerminationDetector(context)

    @property
    def state(self):
        return self.context.state

    def handle_record(self, record, now=None):
        """
        Traite une ligne reçue du prédécesseur.

        Args:
            record (str): Enregistrement brut
            now (float, optional): Instant de réception

        Returns:
            NodeState: État du noeud après traitement
        """
        ctx = self.context

        # Noeud crashé ou terminé : ignore chaque message
        if ctx.state.is_terminal():
            return ctx.state

        try:
            token = Token.parse(record)
        except MalformedTokenError as e:
            print(f"🗑️ {ctx.name} dropped malformed record {record!r}: {e}")
            return ctx.state

        ctx.state = NodeState.PROCESSING_TOKEN
        ctx.last_token = token
        ctx.touch(now)

        # Le jeton de l'autorité lui est revenu : il n'est plus en transit
        if ctx.is_authority and token.origin == ctx.node_id:
            ctx.clear_in_transit()

        if self.detector.is_circuit_complete(token):
            print(f"🏁 {ctx.name} token ring completed (balance={token.balance}), sending STOP")
            return self._stop(self.detector.stop_token(token))

        if token.stop:
            print(f"🛑 {ctx.name} received STOP (balance={token.balance}), terminating")
            return self._stop(token)

        print(f"🎯 {ctx.name} received TOKEN origin={token.origin} balance={token.balance}")
        token = self.run_critical_section(token)

        ctx.state = NodeState.FORWARDING
        self.com.forward(token)
        ctx.state = NodeState.AWAITING_TOKEN
        return ctx.state

    def run_critical_section(self, token):
        """
        Exécute la transaction en attente sur le solde du jeton.

        La transaction est consommée même si le retrait est refusé.

        Returns:
            Token: Jeton à transmettre (même origine)
        """
        ctx = self.context
        operation = ctx.take_pending()
        if operation is None:
            return token

        print(f"🔒 {ctx.name} ENTERS critical section: {operation}")
        balance, applied = operation.apply(token.balance)
        ctx.executions += 1
        if applied:
            print(f"🔓 {ctx.name} EXITS critical section | new balance={balance}")
        else:
            print(f"🔓 {ctx.name} EXITS critical section | insufficient funds, balance={balance}")
        ctx.last_token = token.with_balance(balance)
        return ctx.last_token

    def handle_tick(self, now=None):
        """
        Battement du moniteur : amorçage de l'anneau ou régénération.

        Returns:
            Token | None: Le jeton créé, s'il y en a un
        """
        ctx = self.context
        now = ctx.clock() if now is None else now

        if should_bootstrap(ctx, now):
            ctx.mark_ring_ready()
            print(f"🚀 {ctx.name} ring is ready, creating initial TOKEN")
            token = self.com.mint()
            ctx.touch()
            return token

        if should_regenerate(ctx, now):
            print(f"⏰ {ctx.name} real timeout ({ctx.seconds_since_token(now):.1f}s without token), regenerating TOKEN")
            token = self.com.mint()
            ctx.touch()
            return token

        return None

    def _stop(self, token):
        self.context.last_token = token
        self.com.forward(token, attempts=self.context.config.stop_send_attempts)
        self.context.state = NodeState.STOPPED
        print(f"✅ {self.context.name} stopped with final balance {token.balance}")
        return self.context.state
