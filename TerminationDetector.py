"""
TerminationDetector.py - Détection de la terminaison distribuée

Seul le noeud autorité peut initier la terminaison : lorsqu'un jeton
portant sa propre origine lui revient (la première fois étant sa
création), l'anneau a fait un tour complet. Il marque alors le jeton STOP
et le diffuse une fois autour de l'anneau.
"""


class TerminationDetector:
    """Règle de fin de tour, évaluée par le moteur à chaque jeton reçu."""

    def __init__(self, context):
        self.context = context

    def is_circuit_complete(self, token):
        """
        Indique si le jeton reçu termine un tour complet.

        L'origine n'est jamais modifiée en route : c'est elle qui identifie
        le jeton créé par l'autorité.

        Args:
            token (Token): Jeton reçu

        Returns:
            bool: True si ce noeud doit initier la terminaison
        """
        return (self.context.is_authority
                and token.origin == self.context.node_id
                and not token.stop)

    def stop_token(self, token):
        """Jeton de terminaison : même origine, même solde, marqué STOP."""
        return token.with_stop()
