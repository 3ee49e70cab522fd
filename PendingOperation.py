"""
PendingOperation.py - Transaction en attente d'un ATM

Chaque ATM peut détenir une seule transaction, exécutée au plus une fois
pendant la vie de l'anneau, lorsqu'il possède le jeton.
"""

from enum import Enum
from typing import Dict, Optional, Tuple


class OperationKind(Enum):
    """Types de transactions possibles."""
    WITHDRAW = "withdraw"
    DEPOSIT = "deposit"


class PendingOperation:
    """
    Transaction bancaire appliquée au solde porté par le jeton.

    Attributes:
        kind (OperationKind): Retrait ou dépôt
        amount (int): Montant strictement positif
    """

    def __init__(self, kind: OperationKind, amount: int):
        if amount <= 0:
            raise ValueError(f"amount must be positive, got {amount}")
        self.kind = kind
        self.amount = amount

    @classmethod
    def withdraw(cls, amount: int) -> "PendingOperation":
        return cls(OperationKind.WITHDRAW, amount)

    @classmethod
    def deposit(cls, amount: int) -> "PendingOperation":
        return cls(OperationKind.DEPOSIT, amount)

    def apply(self, balance: int) -> Tuple[int, bool]:
        """
        Applique la transaction à un solde.

        Un retrait supérieur au solde est ignoré (fonds insuffisants), ce
        n'est pas une erreur.

        Args:
            balance: Solde courant du jeton

        Returns:
            tuple: (nouveau_solde, appliquée)
        """
        if self.kind is OperationKind.DEPOSIT:
            return balance + self.amount, True
        if balance >= self.amount:
            return balance - self.amount, True
        return balance, False

    def __eq__(self, other) -> bool:
        if not isinstance(other, PendingOperation):
            return NotImplemented
        return (self.kind, self.amount) == (other.kind, other.amount)

    def __str__(self) -> str:
        return f"{self.kind.name} {self.amount}"

    def __repr__(self) -> str:
        return f"PendingOperation({self.kind.name}, {self.amount})"


# Transactions de démonstration : rendent la mutuelle exclusion observable
DEMO_OPERATIONS: Dict[int, PendingOperation] = {
    2: PendingOperation.withdraw(200),
    3: PendingOperation.deposit(100),
    4: PendingOperation.withdraw(500),
}


def default_operation_for(node_id: int) -> Optional[PendingOperation]:
    """Retourne la transaction de démonstration du noeud, ou None."""
    return DEMO_OPERATIONS.get(node_id)
