"""
Token.py - Jeton circulant dans l'anneau des ATM

Le jeton est l'unique état qui circule : il donne le droit d'entrer en
section critique et transporte le solde partagé. Il est immuable, chaque
modification produit un nouveau jeton.

Format de transport (une ligne texte) :
    TOKEN:<origin>:<balance>
    TOKEN:<origin>:<balance>:STOP
"""

import re
from typing import Optional

TOKEN_PREFIX = "TOKEN"
STOP_FLAG = "STOP"
DIGITS = re.compile(r"[0-9]+", re.ASCII)


class MalformedTokenError(ValueError):
    """Enregistrement reçu qui ne respecte pas le format du jeton."""


class Token:
    """
    Jeton de l'anneau.

    Attributes:
        origin (int): ID du noeud qui a créé cette instance de circulation
        balance (int): Solde du compte, toujours positif ou nul
        stop (bool): Marqueur de terminaison
    """

    __slots__ = ("origin", "balance", "stop")

    def __init__(self, origin: int, balance: int, stop: bool = False):
        self.origin = origin
        self.balance = balance
        self.stop = stop

    @classmethod
    def mint(cls, origin: int, balance: int) -> "Token":
        """Crée un nouveau jeton de travail (non marqué STOP)."""
        return cls(origin, balance)

    @classmethod
    def parse(cls, record: Optional[str]) -> "Token":
        """
        Décode une ligne reçue sur le réseau.

        Args:
            record: Ligne brute (le saut de ligne final est ignoré)

        Returns:
            Token: Le jeton décodé

        Raises:
            MalformedTokenError: Nombre de champs incorrect, préfixe inconnu,
                origine ou solde hors chiffres ASCII (signe compris), origine nulle
        """
        if record is None:
            raise MalformedTokenError("empty record")

        parts = record.strip().split(":")
        if len(parts) not in (3, 4) or parts[0] != TOKEN_PREFIX:
            raise MalformedTokenError(f"unexpected layout: {record!r}")

        # int() accepterait aussi "1_000", "+5", " 1" ou des chiffres non ASCII
        if not all(DIGITS.fullmatch(field) for field in parts[1:3]):
            raise MalformedTokenError(f"non numeric field: {record!r}")
        origin = int(parts[1])
        balance = int(parts[2])

        if origin < 1:
            raise MalformedTokenError(f"invalid origin {origin}")

        stop = False
        if len(parts) == 4:
            if parts[3] != STOP_FLAG:
                raise MalformedTokenError(f"unknown flag {parts[3]!r}")
            stop = True

        return cls(origin, balance, stop)

    def encode(self) -> str:
        """Retourne la ligne à transmettre (sans saut de ligne)."""
        fields = [TOKEN_PREFIX, str(self.origin), str(self.balance)]
        if self.stop:
            fields.append(STOP_FLAG)
        return ":".join(fields)

    def with_balance(self, balance: int) -> "Token":
        """Même jeton, même origine, nouveau solde."""
        return Token(self.origin, balance, self.stop)

    def with_stop(self) -> "Token":
        """Même origine et même solde, marqué STOP."""
        return Token(self.origin, self.balance, True)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return (self.origin, self.balance, self.stop) == (other.origin, other.balance, other.stop)

    def __hash__(self) -> int:
        return hash((self.origin, self.balance, self.stop))

    def __str__(self) -> str:
        return self.encode()

    def __repr__(self) -> str:
        return f"Token(origin={self.origin}, balance={self.balance}, stop={self.stop})"
