"""
NodeConfig.py - Configuration d'un ATM de l'anneau

Regroupe l'identité du noeud, les adresses (écoute et successeur), le mode
panne, la transaction de démonstration et les délais du protocole.
La ligne de commande reprend la forme historique :

    python Node.py <id> <port> <port_successeur> [CRASH]
"""

import argparse

from PendingOperation import PendingOperation, default_operation_for

DEFAULT_HOST = "localhost"
AUTHORITY_ID = 1            # Seul ce noeud crée, régénère et termine
INITIAL_BALANCE = 1000      # Solde de référence de chaque nouveau jeton
TOKEN_TIMEOUT = 8.0         # Secondes sans jeton avant de le considérer perdu
MONITOR_INTERVAL = 2.0      # Période du moniteur de timeout
ACCEPT_TIMEOUT = 5.0        # Attente maximale d'une connexion entrante
RETRY_DELAY = 2.0           # Pause entre deux tentatives d'envoi
SETTLE_DELAY = 8.0          # Délai avant la création du premier jeton
STOP_SEND_ATTEMPTS = 3      # Le successeur a peut-être déjà terminé

# Sentinelle : "utiliser la transaction de démonstration du noeud"
_DEMO = object()


class ConfigurationError(ValueError):
    """Configuration invalide détectée au démarrage."""


class NodeConfig:
    """
    Configuration immuable d'un noeud.

    Args:
        node_id (int): ID logique du noeud (1..N)
        listen_port (int): Port TCP d'écoute (0 = port éphémère)
        successor_port (int): Port TCP du successeur dans l'anneau
        crashed (bool): Démarrer en panne simulée
        pending (PendingOperation | None): Transaction du noeud ; par défaut
            celle de la table de démonstration
    """

    def __init__(self, node_id, listen_port, successor_port, crashed=False,
                 host=DEFAULT_HOST, successor_host=DEFAULT_HOST, pending=_DEMO,
                 authority_id=AUTHORITY_ID, initial_balance=INITIAL_BALANCE,
                 token_timeout=TOKEN_TIMEOUT, monitor_interval=MONITOR_INTERVAL,
                 accept_timeout=ACCEPT_TIMEOUT, retry_delay=RETRY_DELAY,
                 settle_delay=SETTLE_DELAY, stop_send_attempts=STOP_SEND_ATTEMPTS):
        self.node_id = node_id
        self.listen_port = listen_port
        self.successor_port = successor_port
        self.crashed = crashed
        self.host = host
        self.successor_host = successor_host
        self.pending = default_operation_for(node_id) if pending is _DEMO else pending
        self.authority_id = authority_id
        self.initial_balance = initial_balance
        self.token_timeout = token_timeout
        self.monitor_interval = monitor_interval
        self.accept_timeout = accept_timeout
        self.retry_delay = retry_delay
        self.settle_delay = settle_delay
        self.stop_send_attempts = stop_send_attempts

    @property
    def name(self):
        return f"ATM{self.node_id}"

    @property
    def is_authority(self):
        return self.node_id == self.authority_id

    def validate(self):
        """
        Vérifie la cohérence de la configuration.

        Returns:
            NodeConfig: self, pour chaîner

        Raises:
            ConfigurationError: Au premier paramètre invalide
        """
        if self.node_id < 1:
            raise ConfigurationError(f"node id must be >= 1, got {self.node_id}")
        if self.authority_id < 1:
            raise ConfigurationError(f"authority id must be >= 1, got {self.authority_id}")
        for label, port in (("listen", self.listen_port), ("successor", self.successor_port)):
            if not 0 <= port <= 65535:
                raise ConfigurationError(f"{label} port out of range: {port}")
        if self.initial_balance < 0:
            raise ConfigurationError("initial balance must not be negative")
        for label in ("token_timeout", "monitor_interval", "accept_timeout"):
            if getattr(self, label) <= 0:
                raise ConfigurationError(f"{label} must be positive")
        if self.retry_delay < 0 or self.settle_delay < 0:
            raise ConfigurationError("delays must not be negative")
        if self.token_timeout <= self.monitor_interval:
            raise ConfigurationError("token timeout must exceed the monitor interval")
        if self.stop_send_attempts < 1:
            raise ConfigurationError("stop_send_attempts must be >= 1")
        return self

    def __repr__(self):
        return (f"NodeConfig(id={self.node_id}, port={self.listen_port}, "
                f"next={self.successor_host}:{self.successor_port}, "
                f"crashed={self.crashed}, pending={self.pending})")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="Node.py",
        description="ATM node of a token ring guarding a shared balance")
    parser.add_argument("id", type=int, help="logical node id (1..N)")
    parser.add_argument("port", type=int, help="local listen port")
    parser.add_argument("next_port", type=int, help="successor listen port")
    parser.add_argument("mode", nargs="?", choices=["CRASH"],
                        help="start as a crashed (fail-stop) node")
    parser.add_argument("--crash", action="store_true", help="same as CRASH")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--successor-host", default=DEFAULT_HOST)

    operation = parser.add_mutually_exclusive_group()
    operation.add_argument("--withdraw", type=int, metavar="AMOUNT")
    operation.add_argument("--deposit", type=int, metavar="AMOUNT")
    operation.add_argument("--no-operation", action="store_true")

    parser.add_argument("--authority", type=int, default=AUTHORITY_ID)
    parser.add_argument("--initial-balance", type=int, default=INITIAL_BALANCE)
    parser.add_argument("--timeout", type=float, default=TOKEN_TIMEOUT)
    parser.add_argument("--interval", type=float, default=MONITOR_INTERVAL)
    parser.add_argument("--accept-timeout", type=float, default=ACCEPT_TIMEOUT)
    parser.add_argument("--retry-delay", type=float, default=RETRY_DELAY)
    parser.add_argument("--settle", type=float, default=SETTLE_DELAY)
    return parser


def parse_args(argv=None):
    """
    Construit la configuration à partir de la ligne de commande.

    Les erreurs (identité non numérique, port invalide...) terminent le
    programme avec le message d'usage d'argparse (code 2).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    pending = _DEMO
    try:
        if args.no_operation:
            pending = None
        elif args.withdraw is not None:
            pending = PendingOperation.withdraw(args.withdraw)
        elif args.deposit is not None:
            pending = PendingOperation.deposit(args.deposit)

        config = NodeConfig(
            args.id, args.port, args.next_port,
            crashed=args.crash or args.mode == "CRASH",
            host=args.host,
            successor_host=args.successor_host,
            pending=pending,
            authority_id=args.authority,
            initial_balance=args.initial_balance,
            token_timeout=args.timeout,
            monitor_interval=args.interval,
            accept_timeout=args.accept_timeout,
            retry_delay=args.retry_delay,
            settle_delay=args.settle,
        )
        return config.validate()
    except ValueError as e:
        parser.error(str(e))
