"""
Transport.py - Lien TCP point à point entre un ATM et son successeur

Une connexion transporte exactement un enregistrement (une ligne texte).
Pas d'acquittement applicatif : la livraison TCP suffit.

- TcpLink : envoi d'une ligne au successeur (une tentative)
- TcpListener : acceptation bornée dans le temps, lecture d'une ligne
"""

import socket

ENCODING = "utf-8"
CONNECT_TIMEOUT = 5.0
READ_TIMEOUT = 5.0


class SuccessorUnreachable(ConnectionError):
    """Le successeur refuse la connexion ou la coupe pendant l'envoi."""


class TcpLink:
    """
    Lien sortant vers le successeur de l'anneau.

    Args:
        host (str): Hôte du successeur
        port (int): Port d'écoute du successeur
    """

    def __init__(self, host, port, connect_timeout=CONNECT_TIMEOUT):
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout

    def send(self, record):
        """
        Envoie un enregistrement sur une nouvelle connexion.

        Args:
            record (str): Ligne à envoyer (sans saut de ligne)

        Raises:
            SuccessorUnreachable: Connexion refusée, délai dépassé ou coupure
        """
        try:
            with socket.create_connection((self.host, self.port), timeout=self.connect_timeout) as sock:
                sock.sendall((record + "\n").encode(ENCODING))
        except OSError as e:
            raise SuccessorUnreachable(f"{self.host}:{self.port} unreachable: {e}") from e

    def __repr__(self):
        return f"TcpLink({self.host}:{self.port})"


class TcpListener:
    """
    Socket d'écoute d'un noeud.

    L'attente d'une connexion est bornée par accept_timeout pour que la
    boucle de réception puisse vérifier régulièrement si elle doit s'arrêter.
    """

    def __init__(self, host, port, accept_timeout):
        self.host = host
        self.closed = False
        self.server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            self.server.bind((host, port))
            self.server.listen()
        except OSError:
            self.server.close()
            raise
        self.server.settimeout(accept_timeout)

    @property
    def port(self):
        """Port réellement lié (utile quand le port demandé vaut 0)."""
        return self.server.getsockname()[1]

    def accept_record(self):
        """
        Attend une connexion et lit sa ligne.

        Returns:
            str | None: La ligne reçue, ou None si rien n'est arrivé
                avant le délai (ou si la connexion était vide)
        """
        try:
            conn, _ = self.server.accept()
        except socket.timeout:
            return None

        with conn:
            conn.settimeout(READ_TIMEOUT)
            try:
                with conn.makefile("r", encoding=ENCODING) as stream:
                    line = stream.readline()
            except (OSError, UnicodeDecodeError) as e:
                print(f"⚠️ Listener {self.host}:{self.port} failed to read record: {e}")
                return None

        line = line.strip()
        return line or None

    def serve(self, should_continue, on_record):
        """
        Boucle de réception : délivre chaque ligne à on_record.

        Args:
            should_continue (callable): Retourne False pour arrêter la boucle
            on_record (callable): Appelé avec chaque ligne reçue
        """
        while should_continue() and not self.closed:
            try:
                record = self.accept_record()
            except OSError as e:
                if self.closed:
                    break
                # Connexion avortée côté client : on continue d'écouter
                print(f"⚠️ Listener {self.host} accept failed: {e}")
                continue
            if record is not None:
                on_record(record)

    def close(self):
        if not self.closed:
            self.closed = True
            self.server.close()
