"""
Launcher.py - Lance un anneau complet d'ATM dans un seul processus

Chaque ATM garde sa propre socket TCP sur localhost : seul le
démarrage est regroupé, la communication reste un vrai échange réseau.
"""

import argparse
import time

from MessageDistributor import get_message_distributor, reset_message_distributor
from Node import Node
from NodeConfig import DEFAULT_HOST, ACCEPT_TIMEOUT, NodeConfig
from Transport import TcpListener


def launch(nbNodes=4, runningTime=None, crashed=(), killed=(), basePort=0, **settings):
    """
    Lance un anneau de nbNodes ATM : 1 → 2 → ... → nbNodes → 1.

    Args:
        nbNodes (int): Nombre de noeuds dans l'anneau
        runningTime (float, optional): Durée maximale en secondes ;
            None = attendre que tous les noeuds soient arrêtés
        crashed (iterable): IDs des noeuds démarrés en panne
        killed (iterable): IDs des processus tués : leur socket est fermée et
            aucun noeud n'est créé, le prédécesseur voit la connexion refusée
        basePort (int): Le noeud i écoute sur basePort + i ; 0 = ports éphémères
        **settings: Paramètres supplémentaires de NodeConfig (délais, solde...)

    Returns:
        list: Les noeuds créés (sans les tués), arrêtés, pour inspection de leur état
    """
    crashed = set(crashed)
    killed = set(killed)
    if runningTime is None and (crashed or killed):
        raise ValueError("a ring with crashed or killed nodes never stops: give a runningTime")

    print(f"🚀 Launching a ring of {nbNodes} ATM nodes...")

    host = settings.get("host", DEFAULT_HOST)
    accept_timeout = settings.get("accept_timeout", ACCEPT_TIMEOUT)

    # Toutes les sockets sont liées avant le premier envoi
    listeners = []
    try:
        for node_id in range(1, nbNodes + 1):
            port = basePort + node_id if basePort else 0
            listeners.append(TcpListener(host, port, accept_timeout))
    except OSError:
        for listener in listeners:
            listener.close()
        raise

    get_message_distributor()

    ports = [listener.port for listener in listeners]
    nodes = []
    for index, listener in enumerate(listeners):
        node_id = index + 1
        successor_port = ports[(index + 1) % nbNodes]
        if node_id in killed:
            # Le port reste réservé dans la topologie mais personne n'écoute
            listener.close()
            print(f"☠️ Node ATM{node_id} killed: port {ports[index]} closed")
            continue
        config = NodeConfig(node_id, ports[index], successor_port,
                            crashed=node_id in crashed, **settings).validate()
        nodes.append(Node(config, listener=listener))
        print(f"✅ Node {config.name} created: port {ports[index]} → {successor_port}")

    for node in nodes:
        node.start()

    deadline = None if runningTime is None else time.monotonic() + runningTime
    while any(node.is_alive() for node in nodes):
        if deadline is not None and time.monotonic() >= deadline:
            print(f"\n🛑 Scheduled stop after {runningTime} seconds")
            break
        for node in nodes:
            node.join(0.1)

    for node in nodes:
        node.stop()
    for node in nodes:
        node.waitStopped()

    reset_message_distributor()

    for node in nodes:
        status = node.get_status()
        print(f"📊 {node.config.name}: {status['state'].value}, last token={status['last_token']}")
    print("✅ All nodes are stopped")
    return nodes


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run a local ATM token ring")
    parser.add_argument("--nodes", type=int, default=4)
    parser.add_argument("--base-port", type=int, default=5000)
    parser.add_argument("--crash", type=int, action="append", default=[], metavar="ID")
    parser.add_argument("--kill", type=int, action="append", default=[], metavar="ID",
                        help="simulate a killed process: nobody listens on its port")
    parser.add_argument("--duration", type=float, default=None,
                        help="stop after this many seconds (required with --crash or --kill)")
    parser.add_argument("--settle", type=float, default=2.0)
    parser.add_argument("--timeout", type=float, default=8.0)
    parser.add_argument("--interval", type=float, default=1.0)
    parser.add_argument("--retry-delay", type=float, default=1.0)
    args = parser.parse_args(argv)

    if (args.crash or args.kill) and args.duration is None:
        parser.error("--duration is required when a node is crashed or killed")

    launch(args.nodes, runningTime=args.duration, crashed=args.crash, killed=args.kill,
           basePort=args.base_port,
           settle_delay=args.settle, token_timeout=args.timeout,
           monitor_interval=args.interval, accept_timeout=args.interval,
           retry_delay=args.retry_delay)


if __name__ == '__main__':
    # Configuration par défaut : 4 ATM, l'anneau s'arrête après un tour complet
    main()
