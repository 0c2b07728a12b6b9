import argparse
import random
import uuid
from datetime import datetime, timedelta
from pathlib import Path
from typing import List


class ClusterLogGenerator:
    """Generates error logs of a three node Galera cluster going through a restart."""

    def __init__(self, seed: int = None, start: datetime = None):
        self.random = random.Random(seed)
        self.start = start or datetime(2017, 5, 6, 16, 50, 0)
        self.group_uuid = str(uuid.UUID(int=self.random.getrandbits(128)))
        self.addresses = ["10.0.0.10", "10.0.0.11", "10.0.0.12"]
        self.seqno = self.random.randint(1000, 50000)

        self.noise_messages = [
            "[Note] InnoDB: Buffer pool(s) load completed",
            "[Note] WSREP: gcomm: connecting to group 'cluster', peer '{peers}'",
            "[Note] WSREP: (a1b2c3d4, 'tcp://0.0.0.0:4567') turning message relay requesting off",
            "[Note] WSREP: Member 1.0 (node{node}) synced with group.",
            "[Note] WSREP: Synchronized with group, ready for connections",
            "[Warning] Aborted connection 42 to db: 'unconnected' user: 'monitor' host: 'localhost'",
        ]

    def server_line(self, when: datetime, text: str) -> str:
        thread = self.random.randint(139000000000000, 140999999999999)
        return f"{when:%Y-%m-%d %H:%M:%S} {thread} {text}"

    def safe_line(self, when: datetime, text: str) -> str:
        return f"{when:%y%m%d %H:%M:%S} mysqld_safe {text}"

    def noise(self, when: datetime, node: int, count: int) -> List[str]:
        peers = ",".join(self.addresses)
        lines = []
        for _ in range(count):
            message = self.random.choice(self.noise_messages)
            lines.append(self.server_line(when, message.format(peers=peers, node=node)))
        return lines

    def quorum(self, when: datetime, component: str, joined: int, total: int) -> List[str]:
        return [
            self.server_line(when, "[Note] WSREP: Quorum results:"),
            "\tversion    = 4,",
            f"\tcomponent  = {component},",
            "\tconf_id    = 2,",
            f"\tmembers    = {joined}/{total} (joined/total),",
            f"\tact_id     = {self.seqno},",
            "\tlast_appl. = -1,",
            "\tprotocols  = 0/7/3 (gcs/repl/appl),",
            f"\tgroup UUID = {self.group_uuid}",
        ]

    def shutdown(self, when: datetime) -> List[str]:
        return [
            self.server_line(when, "[Note] /usr/sbin/mysqld: Normal shutdown"),
            self.server_line(
                when, f"[Note] WSREP: Shifting SYNCED -> OPEN (TO: {self.seqno})"
            ),
            self.server_line(
                when + timedelta(seconds=1), "[Note] InnoDB: Starting shutdown..."
            ),
            self.server_line(
                when + timedelta(seconds=2), "[Note] /usr/sbin/mysqld: Shutdown complete"
            ),
            self.safe_line(
                when + timedelta(seconds=2),
                "mysqld from pid file /var/run/mysqld/mysqld.pid ended",
            ),
        ]

    def startup(self, when: datetime, local_seqno: int) -> List[str]:
        position = f"{self.group_uuid}:{local_seqno}"
        return [
            self.safe_line(when, f"WSREP: Recovered position {position}"),
            self.server_line(
                when,
                "[Note] /usr/sbin/mysqld (mysqld 10.1.18-MariaDB) starting as process "
                f"{self.random.randint(1000, 30000)} ...",
            ),
            self.server_line(
                when, f"[Note] WSREP: Setting initial position to {position}"
            ),
        ]

    def rejoin(self, when: datetime, node: int, local_seqno: int) -> List[str]:
        lines = [
            self.server_line(
                when,
                "[Note] WSREP: view(view_id(PRIM,a1b2c3d4,3) memb {",
            )
        ]
        lines.extend(self.quorum(when, "PRIMARY", 2, 3))
        lines.append(self.server_line(when, "[Note] WSREP: State transfer required:"))
        lines.append(f"\tGroup state: {self.group_uuid}:{self.seqno}")
        lines.append(f"\tLocal state: {self.group_uuid}:{local_seqno}")
        lines.append(
            self.server_line(
                when, f"[Note] WSREP: Shifting PRIMARY -> JOINER (TO: {self.seqno})"
            )
        )
        lines.append(
            self.server_line(
                when + timedelta(seconds=1),
                "[Note] WSREP: Running: 'wsrep_sst_xtrabackup-v2 --role 'joiner' "
                f"--address '{self.addresses[node]}' --datadir '/var/lib/mysql/'   "
                "--parent '32691' --binlog 'mysql-bin' '",
            )
        )
        lines.append(
            self.server_line(
                when + timedelta(seconds=20),
                f"[Note] WSREP: Shifting JOINER -> JOINED (TO: {self.seqno})",
            )
        )
        lines.append(
            self.server_line(
                when + timedelta(seconds=21),
                f"[Note] WSREP: Shifting JOINED -> SYNCED (TO: {self.seqno})",
            )
        )
        return lines

    def donate(self, when: datetime, joiner: int) -> List[str]:
        return [
            self.server_line(
                when + timedelta(seconds=1),
                f"[Note] WSREP: Shifting SYNCED -> DONOR/DESYNCED (TO: {self.seqno})",
            ),
            self.server_line(
                when + timedelta(seconds=1),
                "[Note] WSREP: Running: 'wsrep_sst_xtrabackup-v2 --role 'donor' "
                f"--address '{self.addresses[joiner]}:4444/xtrabackup_sst//1' "
                "--socket '/var/run/mysqld/mysqld.sock' --datadir '/var/lib/mysql/' '",
            ),
            self.server_line(
                when + timedelta(seconds=19),
                f"[Note] WSREP: Shifting DONOR/DESYNCED -> JOINED (TO: {self.seqno})",
            ),
            self.server_line(
                when + timedelta(seconds=20),
                f"[Note] WSREP: Shifting JOINED -> SYNCED (TO: {self.seqno})",
            ),
        ]

    def generate_cluster_logs(self, output_dir: str) -> List[Path]:
        """
        Write one log per node: node2 restarts and rejoins through a state
        transfer donated by node0, while node1 keeps running.
        Returns:
            Paths of the node logs, in node order
        """
        output = Path(output_dir)
        output.mkdir(parents=True, exist_ok=True)

        restart_at = self.start + timedelta(minutes=3, seconds=8)
        back_at = restart_at + timedelta(seconds=5)
        stale_seqno = self.seqno - self.random.randint(10, 500)

        node_lines = [[], [], []]
        for node in range(3):
            node_lines[node].extend(self.noise(self.start, node, 3))

        # node2 goes down and comes back while node0 donates
        node_lines[2].extend(self.shutdown(restart_at))
        node_lines[2].extend(self.noise(restart_at + timedelta(seconds=3), 2, 2))
        node_lines[2].extend(self.startup(back_at, stale_seqno))
        node_lines[2].extend(self.rejoin(back_at, 2, stale_seqno))

        node_lines[0].append(
            self.server_line(
                restart_at, "[Note] WSREP: view(view_id(PRIM,a1b2c3d4,2) memb {"
            )
        )
        node_lines[0].extend(self.quorum(restart_at, "PRIMARY", 2, 2))
        node_lines[0].extend(self.donate(back_at, 2))

        node_lines[1].extend(self.quorum(restart_at, "PRIMARY", 2, 2))
        node_lines[1].extend(self.noise(back_at + timedelta(seconds=30), 1, 4))

        paths = []
        for node, lines in enumerate(node_lines):
            path = output / f"node{node}.err"
            with open(path, "w") as f:
                for line in lines:
                    f.write(line + "\n")
            print(f"Generated node{node} log: {path}")
            paths.append(path)

        return paths


def main():
    """CLI interface for the cluster log generator."""
    parser = argparse.ArgumentParser(description="Generate sample Galera node logs")
    parser.add_argument(
        "-o",
        "--output-dir",
        default="sample_logs",
        help="Output directory for log files",
    )
    parser.add_argument("--seed", type=int, help="Random seed for reproducible logs")

    args = parser.parse_args()

    generator = ClusterLogGenerator(seed=args.seed)
    paths = generator.generate_cluster_logs(args.output_dir)

    print(f"\nSample logs generated successfully in {args.output_dir}/")
    print("You can now build a timeline from these files:")
    print(f"  galera-timeline {' '.join(str(p) for p in paths)}")


if __name__ == "__main__":
    main()
