import pytest

from galera_timeline.parsers.matchers import (
    EventBuilder,
    ExtractionContext,
    SequenceGenerator,
)
from galera_timeline.utils.markup import PlainMarkup

GROUP_UUID = "98ed75de-7c05-11e5-9743-de4abc22bd11"

# Canonical record for every known event kind, keyed by matcher description
SAMPLE_RECORDS = {
    "Node is changing state": [
        "2015-10-28 16:36:52 10144 [Note] WSREP: Shifting PRIMARY -> JOINER (TO: 31389)",
    ],
    "Quorum results": [
        "2015-10-28 14:28:50 553 [Note] WSREP: Quorum results:",
        "\tversion    = 3,",
        "\tcomponent  = PRIMARY,",
        "\tconf_id    = 4,",
        "\tmembers    = 3/3 (joined/total),",
        "\tact_id     = 11152,",
        "\tlast_appl. = -1,",
        "\tprotocols  = 0/7/3 (gcs/repl/appl),",
        f"\tgroup UUID = {GROUP_UUID}",
    ],
    "State transfer required": [
        "2015-10-28 16:36:51 10144 [Note] WSREP: State transfer required:",
        f"\tGroup state: {GROUP_UUID}:31382",
        f"\tLocal state: {GROUP_UUID}:11152",
    ],
    "WSREP recovered position": [
        "170614 14:02:28 mysqld_safe WSREP: Recovered position "
        "f3d1aa70-31a3-11e7-908c-f7a5ad9e63b1:40847697",
    ],
    "SST interrupted": [
        "WSREP_SST: [ERROR] SST disabled due to danger of data loss. "
        "Verify data and bootstrap the cluster (20170506 15:14:06.902)",
    ],
    "MySQL ended": [
        "170505 14:35:47 mysqld_safe mysqld from pid file /tmp/tmp-mysql.pid ended",
    ],
    "MySQL normal shutdown": [
        "2017-05-05 14:35:45 139716968405760 [Note] /usr/sbin/mysqld: Normal shutdown",
    ],
    "MySQL startup": [
        "2017-05-06 16:53:13 140445682804608 [Note] /usr/sbin/mysqld "
        "(mysqld 10.1.18-MariaDB) starting as process 24588 ...",
    ],
    "InnoDB shutdown": [
        "2017-05-06 16:53:08 140348661906176 [Note] InnoDB: Starting shutdown...",
    ],
    "MySQL shutdown complete": [
        "2017-05-05 14:35:47 139716968405760 [Note] /usr/sbin/mysqld: Shutdown complete",
    ],
    "Primary not possible": [
        "2017-05-05  6:50:37 140137601001344 [Warning] WSREP: no nodes coming "
        "from prim view, prim not possible",
    ],
    "Cluster view": [
        "2017-06-14 10:11:35 139887269365504 [Note] WSREP: "
        "view(view_id(NON_PRIM,55433460,408) memb {",
    ],
    "SST role": [
        "2017-06-14 19:10:58 140682204215040 [Note] WSREP: Running: "
        "'wsrep_sst_xtrabackup-v2 --role 'joiner' --address '10.19.148.90' "
        "--datadir '/var/lib/mysql/'   --parent '32691' --binlog 'mysql-bin' '",
    ],
    "Initial position": [
        "2017-06-14 19:10:51 140682204215040 [Note] WSREP: Setting initial "
        f"position to {GROUP_UUID}:31382",
    ],
    "Fatal error": [
        "2017-06-14 19:11:02 140682204215040 [ERROR] Fatal error: Can't open "
        "and lock privilege tables: Table 'mysql.user' doesn't exist",
    ],
    "Consistency compromised": [
        "2017-06-14 19:15:40 140682204215040 [ERROR] WSREP: Node consistency "
        "compromised, aborting...",
    ],
    "Replication SQL error": [
        "2017-06-14 19:15:40 140682204215040 [ERROR] Slave SQL: Could not execute "
        "Write_rows_v1 event on table test.t1; Duplicate entry '1' for key "
        "'PRIMARY', Error_code: 1062; handler error HA_ERR_FOUND_DUPP_KEY; the "
        "event's master log FIRST, end_log_pos 155, Internal MariaDB error code: 1062",
    ],
}


class TagMarkup(PlainMarkup):
    """Makes severity marks visible in plain strings."""

    def good(self, text):
        return f"<ok>{text}</ok>"

    def bad(self, text):
        return f"<bad>{text}</bad>"


@pytest.fixture
def plain():
    return PlainMarkup()


@pytest.fixture
def tags():
    return TagMarkup()


@pytest.fixture
def builder():
    return EventBuilder(SequenceGenerator())


@pytest.fixture
def context(builder, plain):
    return ExtractionContext(node=0, builder=builder, markup=plain)


@pytest.fixture
def write_log(tmp_path):
    """Write lines to a log file under tmp_path and return its path."""

    def write(name, lines):
        path = tmp_path / name
        path.write_text("".join(line + "\n" for line in lines))
        return str(path)

    return write


@pytest.fixture
def quorum_record():
    """Build a 9-line quorum results record."""

    def make(component="PRIMARY", members="3/3", when="2015-10-28 14:28:50"):
        return [
            f"{when} 553 [Note] WSREP: Quorum results:",
            "\tversion    = 3,",
            f"\tcomponent  = {component},",
            "\tconf_id    = 4,",
            f"\tmembers    = {members} (joined/total),",
            "\tact_id     = 11152,",
            "\tlast_appl. = -1,",
            "\tprotocols  = 0/7/3 (gcs/repl/appl),",
            f"\tgroup UUID = {GROUP_UUID}",
        ]

    return make


@pytest.fixture
def sample_records():
    return {kind: list(lines) for kind, lines in SAMPLE_RECORDS.items()}
