"""
Known Galera / MariaDB event kinds, in matching priority order.

Samples of the lines each kind recognizes are kept next to its entry. The
order of ``EVENT_MATCHERS`` is significant: when several signatures occur in
one line only the first listed fires.
"""

from galera_timeline.parsers.matchers import EventMatcher, MatcherRegistry
from galera_timeline.parsers.payloads import (
    ClusterView,
    FatalError,
    Position,
    QuorumResult,
    ReplicationError,
    SstRole,
    StateShift,
    StateTransferRequest,
)
from galera_timeline.parsers.timestamps import TimestampLayout


def fixed(message: str, alarming: bool = False):
    """Render a constant message, optionally marked as bad."""

    def render(payload, markup):
        return markup.bad(message) if alarming else message

    return render


def render_state_shift(shift: StateShift, markup) -> str:
    mark = markup.bad if shift.regressive else markup.good
    to_state = mark(shift.to_state)
    return f"{shift.from_state} => {to_state}"


def render_quorum(quorum: QuorumResult, markup) -> str:
    mark = markup.good if quorum.primary else markup.bad
    component = mark(quorum.component)
    ratio = f"{quorum.joined}/{quorum.total}"
    members = markup.good(ratio) if quorum.complete else markup.bad(ratio)
    return f"Component: {component}, Members: {members}"


def render_state_transfer(request: StateTransferRequest, markup) -> str:
    local = request.local_position
    local = markup.bad(local) if request.local_unknown else markup.good(local)
    return f"Group: {request.group_position}, Local: {local}"


def render_recovered(position: Position, markup) -> str:
    mark = markup.bad if position.unknown else markup.good
    text = mark(str(position))
    return f"Recovered position: {text}"


def render_initial(position: Position, markup) -> str:
    return f"Initial position: {position}"


def render_view(view: ClusterView, markup) -> str:
    view_type = view.view_type
    if view_type == "NON_PRIM":
        view_type = markup.bad(view_type)
    return f"WSREP view => {view_type}"


def render_sst_role(sst: SstRole, markup) -> str:
    if sst.role == "joiner":
        return f"Joining from {sst.address}"
    if sst.role == "donor":
        return f"Donating to {sst.address}"
    return markup.bad(f"Unknown SST role '{sst.role}' ({sst.address})")


def render_fatal(error: FatalError, markup) -> str:
    return markup.bad(f"Fatal error: {error.text}")


def render_replication_error(error: ReplicationError, markup) -> str:
    if error.code is None:
        return markup.bad("Replication SQL error")
    return markup.bad(f"Replication SQL error (code {error.code})")


EVENT_MATCHERS = [
    # 2015-10-28 16:36:52 10144 [Note] WSREP: Shifting PRIMARY -> JOINER (TO: 31389)
    EventMatcher(
        description="Node is changing state",
        signature="WSREP: Shifting",
        parse=StateShift.from_lines,
        render=render_state_shift,
    ),
    # 2015-10-28 14:28:50 553 [Note] WSREP: Quorum results:
    #     version    = 3,
    #     component  = PRIMARY,
    #     conf_id    = 4,
    #     members    = 3/3 (joined/total),
    #     act_id     = 11152,
    #     last_appl. = -1,
    #     protocols  = 0/7/3 (gcs/repl/appl),
    #     group UUID = 98ed75de-7c05-11e5-9743-de4abc22bd11
    EventMatcher(
        description="Quorum results",
        signature="WSREP: Quorum results:",
        parse=QuorumResult.from_lines,
        render=render_quorum,
        lines=9,
    ),
    # 2015-10-28 16:36:51 10144 [Note] WSREP: State transfer required:
    #     Group state: 98ed75de-7c05-11e5-9743-de4abc22bd11:31382
    #     Local state: 98ed75de-7c05-11e5-9743-de4abc22bd11:11152
    EventMatcher(
        description="State transfer required",
        signature="WSREP: State transfer required:",
        parse=StateTransferRequest.from_lines,
        render=render_state_transfer,
        lines=3,
    ),
    # 170614 14:02:28 mysqld_safe WSREP: Recovered position f3d1aa70-31a3-11e7-908c-f7a5ad9e63b1:40847697
    EventMatcher(
        description="WSREP recovered position",
        signature="WSREP: Recovered position ",
        parse=Position.recovered,
        render=render_recovered,
        layout=TimestampLayout.MYSQLD,
    ),
    # WSREP_SST: [ERROR] SST disabled due to danger of data loss. Verify data and bootstrap the cluster (20170506 15:14:06.902)
    EventMatcher(
        description="SST interrupted",
        signature="SST disabled due to danger of data loss",
        render=fixed("SST disabled: danger of data loss", alarming=True),
        layout=TimestampLayout.WSREP_SST,
    ),
    # 170505 14:35:47 mysqld_safe mysqld from pid file /tmp/tmp-mysql.pid ended
    EventMatcher(
        description="MySQL ended",
        signature=" from pid file ",
        render=fixed("mysqld ended"),
        layout=TimestampLayout.MYSQLD,
    ),
    # 2017-05-05 14:35:45 139716968405760 [Note] /usr/sbin/mysqld: Normal shutdown
    EventMatcher(
        description="MySQL normal shutdown",
        signature="mysqld: Normal shutdown",
        render=fixed("Normal shutdown"),
    ),
    # 2017-05-06 16:53:13 140445682804608 [Note] /usr/sbin/mysqld (mysqld 10.1.18-MariaDB) starting as process 24588 ...
    EventMatcher(
        description="MySQL startup",
        signature="starting as process",
        render=fixed("MySQL startup"),
    ),
    # 2017-05-06 16:53:08 140348661906176 [Note] InnoDB: Starting shutdown...
    EventMatcher(
        description="InnoDB shutdown",
        signature="InnoDB: Starting shutdown...",
        render=fixed("InnoDB shutdown"),
    ),
    # 2017-05-05 14:35:47 139716968405760 [Note] /usr/sbin/mysqld: Shutdown complete
    EventMatcher(
        description="MySQL shutdown complete",
        signature="mysqld: Shutdown complete",
        render=fixed("MySQL shutdown complete"),
    ),
    # 2017-05-05  6:50:37 140137601001344 [Warning] WSREP: no nodes coming from prim view, prim not possible
    EventMatcher(
        description="Primary not possible",
        signature="WSREP: no nodes coming from prim view",
        render=fixed("Primary not possible", alarming=True),
    ),
    # 2017-06-14 10:11:35 139887269365504 [Note] WSREP: view(view_id(NON_PRIM,55433460,408) memb {
    EventMatcher(
        description="Cluster view",
        signature="WSREP: view(",
        parse=ClusterView.from_lines,
        render=render_view,
    ),
    # 2017-06-14 19:10:58 140682204215040 [Note] WSREP: Running: 'wsrep_sst_xtrabackup-v2 --role 'joiner' --address '10.19.148.90' --datadir '/var/lib/mysql/'   --parent '32691' --binlog 'mysql-bin' '
    EventMatcher(
        description="SST role",
        signature="WSREP: Running: ",
        parse=SstRole.from_lines,
        render=render_sst_role,
    ),
    # 2017-06-14 19:10:51 140682204215040 [Note] WSREP: Setting initial position to 98ed75de-7c05-11e5-9743-de4abc22bd11:31382
    EventMatcher(
        description="Initial position",
        signature="WSREP: Setting initial position to ",
        parse=Position.initial,
        render=render_initial,
    ),
    # 2017-06-14 19:11:02 140682204215040 [ERROR] Fatal error: Can't open and lock privilege tables: Table 'mysql.user' doesn't exist
    EventMatcher(
        description="Fatal error",
        signature="[ERROR] Fatal error: ",
        parse=FatalError.from_lines,
        render=render_fatal,
    ),
    # 2017-06-14 19:15:40 140682204215040 [ERROR] WSREP: Node consistency compromised, aborting...
    EventMatcher(
        description="Consistency compromised",
        signature="WSREP: Node consistency compromi",
        render=fixed("Node consistency compromised", alarming=True),
    ),
    # 2017-06-14 19:15:40 140682204215040 [ERROR] Slave SQL: Could not execute Write_rows_v1 event on table test.t1; Duplicate entry '1' for key 'PRIMARY', Error_code: 1062; handler error HA_ERR_FOUND_DUPP_KEY; the event's master log FIRST, end_log_pos 155, Internal MariaDB error code: 1062
    EventMatcher(
        description="Replication SQL error",
        signature="Slave SQL: ",
        parse=ReplicationError.from_lines,
        render=render_replication_error,
    ),
]


def default_registry() -> MatcherRegistry:
    """A fresh registry holding every known event kind."""
    return MatcherRegistry(EVENT_MATCHERS)
