from datetime import datetime

import pytest

from galera_timeline.core.models import UNKNOWN_TIME
from galera_timeline.parsers.catalog import EVENT_MATCHERS, default_registry
from galera_timeline.parsers.matchers import EventMatcher, ExtractionContext
from galera_timeline.parsers.reader import RecordReader

KINDS = [matcher.description for matcher in EVENT_MATCHERS]


def extract_one(lines, context):
    reader = RecordReader(lines)
    matcher = default_registry().find(reader.current)
    assert matcher is not None
    return matcher, matcher.extract(reader, context), reader


def test_every_kind_has_a_sample(sample_records):
    assert set(sample_records) == set(KINDS)


@pytest.mark.parametrize("kind", KINDS)
def test_sample_record_yields_one_verbatim_event(kind, sample_records, context):
    lines = sample_records[kind]
    matcher, event, reader = extract_one(lines + ["trailing line"], context)

    assert matcher.description == kind
    assert event.kind == kind
    assert event.raw.split("\n") == lines
    assert event.has_timestamp
    assert reader.current == "trailing line"


def test_registry_order_is_fixed():
    """Test the priority order of the built-in event kinds."""
    assert KINDS[:3] == [
        "Node is changing state",
        "Quorum results",
        "State transfer required",
    ]
    assert KINDS.index("MySQL normal shutdown") < KINDS.index("MySQL shutdown complete")


def test_first_matching_signature_wins(context):
    """Test that the earliest registered matcher claims a line."""
    # both the state shift and the quorum signatures occur in this line
    line = "2017-05-06 16:53:13 1 [Note] WSREP: Shifting OPEN -> PRIMARY WSREP: Quorum results:"
    matcher, event, _ = extract_one([line], context)
    assert matcher.description == "Node is changing state", (
        "The state shift matcher is registered first and should win."
    )
    assert event.raw == line


def test_unmatched_line():
    assert default_registry().find("2017-05-06 16:53:13 1 [Note] InnoDB: 128 rollback segments") is None


def test_registry_add_appends_lowest_priority():
    registry = default_registry()
    custom = EventMatcher(
        description="Custom",
        signature="WSREP: Shifting",
        render=lambda payload, markup: "custom",
    )
    registry.add(custom)
    assert registry.find("WSREP: Shifting OPEN -> PRIMARY").description != "Custom"
    assert registry.get("Custom") is custom
    assert len(default_registry()) == len(EVENT_MATCHERS)


@pytest.mark.parametrize(
    "kind, expected",
    [
        ("Node is changing state", "PRIMARY => <ok>JOINER</ok>"),
        ("Quorum results", "Component: <ok>PRIMARY</ok>, Members: <ok>3/3</ok>"),
        (
            "State transfer required",
            "Group: 98ed75de-7c05-11e5-9743-de4abc22bd11:31382, "
            "Local: <ok>98ed75de-7c05-11e5-9743-de4abc22bd11:11152</ok>",
        ),
        (
            "WSREP recovered position",
            "Recovered position: <ok>f3d1aa70-31a3-11e7-908c-f7a5ad9e63b1:40847697</ok>",
        ),
        ("SST interrupted", "<bad>SST disabled: danger of data loss</bad>"),
        ("MySQL ended", "mysqld ended"),
        ("MySQL normal shutdown", "Normal shutdown"),
        ("MySQL startup", "MySQL startup"),
        ("InnoDB shutdown", "InnoDB shutdown"),
        ("MySQL shutdown complete", "MySQL shutdown complete"),
        ("Primary not possible", "<bad>Primary not possible</bad>"),
        ("Cluster view", "WSREP view => <bad>NON_PRIM</bad>"),
        ("SST role", "Joining from 10.19.148.90"),
        (
            "Initial position",
            "Initial position: 98ed75de-7c05-11e5-9743-de4abc22bd11:31382",
        ),
        (
            "Fatal error",
            "<bad>Fatal error: Can't open and lock privilege tables: "
            "Table 'mysql.user' doesn't exist</bad>",
        ),
        ("Consistency compromised", "<bad>Node consistency compromised</bad>"),
        ("Replication SQL error", "<bad>Replication SQL error (code 1062)</bad>"),
    ],
)
def test_messages(kind, expected, sample_records, builder, tags):
    context = ExtractionContext(node=0, builder=builder, markup=tags)
    _, event, _ = extract_one(sample_records[kind], context)
    assert event.message == expected


def test_regressive_shift_is_marked_bad(builder, tags):
    context = ExtractionContext(node=0, builder=builder, markup=tags)
    line = "2017-05-05 14:35:45 1 [Note] WSREP: Shifting SYNCED -> OPEN (TO: 10)"
    _, event, _ = extract_one([line], context)
    assert event.message == "SYNCED => <bad>OPEN</bad>"


def test_incomplete_quorum_is_marked_bad(builder, tags, quorum_record):
    context = ExtractionContext(node=0, builder=builder, markup=tags)
    _, event, _ = extract_one(quorum_record("NON_PRIMARY", "2/3"), context)
    assert event.message == "Component: <bad>NON_PRIMARY</bad>, Members: <bad>2/3</bad>"


def test_donor_and_unknown_sst_roles(context):
    donor = (
        "2017-06-14 19:10:58 1 [Note] WSREP: Running: 'wsrep_sst_xtrabackup-v2 "
        "--role 'donor' --address '10.0.0.12:4444/xtrabackup_sst//1' --socket '/s' '"
    )
    other = donor.replace("'donor'", "'observer'")
    assert extract_one([donor], context)[1].message == (
        "Donating to 10.0.0.12:4444/xtrabackup_sst//1"
    )
    assert extract_one([other], context)[1].message.startswith("Unknown SST role")


def test_empty_cluster_view(context):
    line = "2017-06-14 10:11:35 1 [Note] WSREP: view((empty))"
    assert extract_one([line], context)[1].message == "WSREP view => empty"


def test_historic_compromized_spelling(context):
    line = "2017-06-14 19:15:40 1 [ERROR] WSREP: Node consistency compromized, aborting..."
    matcher, _, _ = extract_one([line], context)
    assert matcher.description == "Consistency compromised"


def test_malformed_timestamp_still_yields_event(context, caplog):
    """Test that an unreadable timestamp keeps the event at unknown time."""
    line = "2017-05-0x 16:53:13 1 [Note] /usr/sbin/mysqld (mysqld 10.1) starting as process 9 ..."
    _, event, _ = extract_one([line], context)
    assert event.timestamp == UNKNOWN_TIME
    assert not event.has_timestamp
    assert event.message == "MySQL startup"
    assert "using unknown time" in caplog.text


def test_timestamp_resolution(sample_records, context):
    _, event, _ = extract_one(sample_records["SST interrupted"], context)
    assert event.timestamp == datetime(2017, 5, 6, 15, 14, 6)
