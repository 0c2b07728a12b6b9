"""
Structured payloads captured from recognized records.

Each model owns the named-group pattern(s) used to pull its fields out of the
record lines. Recognition happens earlier, by plain substring match; these
parse steps only run once a record is known to belong to their event kind.
"""

import re
from typing import ClassVar, List, Optional

from pydantic import BaseModel, ConfigDict

from galera_timeline.core.exceptions import MalformedRecord

# Numeric rank of each node state so shifts to a lower state can be flagged
STATE_RANKS = {
    "ERROR": 10,
    "DESTROYED": 20,
    "CLOSED": 30,
    "OPEN": 40,
    "PRIMARY": 50,
    "JOINER": 60,
    "DONOR/DESYNCED": 70,
    "DONOR": 75,
    "JOINED": 80,
    "SYNCED": 90,
}

UUID = r"[0-9A-Fa-f-]+"
SEQNO = r"-?\d+"


def state_rank(state: str) -> int:
    """Rank of a node state; unknown states rank below everything."""
    return STATE_RANKS.get(state.strip().upper(), 0)


def _search(pattern: re.Pattern, lines: List[str], kind: str) -> re.Match:
    for line in lines:
        match = pattern.search(line)
        if match:
            return match
    raise MalformedRecord(kind, lines[0] if lines else "")


class Payload(BaseModel):
    model_config = ConfigDict(frozen=True)


class StateShift(Payload):
    """WSREP: Shifting PRIMARY -> JOINER (TO: 31389)"""

    from_state: str
    to_state: str
    seqno: Optional[int] = None

    pattern: ClassVar[re.Pattern] = re.compile(
        r"Shifting (?P<from_state>\S+) -> (?P<to_state>\S+)"
        r"(?: \(TO: (?P<seqno>" + SEQNO + r")\))?"
    )

    @property
    def regressive(self) -> bool:
        return state_rank(self.to_state) < state_rank(self.from_state)

    @classmethod
    def from_lines(cls, lines: List[str]) -> "StateShift":
        match = _search(cls.pattern, lines[:1], cls.__name__)
        return cls(**match.groupdict())


class QuorumResult(Payload):
    """Component label and joined/total member ratio of a quorum record."""

    component: str
    joined: int
    total: int

    component_pattern: ClassVar[re.Pattern] = re.compile(
        r"component\s*=\s*(?P<component>[A-Za-z_-]+)"
    )
    members_pattern: ClassVar[re.Pattern] = re.compile(
        r"members\s*=\s*(?P<joined>\d+)/(?P<total>\d+)"
    )

    @property
    def primary(self) -> bool:
        return self.component == "PRIMARY"

    @property
    def complete(self) -> bool:
        return self.joined == self.total

    @classmethod
    def from_lines(cls, lines: List[str]) -> "QuorumResult":
        component = _search(cls.component_pattern, lines[1:], cls.__name__)
        members = _search(cls.members_pattern, lines[1:], cls.__name__)
        return cls(
            component=component.group("component"),
            joined=members.group("joined"),
            total=members.group("total"),
        )


class StateTransferRequest(Payload):
    """Group and local positions announced when a state transfer is needed."""

    group_uuid: str
    group_seqno: int
    local_uuid: str
    local_seqno: int

    group_pattern: ClassVar[re.Pattern] = re.compile(
        r"Group state:\s*(?P<uuid>" + UUID + r"):(?P<seqno>" + SEQNO + r")"
    )
    local_pattern: ClassVar[re.Pattern] = re.compile(
        r"Local state:\s*(?P<uuid>" + UUID + r"):(?P<seqno>" + SEQNO + r")"
    )

    @property
    def group_position(self) -> str:
        return f"{self.group_uuid}:{self.group_seqno}"

    @property
    def local_position(self) -> str:
        return f"{self.local_uuid}:{self.local_seqno}"

    @property
    def local_unknown(self) -> bool:
        return self.local_seqno == -1

    @classmethod
    def from_lines(cls, lines: List[str]) -> "StateTransferRequest":
        group = _search(cls.group_pattern, lines[1:], cls.__name__)
        local = _search(cls.local_pattern, lines[1:], cls.__name__)
        return cls(
            group_uuid=group.group("uuid"),
            group_seqno=group.group("seqno"),
            local_uuid=local.group("uuid"),
            local_seqno=local.group("seqno"),
        )


class Position(Payload):
    """A cluster position (group UUID and sequence number)."""

    uuid: str
    seqno: int

    recovered_pattern: ClassVar[re.Pattern] = re.compile(
        r"Recovered position:?\s+(?P<uuid>" + UUID + r"):(?P<seqno>" + SEQNO + r")"
    )
    initial_pattern: ClassVar[re.Pattern] = re.compile(
        r"Setting initial position to (?P<uuid>" + UUID + r"):(?P<seqno>" + SEQNO + r")"
    )

    @property
    def unknown(self) -> bool:
        return self.seqno == -1

    def __str__(self) -> str:
        return f"{self.uuid}:{self.seqno}"

    @classmethod
    def recovered(cls, lines: List[str]) -> "Position":
        match = _search(cls.recovered_pattern, lines[:1], "RecoveredPosition")
        return cls(**match.groupdict())

    @classmethod
    def initial(cls, lines: List[str]) -> "Position":
        match = _search(cls.initial_pattern, lines[:1], "InitialPosition")
        return cls(**match.groupdict())


class ClusterView(Payload):
    """View type of a cluster view announcement (PRIM, NON_PRIM or empty)."""

    view_type: str

    pattern: ClassVar[re.Pattern] = re.compile(r"view\(view_id\((?P<view_type>[A-Z_]*),")

    @property
    def primary(self) -> bool:
        return self.view_type == "PRIM"

    @classmethod
    def from_lines(cls, lines: List[str]) -> "ClusterView":
        if "empty" in lines[0]:
            return cls(view_type="empty")
        match = _search(cls.pattern, lines[:1], cls.__name__)
        return cls(**match.groupdict())


class SstRole(Payload):
    """Role and peer address of a state snapshot transfer script run."""

    role: str
    address: str

    pattern: ClassVar[re.Pattern] = re.compile(
        r"--role '(?P<role>[^']*)' --address '(?P<address>[^']*)'"
    )

    @classmethod
    def from_lines(cls, lines: List[str]) -> "SstRole":
        match = _search(cls.pattern, lines[:1], cls.__name__)
        return cls(**match.groupdict())


class FatalError(Payload):
    text: str

    pattern: ClassVar[re.Pattern] = re.compile(r"\[ERROR\] Fatal error: (?P<text>.*\S)")

    @classmethod
    def from_lines(cls, lines: List[str]) -> "FatalError":
        match = _search(cls.pattern, lines[:1], cls.__name__)
        return cls(**match.groupdict())


class ReplicationError(Payload):
    """Error reported by the replication SQL thread."""

    text: str
    code: Optional[int] = None

    pattern: ClassVar[re.Pattern] = re.compile(r"Slave SQL: (?P<text>.*\S)")
    code_pattern: ClassVar[re.Pattern] = re.compile(
        r"(?:Error_code|Internal MariaDB error code):\s*(?P<code>\d+)"
    )

    @classmethod
    def from_lines(cls, lines: List[str]) -> "ReplicationError":
        match = _search(cls.pattern, lines[:1], cls.__name__)
        code = cls.code_pattern.search(lines[0])
        return cls(
            text=match.group("text"),
            code=code.group("code") if code else None,
        )
