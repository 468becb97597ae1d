"""Owner entities — candidates, read-back records and assignment attempts."""

from __future__ import annotations

from dataclasses import dataclass, field

from leadrelay.domain.value_objects.enums import AttemptState, OwnerEncoding, OwnerShape


@dataclass
class OwnerCandidate:
    """One agent from the pool, ranked by its position in the rotation."""

    identifier: str
    rank: int
    user_id: str | None = None
    email: str | None = None
    name: str | None = None

    @classmethod
    def from_identifier(cls, identifier: str, rank: int) -> OwnerCandidate:
        identifier = identifier.strip()
        if "@" in identifier:
            return cls(identifier=identifier, rank=rank, email=identifier.lower())
        return cls(identifier=identifier, rank=rank, user_id=identifier)

    def matches(self, record: OwnerRecord | None) -> bool:
        if record is None:
            return False
        if self.user_id and record.id and str(record.id) == str(self.user_id):
            return True
        if self.email and record.email and record.email.lower() == self.email.lower():
            return True
        return False


@dataclass
class OwnerRecord:
    """Owner as read back from a remote entity."""

    id: str | None = None
    email: str | None = None
    name: str | None = None
    shape: OwnerShape | None = None


@dataclass
class AssignmentAttempt:
    candidate: str
    field_key: str
    encoding: OwnerEncoding
    status: int | None = None
    detail: str | None = None
    state: AttemptState = AttemptState.PENDING

    def to_dict(self) -> dict:
        return {
            "candidate": self.candidate,
            "field": self.field_key,
            "encoding": self.encoding.value,
            "status": self.status,
            "detail": self.detail,
            "state": self.state.value,
        }


@dataclass
class AssignmentResult:
    success: bool = False
    winning_field: tuple[str, OwnerEncoding] | None = None
    attempts: list[AssignmentAttempt] = field(default_factory=list)
    intended: str | None = None
    candidate: OwnerCandidate | None = None
    owner: OwnerRecord | None = None
    state: AttemptState = AttemptState.PENDING
    skipped_reason: str | None = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "state": self.state.value,
            "winningField": (
                {"field": self.winning_field[0], "encoding": self.winning_field[1].value}
                if self.winning_field
                else None
            ),
            "intended": self.intended,
            "candidate": self.candidate.identifier if self.candidate else None,
            "skippedReason": self.skipped_reason,
            "attempts": [a.to_dict() for a in self.attempts],
        }
