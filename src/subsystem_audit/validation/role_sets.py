"""Role-presence sets for one (subsystem, genome) pair."""

import threading
from dataclasses import dataclass
from typing import NamedTuple

from subsystem_audit.corpus import Subsystem
from subsystem_audit.output import ReportSink
from subsystem_audit.roles import RoleIdentity, roles_of_function


class ResolvedRole(NamedTuple):
    """A role occurrence in a genome that the role dictionary recognizes."""
    fid: str
    role_text: str
    role_id: str


@dataclass(frozen=True)
class RoleSets:
    """Lenient and strict role-id sets; strict is always a subset of lenient."""
    lenient: frozenset[str]
    strict: frozenset[str]


def resolve_function_map(
    roles: RoleIdentity,
    function_map: dict[str, str],
) -> list[ResolvedRole]:
    """Resolve every role of every feature, dropping roles not in the dictionary."""
    resolved: list[ResolvedRole] = []
    for fid, function in function_map.items():
        for role_text in roles_of_function(function):
            role_id = roles.resolve_lenient(role_text)
            if role_id is not None:
                resolved.append(ResolvedRole(fid, role_text, role_id))
    return resolved


class NamingMismatchLog:
    """Reports role-naming mismatches at most once per feature, process-wide.

    Many subsystem rows revisit the same feature; the insert-if-absent on the
    reported set is atomic so concurrent workers never double-report.
    """

    def __init__(self, sink: ReportSink | None = None):
        self._sink = sink
        self._reported: set[str] = set()
        self._lock = threading.Lock()

    def report(self, fid: str, observed: str, recorded: str | None) -> bool:
        """Record a mismatch; returns False if the feature was already reported."""
        with self._lock:
            if fid in self._reported:
                return False
            self._reported.add(fid)
        if self._sink is not None:
            self._sink.write_row(fid, observed, recorded or "")
        return True

    def __contains__(self, fid: str) -> bool:
        with self._lock:
            return fid in self._reported

    def __len__(self) -> int:
        with self._lock:
            return len(self._reported)


class RoleSetBuilder:
    """Builds lenient and strict role sets scoped to a subsystem's vocabulary."""

    def __init__(self, roles: RoleIdentity, mismatch_log: NamingMismatchLog):
        self.roles = roles
        self.mismatch_log = mismatch_log

    def build(self, subsystem: Subsystem, function_map: dict[str, str]) -> RoleSets:
        """Build role sets from a genome's raw functional assignments."""
        return self.build_resolved(subsystem, resolve_function_map(self.roles, function_map))

    def build_resolved(
        self,
        subsystem: Subsystem,
        resolved: list[ResolvedRole],
    ) -> RoleSets:
        """Build role sets from roles already resolved against the dictionary.

        A role whose text differs from the subsystem's recorded name counts
        only toward the lenient set and is sent to the mismatch log.
        """
        lenient: set[str] = set()
        strict: set[str] = set()
        for fid, role_text, role_id in resolved:
            if not subsystem.in_vocabulary(role_id):
                continue
            lenient.add(role_id)
            recorded = subsystem.recorded_name(role_id)
            if self.roles.resolve_strict(role_id, role_text, recorded):
                strict.add(role_id)
            else:
                self.mismatch_log.report(fid, role_text, recorded)
        return RoleSets(frozenset(lenient), frozenset(strict))
