"""Identifier resolution: map a raw scanned or typed string to a machine. Pure functions."""

import re
from typing import Iterable, Optional

from scan_engine.domain.exceptions import EmptyIdentifierError, MachineNotFoundError
from scan_engine.domain.models.machine import Machine

_SEPARATORS = re.compile(r"[\s-]")


def normalize_identifier(raw: Optional[str]) -> str:
    """Upper-case and trim. Raises EmptyIdentifierError when nothing is left."""
    term = (raw or "").strip().upper()
    if not term:
        raise EmptyIdentifierError("Identifier must not be empty")
    return term


def clean_identifier(value: Optional[str]) -> str:
    """Upper-cased value with whitespace and hyphens removed."""
    return _SEPARATORS.sub("", (value or "").upper())


def resolve(raw: str, registry: Iterable[Machine]) -> Machine:
    """
    Exact id match first, then the first machine whose cleaned id or cleaned name
    contains the cleaned input ("aurora 00" finds name "Aurora 001"; "aurora 1" does not,
    since "AURORA1" is not a substring of "AURORA001").
    Raises MachineNotFoundError when nothing matches.
    """
    term = normalize_identifier(raw)
    machines = list(registry)

    for machine in machines:
        if machine.id.upper() == term:
            return machine

    needle = clean_identifier(term)
    if needle:
        for machine in machines:
            if needle in clean_identifier(machine.id) or needle in clean_identifier(machine.name):
                return machine

    raise MachineNotFoundError(raw.strip())
