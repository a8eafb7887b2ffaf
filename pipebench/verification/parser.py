"""
pipebench -- Result Parser

Stateless extraction of typed fields from NuSMV's textual output. The
output format is not stable across configurations (the diameter, for
one, is not printed for disproved properties), so a missing field is
never an error: it yields the UNAVAILABLE sentinel.
"""

from __future__ import annotations

import re

from pipebench.verification.types import UNAVAILABLE, ResultRecord, Verdict

MEMORY_PATTERN = re.compile(r"Memory in use: (\d+)")
TOTAL_NODES_PATTERN = re.compile(r"Peak number of nodes: (\d+)")
LIVE_NODES_PATTERN = re.compile(r"Peak number of live nodes: (\d+)")
DIAMETER_PATTERN = re.compile(r"system diameter: (\d+)")
REACHABLE_STATES_PATTERN = re.compile(r"reachable states: .*?\^([\d\.]+)")
TOTAL_STATES_PATTERN = re.compile(r"out of .*?\^([\d\.]+)")
WITNESS_STATE_PATTERN = re.compile(r"State: (\d+)\.(\d+)")

FALSE_MARKER = "is false"
TRUE_MARKER = "is true"


class ResultParser:
    @staticmethod
    def extract_int(text: str, pattern: re.Pattern[str]) -> int:
        match = pattern.search(text)
        if match is None:
            return UNAVAILABLE
        try:
            return int(match.group(1))
        except ValueError:
            return UNAVAILABLE

    @staticmethod
    def extract_float(text: str, pattern: re.Pattern[str]) -> float:
        match = pattern.search(text)
        if match is None:
            return float(UNAVAILABLE)
        try:
            return float(match.group(1))
        except ValueError:
            return float(UNAVAILABLE)

    @staticmethod
    def verdict(text: str) -> Verdict:
        # A false result wins if both markers somehow appear
        if FALSE_MARKER in text:
            return Verdict.FALSE
        if TRUE_MARKER in text:
            return Verdict.TRUE
        return Verdict.UNKNOWN

    @staticmethod
    def witness_length(text: str) -> int:
        """Number of states in the counterexample trace; 0 when none is printed."""
        return len(WITNESS_STATE_PATTERN.findall(text))

    def parse_check(self, text: str, record: ResultRecord) -> None:
        record.verdict = self.verdict(text)
        record.witness_length = self.witness_length(text)

    def parse_stats(self, text: str, record: ResultRecord) -> None:
        record.memory = self.extract_int(text, MEMORY_PATTERN)
        record.total_nodes = self.extract_int(text, TOTAL_NODES_PATTERN)
        record.live_nodes = self.extract_int(text, LIVE_NODES_PATTERN)
        record.system_diameter = self.extract_int(text, DIAMETER_PATTERN)
        record.reachable_states = self.extract_float(text, REACHABLE_STATES_PATTERN)
        record.total_states = self.extract_float(text, TOTAL_STATES_PATTERN)
