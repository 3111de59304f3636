from __future__ import annotations

import dataclasses
import json


def _name_or_none(name: str) -> str:
    return name if name else "(none)"


def _json_list(items: list[str]) -> str:
    return json.dumps(list(items), ensure_ascii=False)


@dataclasses.dataclass
class PackageRecord:
    name: str
    dependencies: list[str]
    features: dict[str, list[str]]

    @property
    def dependency_count(self) -> int:
        return len(self.dependencies)

    @property
    def feature_count(self) -> int:
        return len(self.features)


@dataclasses.dataclass
class MaxDependencyRecord:
    name: str = ""
    count: int = 0
    dependencies: list[str] = dataclasses.field(default_factory=list)

    def report_lines(self) -> list[str]:
        return [
            f"Package with the most dependencies: {_name_or_none(self.name)} ({self.count})",
            f"Dependencies: {_json_list(self.dependencies)}",
        ]


@dataclasses.dataclass
class DependentsRecord:
    name: str = ""
    count: int = 0
    dependents: list[str] = dataclasses.field(default_factory=list)  # sorted

    def report_lines(self) -> list[str]:
        return [
            f"Package with the most dependents: {_name_or_none(self.name)} ({self.count})",
            f"Dependents: {_json_list(self.dependents)}",
        ]


@dataclasses.dataclass
class MaxFeatureRecord:
    name: str = ""
    count: int = 0
    features: list[str] = dataclasses.field(default_factory=list)

    def report_lines(self) -> list[str]:
        return [
            f"Package with the most features: {_name_or_none(self.name)} ({self.count})",
            f"Features: {_json_list(self.features)}",
        ]


@dataclasses.dataclass
class MaxVersionRecord:
    name: str = ""
    count: int = 0

    def report_lines(self) -> list[str]:
        return [f"Package with the most versions: {_name_or_none(self.name)} ({self.count})"]


@dataclasses.dataclass
class RunResult:
    mode: str
    accumulators: dict  # metric name -> Accumulator, in registry order
    files_scanned: int = 0
    decode_errors: int = 0
    failures: list[str] = dataclasses.field(default_factory=list)

    def finalized(self) -> dict[str, object]:
        return {name: acc.finalize() for name, acc in self.accumulators.items()}
