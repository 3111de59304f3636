from __future__ import annotations

from collections import defaultdict

from .models import DependentsRecord, MaxDependencyRecord, MaxFeatureRecord, MaxVersionRecord, PackageRecord


class Accumulator:
    """
    Running aggregate for one metric.

    `observe` is applied once per decoded record. `merge` folds in a partial
    accumulator whose observations all came after this one's, so that
    observe(A..B) and observe(A) + merge(observe(B)) finalize identically.
    """

    name = ""

    def observe(self, record: PackageRecord) -> None:
        raise NotImplementedError

    def merge(self, other: Accumulator) -> None:
        raise NotImplementedError

    def finalize(self) -> object:
        raise NotImplementedError


class MaxDependencies(Accumulator):
    name = "max_dependencies"

    def __init__(self) -> None:
        self.best = MaxDependencyRecord()

    def observe(self, record: PackageRecord) -> None:
        if record.dependency_count > self.best.count:
            self.best = MaxDependencyRecord(name=record.name, count=record.dependency_count, dependencies=list(record.dependencies))

    def merge(self, other: Accumulator) -> None:
        assert isinstance(other, MaxDependencies)
        if other.best.count > self.best.count:
            self.best = other.best

    def finalize(self) -> MaxDependencyRecord:
        return MaxDependencyRecord(name=self.best.name, count=self.best.count, dependencies=list(self.best.dependencies))


class DependentsIndex(Accumulator):
    name = "max_dependents"

    def __init__(self) -> None:
        self.dependents: dict[str, set[str]] = defaultdict(set)

    def observe(self, record: PackageRecord) -> None:
        for dep in record.dependencies:
            self.dependents[dep].add(record.name)

    def merge(self, other: Accumulator) -> None:
        assert isinstance(other, DependentsIndex)
        for dep, names in other.dependents.items():
            self.dependents[dep].update(names)

    def finalize(self) -> DependentsRecord:
        if not self.dependents:
            return DependentsRecord()
        # Largest set wins; equal sizes go to the smallest dependency name.
        dep, names = min(self.dependents.items(), key=lambda kv: (-len(kv[1]), kv[0]))
        return DependentsRecord(name=dep, count=len(names), dependents=sorted(names))


class MaxFeatures(Accumulator):
    name = "max_features"

    def __init__(self) -> None:
        self.best = MaxFeatureRecord()

    def observe(self, record: PackageRecord) -> None:
        if record.feature_count > self.best.count:
            self.best = MaxFeatureRecord(name=record.name, count=record.feature_count, features=list(record.features.keys()))

    def merge(self, other: Accumulator) -> None:
        assert isinstance(other, MaxFeatures)
        if other.best.count > self.best.count:
            self.best = other.best

    def finalize(self) -> MaxFeatureRecord:
        return MaxFeatureRecord(name=self.best.name, count=self.best.count, features=list(self.best.features))


class MaxVersions(Accumulator):
    name = "max_versions"

    def __init__(self) -> None:
        self.versions: dict[str, int] = defaultdict(int)
        # name -> sequence number of its latest observation
        self.last_seen: dict[str, int] = {}
        self.seen = 0
        self.best = MaxVersionRecord()

    def observe(self, record: PackageRecord) -> None:
        self.seen += 1
        self.versions[record.name] += 1
        self.last_seen[record.name] = self.seen
        count = self.versions[record.name]
        if count > self.best.count:
            self.best = MaxVersionRecord(name=record.name, count=count)

    def merge(self, other: Accumulator) -> None:
        assert isinstance(other, MaxVersions)
        for name, count in other.versions.items():
            self.versions[name] += count
            self.last_seen[name] = self.seen + other.last_seen[name]
        self.seen += other.seen
        # The first name to reach the top count is the one whose final
        # observation came earliest. Names untouched by `other` kept their
        # keys, so only the old leader and `other`'s names can win.
        candidates = set(other.versions)
        if self.best.name:
            candidates.add(self.best.name)
        if not candidates:
            return
        name = min(candidates, key=lambda n: (-self.versions[n], self.last_seen[n]))
        self.best = MaxVersionRecord(name=name, count=self.versions[name])

    def finalize(self) -> MaxVersionRecord:
        return MaxVersionRecord(name=self.best.name, count=self.best.count)


DEFAULT_METRICS: tuple[type[Accumulator], ...] = (MaxDependencies, DependentsIndex, MaxFeatures, MaxVersions)


def new_accumulators(metrics: tuple[type[Accumulator], ...] = DEFAULT_METRICS) -> dict[str, Accumulator]:
    return {m.name: m() for m in metrics}


def merge_accumulators(dst: dict[str, Accumulator], src: dict[str, Accumulator]) -> None:
    for name, acc in src.items():
        cur = dst.get(name)
        if cur is None:
            dst[name] = acc
            continue
        cur.merge(acc)
