"""Tests for binding discovery, locators and binding coercion."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, distribution
from types import SimpleNamespace

import pytest

from conftest import FakeBinding

from bindlog.binding import Binding, coerce_binding
from bindlog.discovery import Candidate, EntryPointLocator, StaticLocator, dedupe
from bindlog.errors import IncompatibleBackend, NoBackendFound


def _ep(name: str, value: str, target=None, dist: str | None = None):
    return SimpleNamespace(
        name=name,
        value=value,
        dist=SimpleNamespace(name=dist) if dist else None,
        load=lambda: target,
    )


@pytest.fixture()
def fake_entry_points(monkeypatch):
    """Replace importlib.metadata.entry_points inside bindlog.discovery."""
    registry: dict[str, list] = {}

    def entry_points(group: str):
        return registry.get(group, [])

    monkeypatch.setattr("bindlog.discovery.entry_points", entry_points)
    return registry


# =============================================================================
# Candidates
# =============================================================================


class TestCandidates:
    def test_location_includes_distribution(self):
        candidate = Candidate(name="x", value="pkg.mod:Binding", distribution="pkg")
        assert candidate.location == "pkg.mod:Binding (pkg)"

    def test_location_without_distribution(self):
        assert Candidate(name="x", value="pkg.mod:Binding").location == "pkg.mod:Binding"

    def test_dedupe_keeps_first_seen_order(self):
        a = Candidate("a", "one:A", "one")
        b = Candidate("b", "two:B", "two")
        a_again = Candidate("a2", "one:A", "one")

        assert dedupe([a, b, a_again]) == (a, b)

    def test_same_value_different_distribution_is_kept(self):
        a = Candidate("a", "mod:A", "dist-1")
        b = Candidate("a", "mod:A", "dist-2")
        assert len(dedupe([a, b])) == 2


# =============================================================================
# EntryPointLocator
# =============================================================================


class TestEntryPointLocator:
    def test_no_entry_points_raises_no_backend(self, fake_entry_points):
        locator = EntryPointLocator("test.group")

        assert locator.find_candidates() == ()
        with pytest.raises(NoBackendFound, match="test.group"):
            locator.load_binding()

    def test_loads_first_entry_point(self, fake_entry_points):
        first, second = FakeBinding(backend_id="first"), FakeBinding(backend_id="second")
        fake_entry_points["test.group"] = [
            _ep("a", "pkg_a:binding", first, dist="pkg-a"),
            _ep("b", "pkg_b:binding", second, dist="pkg-b"),
        ]
        locator = EntryPointLocator("test.group")

        assert locator.load_binding() is first
        assert [c.location for c in locator.find_candidates()] == [
            "pkg_a:binding (pkg-a)",
            "pkg_b:binding (pkg-b)",
        ]

    def test_class_entry_point_is_instantiated(self, fake_entry_points):
        fake_entry_points["test.group"] = [_ep("cls", "tests:FakeBinding", FakeBinding)]

        binding = EntryPointLocator("test.group").load_binding()

        assert isinstance(binding, FakeBinding)

    def test_non_binding_target_is_incompatible(self, fake_entry_points):
        fake_entry_points["test.group"] = [_ep("bad", "tests:object", object())]

        with pytest.raises(IncompatibleBackend):
            EntryPointLocator("test.group").load_binding()

    def test_duplicate_registrations_are_not_ambiguous(self, fake_entry_points):
        fake_entry_points["test.group"] = [
            _ep("a", "pkg:binding", FakeBinding(), dist="pkg"),
            _ep("a", "pkg:binding", FakeBinding(), dist="pkg"),
        ]
        assert len(EntryPointLocator("test.group").find_candidates()) == 1

    def test_installed_package_registers_structlog_binding(self):
        try:
            distribution("bindlog")
        except PackageNotFoundError:
            pytest.skip("bindlog is not installed")

        names = [c.name for c in EntryPointLocator().find_candidates()]

        assert "structlog" in names


# =============================================================================
# StaticLocator
# =============================================================================


class TestStaticLocator:
    def test_empty_raises_no_backend(self):
        with pytest.raises(NoBackendFound):
            StaticLocator().load_binding()

    def test_first_binding_wins(self):
        first = FakeBinding(backend_id="first")
        assert StaticLocator(first, FakeBinding()).load_binding() is first

    def test_candidates_describe_classes_and_instances(self):
        candidates = StaticLocator(FakeBinding, FakeBinding()).find_candidates()
        # A class and an instance of it describe to the same location
        assert len(candidates) == 1
        assert candidates[0].value.endswith(":FakeBinding")


# =============================================================================
# Coercion
# =============================================================================


class TestCoercion:
    def test_instance_passes_through(self):
        binding = FakeBinding()
        assert coerce_binding(binding) is binding

    def test_zero_arg_callable_is_called(self):
        binding = FakeBinding()
        assert coerce_binding(lambda: binding) is binding

    def test_callable_returning_non_binding_rejected(self):
        with pytest.raises(IncompatibleBackend):
            coerce_binding(lambda: "not a binding")

    def test_missing_backend_id_rejected(self):
        class HalfBinding:
            @property
            def logger_factory(self):
                return None

        with pytest.raises(IncompatibleBackend):
            coerce_binding(HalfBinding)

    def test_fake_binding_satisfies_protocol(self):
        assert isinstance(FakeBinding(), Binding)
