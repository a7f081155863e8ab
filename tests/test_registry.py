"""Tests for jrender.reactive.registry and jrender.reactive.saves."""

from __future__ import annotations

from pathlib import Path

from jrender.reactive.registry import VirtualDocumentRegistry
from jrender.reactive.saves import SaveEvents, Subscription
from jrender.reactive.uris import VirtualUri


class TestRegistry:

    def test_missing_returns_empty(self) -> None:
        assert VirtualDocumentRegistry().get("rendered:nothing.yaml") == ""

    def test_set_and_get(self) -> None:
        registry = VirtualDocumentRegistry()
        uri = VirtualUri("a.yaml")
        registry.set(uri, "a: 1")
        assert registry.get(uri) == "a: 1"
        assert registry.get("rendered:a.yaml") == "a: 1"
        assert uri in registry
        assert len(registry) == 1

    def test_replace(self) -> None:
        registry = VirtualDocumentRegistry()
        uri = VirtualUri("a.yaml")
        registry.set(uri, "a: 1")
        registry.set(uri, "a: 2")
        assert registry.get(uri) == "a: 2"
        assert len(registry) == 1

    def test_delete_once(self) -> None:
        registry = VirtualDocumentRegistry()
        uri = VirtualUri("a.yaml")
        registry.set(uri, "a: 1")
        assert registry.delete(uri) is True
        assert registry.delete(uri) is False
        assert registry.get(uri) == ""

    def test_listeners_notified_on_set(self) -> None:
        registry = VirtualDocumentRegistry()
        seen: list[VirtualUri] = []
        sub = registry.subscribe(seen.append)
        uri = VirtualUri("a.yaml")
        registry.set(uri, "x")
        sub.dispose()
        registry.set(uri, "y")
        assert seen == [uri]

    def test_uris_snapshot(self) -> None:
        registry = VirtualDocumentRegistry()
        registry.set(VirtualUri("a.yaml"), "")
        registry.set(VirtualUri("b.yaml"), "")
        assert registry.uris() == frozenset({"rendered:a.yaml", "rendered:b.yaml"})


class TestSubscription:

    def test_dispose_runs_once(self) -> None:
        calls: list[int] = []
        sub = Subscription(lambda: calls.append(1))
        assert sub.disposed is False
        sub.dispose()
        sub.dispose()
        assert calls == [1]
        assert sub.disposed is True


class TestSaveEvents:

    def test_publish_to_all_handlers(self, tmp_path: Path) -> None:
        saves = SaveEvents()
        a: list[Path] = []
        b: list[Path] = []
        saves.subscribe(a.append)
        saves.subscribe(b.append)
        assert saves.publish(tmp_path / "x.jsonnet") == 2
        assert a == b == [tmp_path / "x.jsonnet"]

    def test_dispose_detaches(self, tmp_path: Path) -> None:
        saves = SaveEvents()
        seen: list[Path] = []
        sub = saves.subscribe(seen.append)
        sub.dispose()
        assert saves.subscriber_count == 0
        assert saves.publish(tmp_path / "x.jsonnet") == 0
        assert seen == []

    def test_handler_may_dispose_during_publish(self, tmp_path: Path) -> None:
        saves = SaveEvents()
        subs: list[Subscription] = []
        seen: list[Path] = []

        def handler(path: Path) -> None:
            seen.append(path)
            subs[0].dispose()

        subs.append(saves.subscribe(handler))
        saves.publish(tmp_path / "x.jsonnet")
        saves.publish(tmp_path / "x.jsonnet")
        assert len(seen) == 1

    def test_relative_path_made_absolute(self, monkeypatch, tmp_path: Path) -> None:  # noqa: ANN001
        monkeypatch.chdir(tmp_path)
        saves = SaveEvents()
        seen: list[Path] = []
        saves.subscribe(seen.append)
        saves.publish("main.jsonnet")
        assert seen == [tmp_path / "main.jsonnet"]

    def test_dotdot_segments_collapsed(self, tmp_path: Path) -> None:
        saves = SaveEvents()
        seen: list[Path] = []
        saves.subscribe(seen.append)
        saves.publish(f"{tmp_path}/envs/../main.jsonnet")
        assert seen == [tmp_path / "main.jsonnet"]


class TestVacantSerial:

    def test_first_serial_when_free(self) -> None:
        registry = VirtualDocumentRegistry()
        assert registry.vacant_serial(lambda n: [VirtualUri(f"a_{n}.yaml")]) == 1

    def test_skips_taken_serials(self) -> None:
        registry = VirtualDocumentRegistry()
        registry.set(VirtualUri("a_1.yaml"), "x")
        registry.set(VirtualUri("a_2.yaml"), "x")
        assert registry.vacant_serial(lambda n: [VirtualUri(f"a_{n}.yaml")]) == 3

    def test_all_names_must_be_free(self) -> None:
        registry = VirtualDocumentRegistry()
        registry.set(VirtualUri("current_1.yaml"), "x")
        serial = registry.vacant_serial(
            lambda n: [VirtualUri(f"original_{n}.yaml"), VirtualUri(f"current_{n}.yaml")],
        )
        assert serial == 2
