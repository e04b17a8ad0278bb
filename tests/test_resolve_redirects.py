import pytest

from wikistats.data.models import RedirectEdge
from wikistats.redirects.emitter import emit_resolution_maps
from wikistats.redirects.engine import (
    RedirectResolutionConfig,
    RedirectResolutionEngine,
    resolve_redirects,
)
from wikistats.redirects.errors import RedirectIndexUnavailableError, RedirectResolutionError
from wikistats.redirects.resolver import ChainResolver
from wikistats.redirects.index import RedirectIndex


def test_chain_example_produces_forward_and_reverse_maps():
    forward, reverse = resolve_redirects([("A", "B"), ("B", "C"), ("C", "D")])
    assert forward == {"A": "D", "B": "D", "C": "D"}
    assert sorted(reverse["D"]) == ["A", "B", "C"]
    assert set(reverse) == {"D"}


def test_two_cycle_terminates():
    forward, reverse = resolve_redirects([("X", "Y"), ("Y", "X")])
    assert forward == {"X": "Y", "Y": "X"}
    assert reverse == {"Y": ["X"], "X": ["Y"]}


@pytest.mark.parametrize("executor", ["serial", "thread", "process"])
def test_executors_agree(executor):
    data = [(f"P{i}", f"P{i + 1}") for i in range(60)] + [("Loop1", "Loop2"), ("Loop2", "Loop1")]
    config = RedirectResolutionConfig(num_partitions=5, max_workers=2, executor=executor)
    forward, reverse = resolve_redirects(data, config)
    assert forward["P0"] == "P60"
    assert forward["P59"] == "P60"
    assert len(reverse["P60"]) == 60
    assert forward["Loop1"] == "Loop2"


def test_resolution_is_deterministic():
    data = [("A", "B"), ("B", "C"), ("E", "C"), ("F", "G"), ("G", "F"), ("H", "I")]
    config = RedirectResolutionConfig(num_partitions=3, executor="thread")
    first = resolve_redirects(data, config)
    second = resolve_redirects(list(data), config)
    assert first == second
    assert list(first[0].items()) == list(second[0].items())
    assert {key: list(value) for key, value in first[1].items()} == second[1]


def test_reverse_map_is_complete():
    data = [("A", "B"), ("B", "C"), ("E", "C"), ("F", "G"), ("H", "A")]
    forward, reverse = resolve_redirects(data, RedirectResolutionConfig(num_partitions=2))
    for source, canonical in forward.items():
        assert source in reverse[canonical]
    assert sum(len(sources) for sources in reverse.values()) == len(forward)


def test_every_indexed_source_gets_exactly_one_resolution():
    data = [("A", "B"), ("A", "C"), ("", "C"), ("B", None), ("D", "E")]
    resolution = RedirectResolutionEngine(RedirectResolutionConfig(num_partitions=3)).run(data)
    assert set(resolution.maps.forward) == set(resolution.index)
    assert resolution.maps.forward["A"] == "C"
    assert resolution.stats.malformed_edges == 2
    assert resolution.stats.duplicate_sources == 1
    assert resolution.stats.resolved_edges == 2


def test_badly_shaped_edges_are_skipped():
    forward, _ = resolve_redirects([("A", "B"), ("lonely",), None, RedirectEdge("C", "D")])
    assert forward == {"A": "B", "C": "D"}


def test_stats_track_cycles_and_depth():
    data = [(f"L{i}", f"L{i + 1}") for i in range(10)] + [("X", "Y"), ("Y", "X")]
    config = RedirectResolutionConfig(max_depth=4, num_partitions=2, executor="serial")
    resolution = RedirectResolutionEngine(config).run(data)
    assert resolution.stats.cycles == 2
    assert resolution.stats.max_hops == 4
    assert resolution.stats.depth_limited > 0
    assert resolution.maps.forward["L0"] == "L4"


def test_config_validation():
    with pytest.raises(ValueError):
        RedirectResolutionEngine(RedirectResolutionConfig(executor="gpu"))
    with pytest.raises(ValueError):
        RedirectResolutionEngine(RedirectResolutionConfig(max_depth=0))
    with pytest.raises(ValueError):
        RedirectResolutionEngine(RedirectResolutionConfig(num_partitions=0))


def test_config_from_dict_applies_defaults():
    config = RedirectResolutionConfig.from_dict({"max_depth": "7", "executor": "serial"})
    assert config.max_depth == 7
    assert config.num_partitions == 4
    assert config.max_workers is None
    assert config.executor == "serial"


def test_index_failure_aborts_the_run(monkeypatch):
    def broken_merge(aggregates):
        raise MemoryError("no room for the index")

    monkeypatch.setattr("wikistats.redirects.index.merge_partitions", broken_merge)
    with pytest.raises(RedirectIndexUnavailableError):
        resolve_redirects([("A", "B")], RedirectResolutionConfig(executor="serial"))


def test_failed_partition_is_recomputed_once(monkeypatch):
    from wikistats.redirects import engine

    calls = {"count": 0}
    real_resolve = engine.resolve_partition

    def flaky(index, edges, max_depth, partition):
        calls["count"] += 1
        if calls["count"] == 1:
            raise RuntimeError("worker lost")
        return real_resolve(index, edges, max_depth, partition)

    monkeypatch.setattr(engine, "resolve_partition", flaky)
    forward, _ = resolve_redirects([("A", "B")], RedirectResolutionConfig(num_partitions=1, executor="serial"))
    assert forward == {"A": "B"}
    assert calls["count"] == 2


def test_partition_failing_twice_raises(monkeypatch):
    from wikistats.redirects import engine

    def always_fails(index, edges, max_depth, partition):
        raise RuntimeError("worker lost")

    monkeypatch.setattr(engine, "resolve_partition", always_fails)
    with pytest.raises(RedirectResolutionError):
        resolve_redirects([("A", "B")], RedirectResolutionConfig(num_partitions=1, executor="thread"))


def test_emitter_keeps_all_aliases_and_frames():
    resolver = ChainResolver(RedirectIndex({"A": "C", "B": "C"}))
    maps = emit_resolution_maps([resolver.resolve("A"), resolver.resolve("B"), resolver.resolve("A")])
    assert maps.forward == {"A": "C", "B": "C"}
    assert maps.aliases("C") == ["A", "B"]
    assert maps.aliases("missing") == []
    assert maps.forward_frame().rows() == [("A", "C"), ("B", "C")]
    assert maps.reverse_frame().rows() == [("C", "A"), ("C", "B")]
    assert maps.reverse_frame().columns == ["canonical", "source"]
