"""Tests for the provenance-tracking merge."""

import typing as _typing

import pytest as _pytest

import jsonprov.config as config
import jsonprov.merge as merge
import jsonprov.utils.json_values as json_values

SOURCE1 = merge.SourceRecord("s1", {"a": 1, "b": {"c": 10}, "d": [1], "common": "v1"})
SOURCE2 = merge.SourceRecord("s2", {"a": 2, "b": {"e": 20}, "d": [2, 3], "common": "v2"})
SOURCE3 = merge.SourceRecord(
    "s3",
    {"b": {"c": 30, "e": json_values.ABSENT}, "common": None},
)


def _leaf_paths(value: _typing.Any, prefix: tuple[str, ...] = ()) -> dict[str, _typing.Any]:
    """Dotted path -> value for every non-mapping value under a mapping."""
    paths: dict[str, _typing.Any] = {}
    for key, item in value.items():
        path = prefix + (key,)
        if json_values.is_mapping(item) and item:
            paths.update(_leaf_paths(item, path))
        else:
            paths[".".join(path)] = item
    return paths


class TestMergeAllWithMetadata:
    """Tests for merge_all_with_metadata()."""

    def test_merged_value(self) -> None:
        result = merge.merge_all_with_metadata([SOURCE1, SOURCE2])
        assert result.merged == {"a": 2, "b": {"c": 10, "e": 20}, "d": [2, 3], "common": "v2"}

    def test_root_accessor(self) -> None:
        """The root accessor maps each attribute to its last writer."""
        result = merge.merge_all_with_metadata([SOURCE1, SOURCE2])
        root = result.accessor()
        assert root is not None

        assert root["a"] == merge.ProvenanceRecord("s2", "a", 2)
        assert root["common"].source_id == "s2"
        assert root["d"].value == [2, 3]
        assert "z" not in root

    def test_touching_child_rewrites_object(self) -> None:
        """Adding b.e makes s2 the writer of b, while b.c stays with s1."""
        result = merge.merge_all_with_metadata([SOURCE1, SOURCE2])

        assert result.provenance["b"].source_id == "s2"
        assert result.provenance["b"].value == {"c": 10, "e": 20}
        assert result.provenance["b.c"] == merge.ProvenanceRecord("s1", "b.c", 10)
        assert result.provenance["b.e"] == merge.ProvenanceRecord("s2", "b.e", 20)

    def test_nested_accessor(self) -> None:
        result = merge.merge_all_with_metadata([SOURCE1, SOURCE2])
        nested = result.accessor(result.merged["b"])
        assert nested is not None

        assert nested["c"].source_id == "s1"
        assert nested["c"].path == "b.c"
        assert nested["e"].source_id == "s2"
        assert result.index.lookup(result.merged["b"], "z") is None

    def test_concat_strategy(self) -> None:
        result = merge.merge_all_with_metadata([SOURCE1, SOURCE2], {"array_strategy": "concat"})

        assert result.merged["d"] == [1, 2, 3]
        assert result.provenance["d"].source_id == "s2"
        assert result.provenance["d"].value == [1, 2, 3]

    def test_null_and_absent_overrides(self) -> None:
        """None is a value; ABSENT removes the key and its provenance."""
        result = merge.merge_all_with_metadata([SOURCE1, SOURCE2, SOURCE3])

        assert result.merged["common"] is None
        assert result.merged["b"] == {"c": 30}
        assert result.provenance["common"].source_id == "s3"
        assert result.provenance["b"] == merge.ProvenanceRecord("s3", "b", {"c": 30})
        assert result.provenance["b.c"].source_id == "s3"
        assert "b.e" not in result.provenance
        assert result.index.lookup(result.merged["b"], "e") is None

    def test_empty_input(self) -> None:
        result = merge.merge_all_with_metadata([])
        assert result.merged == {}
        assert result.provenance == {}

    def test_single_source(self) -> None:
        result = merge.merge_all_with_metadata([SOURCE1])

        assert result.merged == SOURCE1.data
        assert result.merged is not SOURCE1.data
        assert result.provenance["a"] == merge.ProvenanceRecord("s1", "a", 1)
        assert result.provenance["b.c"] == merge.ProvenanceRecord("s1", "b.c", 10)

    def test_object_replaced_by_scalar(self) -> None:
        """A non-mapping result has no accessor and no provenance."""
        result = merge.merge_all_with_metadata(
            [merge.SourceRecord("p1", {"a": 1}), merge.SourceRecord("p2", 100)]
        )
        assert result.merged == 100
        assert result.accessor() is None
        assert result.provenance == {}

    def test_scalar_replaced_by_object(self) -> None:
        result = merge.merge_all_with_metadata(
            [merge.SourceRecord("p1", 100), merge.SourceRecord("p2", {"a": 1})]
        )
        assert result.merged == {"a": 1}
        root = result.accessor()
        assert root is not None
        assert root["a"] == merge.ProvenanceRecord("p2", "a", 1)

    def test_mapping_sources(self) -> None:
        """Sources may be given as id/data mappings."""
        result = merge.merge_all_with_metadata([{"id": "x", "data": {"k": "v"}}])
        assert result.provenance["k"].source_id == "x"

    def test_invalid_source_rejected(self) -> None:
        with _pytest.raises(TypeError):
            merge.merge_all_with_metadata([{"data": {}}])

    def test_invalid_options_rejected_before_merging(self) -> None:
        with _pytest.raises(config.InvalidConfigurationError):
            merge.merge_all_with_metadata([SOURCE1], {"array_strategy": "bogus"})

    def test_unpacks_as_pair(self) -> None:
        merged, provenance = merge.merge_all_with_metadata([SOURCE1])
        assert merged["a"] == 1
        assert provenance["a"].source_id == "s1"

    def test_end_to_end_people(self, people_sources: list[merge.SourceRecord]) -> None:
        result = merge.merge_all_with_metadata(people_sources)

        assert result.merged == {"name": "Bob", "age": 30}
        assert result.provenance["name"].source_id == "2"
        assert result.provenance["name"].value == "Bob"
        assert result.provenance["age"].source_id == "3"
        assert result.provenance["age"].value == 30


class TestProvenanceInvariants:
    """Properties that hold for any merge."""

    SOURCES = [
        merge.SourceRecord("base", {"server": {"host": "a", "ports": [80]}, "debug": False}),
        merge.SourceRecord("team", {"server": {"tls": {"enabled": True}}, "owners": ["x"]}),
        merge.SourceRecord("local", {"server": {"host": "b", "tls": {"cert": None}}, "debug": True}),
        merge.SourceRecord("cleanup", {"owners": json_values.ABSENT}),
    ]

    def test_every_leaf_has_matching_provenance(self) -> None:
        """Each leaf path has a record whose value equals the merged value."""
        result = merge.merge_all_with_metadata(self.SOURCES)

        for path, value in _leaf_paths(result.merged).items():
            assert path in result.provenance, path
            assert json_values.deep_equal(result.provenance[path].value, value), path

    def test_no_entries_for_missing_paths(self) -> None:
        result = merge.merge_all_with_metadata(self.SOURCES)
        assert "owners" not in result.provenance
        assert "owners" not in result.merged

    def test_last_writer_wins(self) -> None:
        result = merge.merge_all_with_metadata(self.SOURCES)

        assert result.provenance["server.host"].source_id == "local"
        assert result.provenance["server.ports"].source_id == "base"
        assert result.provenance["server.tls.enabled"].source_id == "team"
        assert result.provenance["server.tls.cert"].source_id == "local"
        assert result.provenance["server"].source_id == "local"

    def test_snapshot_immune_to_mutation(self) -> None:
        """Mutating the merged tree does not change recorded values."""
        result = merge.merge_all_with_metadata(self.SOURCES)

        result.merged["server"]["ports"].append(443)
        result.merged["server"]["tls"]["enabled"] = False
        assert result.provenance["server.ports"].value == [80]
        assert result.provenance["server.tls.enabled"].value is True

    def test_sources_not_modified(self) -> None:
        data = {"a": {"b": [1]}}
        result = merge.merge_all_with_metadata([merge.SourceRecord("s", data)])

        result.merged["a"]["b"].append(2)
        assert data == {"a": {"b": [1]}}

    def test_deleted_then_restored(self) -> None:
        result = merge.merge_all_with_metadata(
            [
                merge.SourceRecord("s1", {"x": 1}),
                merge.SourceRecord("s2", {"x": json_values.ABSENT}),
                merge.SourceRecord("s3", {"x": 3}),
            ]
        )
        assert result.provenance["x"] == merge.ProvenanceRecord("s3", "x", 3)

    def test_deletion(self) -> None:
        result = merge.merge_all_with_metadata(
            [merge.SourceRecord("s1", {"x": 1}), merge.SourceRecord("s2", {"x": json_values.ABSENT})]
        )
        assert "x" not in result.merged
        assert "x" not in result.provenance

    def test_replaced_subtree_purges_nested_paths(self) -> None:
        """When an object becomes a scalar, its old children leave the map."""
        result = merge.merge_all_with_metadata(
            [merge.SourceRecord("s1", {"a": {"b": 1}}), merge.SourceRecord("s2", {"a": 5})]
        )
        assert result.provenance["a"].source_id == "s2"
        assert "a.b" not in result.provenance

    def test_untouched_subtree_keeps_accessor(self) -> None:
        """Subtrees a later source does not touch keep their local history."""
        result = merge.merge_all_with_metadata(
            [
                merge.SourceRecord("s1", {"a": {"b": {"c": 1}}}),
                merge.SourceRecord("s2", {"z": 1}),
            ]
        )
        nested = result.accessor(result.merged["a"]["b"])
        assert nested is not None
        assert nested["c"].source_id == "s1"

    def test_non_string_keys_stringified(self) -> None:
        result = merge.merge_all_with_metadata([merge.SourceRecord("s", {1: "one"})])
        assert result.merged == {"1": "one"}
        assert result.provenance["1"].source_id == "s"

    def test_baseline_keeps_non_string_keys(self) -> None:
        """Only the provenance merge normalizes keys; merge_all() keeps them."""
        data = {1: "one", "nested": {2: "two"}}
        assert merge.merge_all([data]) == {1: "one", "nested": {2: "two"}}
        result = merge.merge_all_with_metadata([merge.SourceRecord("s", data)])
        assert result.merged == {"1": "one", "nested": {"2": "two"}}
        assert result.provenance["nested.2"].value == "two"

    def test_record_segments(self) -> None:
        result = merge.merge_all_with_metadata(self.SOURCES)
        assert result.provenance["server.tls.cert"].segments == ("server", "tls", "cert")


class TestProvenanceMerger:
    """Tests for incremental merging with ProvenanceMerger."""

    def test_incremental_matches_one_shot(self) -> None:
        merger = merge.ProvenanceMerger()
        for source in (SOURCE1, SOURCE2, SOURCE3):
            merger.add(source)

        one_shot = merge.merge_all_with_metadata([SOURCE1, SOURCE2, SOURCE3])
        assert merger.merged == one_shot.merged
        assert merger.provenance == one_shot.provenance

    def test_result_is_snapshot_of_map(self) -> None:
        merger = merge.ProvenanceMerger()
        merger.add(SOURCE1)
        first = merger.result()
        merger.add(SOURCE2)

        assert first.provenance["a"].source_id == "s1"
        assert merger.provenance["a"].source_id == "s2"

    def test_earlier_result_keeps_its_accessors(self) -> None:
        """Nodes a later pass replaces stay resolvable through an earlier result."""
        merger = merge.ProvenanceMerger()
        merger.add(SOURCE1)
        first = merger.result()
        merger.add(SOURCE2)

        root = first.accessor()
        assert root is not None
        assert root["a"].source_id == "s1"
        nested = first.accessor(first.merged["b"])
        assert nested is not None
        assert nested["c"].source_id == "s1"

        assert first.merged["b"] in first.index
        assert first.merged["b"] not in merger.index
        assert merger.result().merged["b"] in merger.index

    def test_index_copy_is_independent(self) -> None:
        index = merge.ProvenanceIndex()
        node = {"a": 1}
        index.attach(node, {})
        duplicate = index.copy()

        index.retain([])

        assert node not in index
        assert node in duplicate

    def test_index_only_tracks_reachable_nodes(self) -> None:
        """Nodes replaced by later passes are dropped from the index."""
        merger = merge.ProvenanceMerger()
        merger.add(merge.SourceRecord("s1", {"a": {"b": 1}}))
        merger.add(merge.SourceRecord("s2", {"a": {"c": 2}}))

        # Root and a are the only mapping nodes
        assert len(merger.index) == 2
