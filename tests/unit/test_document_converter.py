"""
Unit tests for document conversion.
"""

import random

import pytest

from src.convert.document import DocumentConverter, ObjectIdGenerator
from src.convert.errors import InvalidInput

FIXED_TIMESTAMP = "2024-01-15T12:00:00.000Z"


@pytest.fixture
def converter(fixed_clock, seeded_rng):
    return DocumentConverter(clock=fixed_clock, rng=seeded_rng)


def strip_generated(document):
    """Document fields without _id/_metadata."""
    return {k: v for k, v in document.items() if k not in ("_id", "_metadata")}


class TestObjectIdGenerator:
    """Tests for generated identifiers."""

    def test_layout(self, fixed_clock):
        generator = ObjectIdGenerator(fixed_clock, random.Random(42))
        expected_random = random.Random(42).randint(0, 0xFFFFFE)
        seconds = int(fixed_clock().timestamp())

        assert generator.generate(5) == f"{seconds:x}{expected_random:06x}000005"

    def test_index_is_zero_padded_hex(self, fixed_clock):
        identifier = ObjectIdGenerator(fixed_clock, random.Random(1)).generate(255)

        assert identifier.endswith("0000ff")

    def test_same_seed_same_ids(self, fixed_clock):
        first = ObjectIdGenerator(fixed_clock, random.Random(3))
        second = ObjectIdGenerator(fixed_clock, random.Random(3))

        assert [first.generate(i) for i in range(3)] == [second.generate(i) for i in range(3)]


class TestToDocuments:
    """Tests for collection construction."""

    def test_array_gives_one_document_per_item(self, converter):
        data = [{"name": "a"}, {"name": "b"}, {"name": "c"}]
        model = converter.to_documents(data, "users")
        root = model.collections[0]

        assert root.name == "users"
        assert len(root.documents) == 3
        for index, document in enumerate(root.documents):
            assert document["_metadata"] == {
                "createdAt": FIXED_TIMESTAMP,
                "version": 1,
                "index": index,
            }
            assert isinstance(document["_id"], str)
        assert [strip_generated(d) for d in root.documents] == data

    def test_object_gives_single_document(self, converter):
        model = converter.to_documents({"name": "Acme"}, "company")

        assert len(model.collections[0].documents) == 1
        assert model.collections[0].documents[0]["name"] == "Acme"

    def test_primitive_document(self, converter):
        model = converter.to_documents(42, "answer")
        root = model.collections[0]

        assert len(root.documents) == 1
        document = root.documents[0]
        assert document["value"] == 42
        assert document["_metadata"] == {"type": "integer", "createdAt": FIXED_TIMESTAMP}
        assert root.indexes == []
        assert len(model.collections) == 1

    def test_array_of_primitives(self, converter):
        root = converter.to_documents([1, "x"], "c").collections[0]

        assert [strip_generated(d) for d in root.documents] == [{"value": 1}, {"value": "x"}]

    def test_empty_array(self, converter):
        model = converter.to_documents([], "c")

        assert model.collections[0].documents == []
        assert model.collections[0].indexes == []
        assert model.to_dict()["metadata"]["total_documents"] == 0

    def test_document_ids_are_unique(self, converter):
        root = converter.to_documents([{"a": i} for i in range(20)], "c").collections[0]

        assert len({d["_id"] for d in root.documents}) == 20

    def test_source_id_is_kept(self, converter):
        document = converter.make_document({"_id": "custom", "a": 1}, 0)

        assert document["_id"] == "custom"

    def test_source_metadata_is_replaced(self, converter):
        document = converter.make_document({"_metadata": "mine"}, 2)

        assert document["_metadata"]["index"] == 2


class TestProcessValue:
    """Tests for recursive document shaping."""

    def test_nested_structures_are_preserved(self, converter):
        source = {"tags": ["a", {"b": 1}], "meta": {"x": [1, 2]}, "n": None}

        assert converter.process_value(source) == source

    def test_array_value_wraps_elements(self, converter):
        assert converter.process_value([1, {"a": 1}]) == {
            "value": [{"value": 1}, {"a": 1}]}

    def test_primitive_value_is_wrapped(self, converter):
        assert converter.process_value("x") == {"value": "x"}

    def test_nested_arrays_inside_fields_are_wrapped(self, converter):
        assert converter.process_value({"m": [[1, 2]]}) == {
            "m": [{"value": [{"value": 1}, {"value": 2}]}]}


class TestEmbeddedCollections:
    """Tests for extraction of arrays of objects."""

    def test_array_of_objects_is_extracted(self, converter):
        data = [
            {"user": "a", "posts": [{"t": 1}, {"t": 2}]},
            {"user": "b", "posts": [{"t": 3}]},
        ]
        model = converter.to_documents(data, "users")

        assert [c.name for c in model.collections] == ["users", "users_posts"]
        posts = model.collections[1]
        assert posts.parent_collection == "users"
        # first encounter only: the second user's posts are not extracted
        assert [strip_generated(d) for d in posts.documents] == [{"t": 1}, {"t": 2}]
        assert [d["_metadata"]["index"] for d in posts.documents] == [0, 1]

    def test_embedded_documents_stay_in_parent(self, converter):
        data = {"posts": [{"t": 1}]}
        root = converter.to_documents(data, "c").collections[0]

        assert root.documents[0]["posts"] == [{"t": 1}]

    def test_array_of_primitives_is_not_extracted(self, converter):
        model = converter.to_documents({"tags": ["a", "b"]}, "c")

        assert len(model.collections) == 1

    def test_mixed_array_keeps_only_objects(self, converter):
        model = converter.to_documents({"items": [1, {"a": 1}, "x", {"a": 2}]}, "c")
        items = model.get_collection("c_items")

        assert [strip_generated(d) for d in items.documents] == [{"a": 1}, {"a": 2}]
        assert [d["_metadata"]["index"] for d in items.documents] == [0, 1]

    def test_extraction_is_single_level(self, converter):
        data = {"a": [{"b": [{"c": 1}]}]}
        model = converter.to_documents(data, "root")

        assert [c.name for c in model.collections] == ["root", "root_a"]

    def test_primitive_input_has_no_extraction(self, converter):
        assert len(converter.to_documents("x", "c").collections) == 1

    def test_extracted_collection_gets_indexes(self, converter):
        model = converter.to_documents({"posts": [{"t": 1}, {"t": 2}]}, "c")
        posts = model.get_collection("c_posts")

        assert [i.field for i in posts.indexes] == ["t"]


class TestDocumentModel:
    """Tests for model-level output."""

    def test_to_dict(self, converter):
        data = [{"userId": 1, "createdAt": "x", "items": [{"a": 1}]}]
        result = converter.to_documents(data, "events").to_dict()

        assert result["database"] == "events_db"
        assert result["metadata"] == {
            "collection_count": 2,
            "total_documents": 2,
            "conversion_timestamp": FIXED_TIMESTAMP,
        }
        root = result["collections"][0]
        assert "parent_collection" not in root
        assert {"fields": ["userId", "createdAt"], "kind": "composite"} in root["indexes"]
        assert result["collections"][1]["parent_collection"] == "events"

    def test_same_clock_and_seed_is_reproducible(self, fixed_clock):
        data = [{"a": 1, "b": [{"c": 2}]}, {"a": 2}]
        first = DocumentConverter(clock=fixed_clock, rng=random.Random(7))
        second = DocumentConverter(clock=fixed_clock, rng=random.Random(7))

        assert first.to_documents(data, "c").to_dict() == second.to_documents(data, "c").to_dict()

    def test_invalid_input(self, converter):
        with pytest.raises(InvalidInput):
            converter.to_documents(float("nan"), "c")
        with pytest.raises(InvalidInput):
            converter.to_documents([], "")
