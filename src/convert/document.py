"""
Document converter.

Turns a JSON value into collections of documents. Nested structures stay
embedded in each document; arrays of objects are additionally extracted
into sibling collections named `<parent>_<field>`.
"""

import random
from typing import Any, Dict, List, Optional, Tuple

from src.convert.clock import Clock, format_timestamp, utc_now
from src.convert.index_advisor import IndexAdvisor
from src.convert.json_types import type_name, validate_json_value, validate_name
from src.convert.models import Collection, DocumentModel

MAX_RANDOM_SEGMENT = 0xFFFFFF


class ObjectIdGenerator:
    """
    Generates 24-ish character hex identifiers.

    Layout: hex epoch seconds, 6 random hex digits, 6 hex digits of the
    document index. Unique enough within one conversion, not across
    processes.
    """

    def __init__(self, clock: Optional[Clock] = None, rng: Optional[random.Random] = None):
        self.clock = clock or utc_now
        self.rng = rng or random.Random()

    def generate(self, index: int = 0) -> str:
        seconds = int(self.clock().timestamp())
        segment = self.rng.randint(0, MAX_RANDOM_SEGMENT - 1)
        return f"{seconds:x}{segment:06x}{index:06x}"


class DocumentConverter:
    """Converts JSON values into a DocumentModel."""

    def __init__(
        self,
        index_advisor: Optional[IndexAdvisor] = None,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ):
        self.index_advisor = index_advisor or IndexAdvisor()
        self.clock = clock or utc_now
        self.id_generator = ObjectIdGenerator(self.clock, rng)

    def to_documents(self, value: Any, collection_name: str) -> DocumentModel:
        """
        Convert a JSON value to collections.

        Args:
            value: Parsed JSON value (never mutated)
            collection_name: Name of the root collection

        Returns:
            DocumentModel with the root collection first

        Raises:
            InvalidInput: If the value is not JSON or the name is blank
        """
        validate_name(collection_name, "collection name")
        validate_json_value(value)

        if isinstance(value, (list, dict)):
            items = value if isinstance(value, list) else [value]
            documents = [self.make_document(item, index) for index, item in enumerate(items)]
            root = Collection(
                name=collection_name,
                documents=documents,
                indexes=self.index_advisor.suggest_indexes(documents),
            )
        else:
            root = Collection(
                name=collection_name,
                documents=[{
                    "_id": self.id_generator.generate(),
                    "value": value,
                    "_metadata": {
                        "type": type_name(value),
                        "createdAt": self._now(),
                    },
                }],
            )

        collections = [root]
        self._extract_embedded_collections(value, collection_name, collections)

        return DocumentModel(
            database_name=f"{collection_name}_db",
            collections=collections,
            conversion_timestamp=self._now(),
        )

    def make_document(self, data: Any, index: int) -> Dict[str, Any]:
        """
        Wrap one source value as a document.

        A source `_id` field wins over the generated one; `_metadata` is
        always the generated block.
        """
        document: Dict[str, Any] = {"_id": self.id_generator.generate(index)}
        document.update(self.process_value(data))
        document["_metadata"] = {
            "createdAt": self._now(),
            "version": 1,
            "index": index,
        }
        return document

    def process_value(self, value: Any) -> Dict[str, Any]:
        """
        Shape a value into document fields.

        Objects keep their keys; arrays and primitives are wrapped as
        `{"value": ...}`. Inside an object, primitive fields and primitive
        array elements stay bare while nested containers are shaped the
        same way.

        Nodes are shaped from an explicit work stack, each one writing its
        result into the slot its parent reserved for it.
        """
        result: List[Any] = [None]
        # (node, as_field, target container, slot in target)
        stack: List[Tuple[Any, bool, Any, Any]] = [(value, False, result, 0)]

        while stack:
            node, as_field, target, slot = stack.pop()

            if isinstance(node, dict):
                shaped: Any = {}
                for key, item in node.items():
                    shaped[key] = None
                    stack.append((item, True, shaped, key))
            elif isinstance(node, list):
                items: List[Any] = [None] * len(node)
                for index, item in enumerate(node):
                    if as_field and not isinstance(item, (list, dict)):
                        items[index] = item
                    else:
                        stack.append((item, False, items, index))
                shaped = items if as_field else {"value": items}
            else:
                shaped = node if as_field else {"value": node}

            target[slot] = shaped

        return result[0]

    def _extract_embedded_collections(
        self,
        data: Any,
        parent_name: str,
        collections: List[Collection],
    ) -> None:
        """
        Lift arrays of objects into their own collections.

        Single level and first-encounter only: the first source object that
        carries a field decides its collection.
        """
        if isinstance(data, list):
            sources = [item for item in data if isinstance(item, dict)]
        elif isinstance(data, dict):
            sources = [data]
        else:
            return

        names = {c.name for c in collections}
        for source in sources:
            for key, value in source.items():
                if not isinstance(value, list) or not value:
                    continue
                objects = [item for item in value if isinstance(item, dict)]
                name = f"{parent_name}_{key}"
                if not objects or name in names:
                    continue

                documents = [self.make_document(item, idx) for idx, item in enumerate(objects)]
                collections.append(Collection(
                    name=name,
                    documents=documents,
                    indexes=self.index_advisor.suggest_indexes(documents),
                    parent_collection=parent_name,
                ))
                names.add(name)

    def _now(self) -> str:
        return format_timestamp(self.clock())
