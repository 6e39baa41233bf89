"""vPIC XML markup parsing and record extraction.

vPIC answers with documents shaped like::

    <Response>
      <Count>2</Count>
      <Message>Response returned successfully</Message>
      <Results>
        <VehicleTypesForMakeIds>
          <VehicleTypeId>2</VehicleTypeId>
          <VehicleTypeName>Passenger Car</VehicleTypeName>
        </VehicleTypesForMakeIds>
        <VehicleTypesForMakeIds>...</VehicleTypesForMakeIds>
      </Results>
    </Response>

``parse`` turns such a document into a tree of plain mappings in which a
child tag seen once maps to its value and a child tag seen several times
maps to a list. The extractors therefore have to normalize the collapsed
single-record case themselves.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any

from pydantic import ValidationError

from vehicle_makes_db.exceptions import ParseError
from vehicle_makes_db.schemas import Make, VehicleType

ParsedTree = dict[str, Any]

MAKE_RECORD_TAG = "AllVehicleMakes"
TYPE_RECORD_TAG = "VehicleTypesForMakeIds"


def parse(document: bytes | str) -> ParsedTree:
    """Parse a markup document into a nested mapping.

    Attributes and namespaces are dropped and text is whitespace-normalized.

    Raises:
        ParseError: If the document is not well-formed markup
    """
    try:
        root = ET.fromstring(document)
    except ET.ParseError as e:
        raise ParseError(f"Malformed markup document: {e}") from e
    return {_local_name(root.tag): _element_value(root)}


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _element_value(element: ET.Element) -> Any:
    children = list(element)
    if not children:
        return " ".join((element.text or "").split())

    value: dict[str, Any] = {}
    for child in children:
        name = _local_name(child.tag)
        child_value = _element_value(child)
        if name not in value:
            value[name] = child_value
        elif isinstance(value[name], list):
            value[name].append(child_value)
        else:
            value[name] = [value[name], child_value]
    return value


def _response(tree: ParsedTree) -> dict[str, Any]:
    response = tree.get("Response")
    if not isinstance(response, dict):
        raise ParseError("Document has no Response element")
    return response


def extract_count(tree: ParsedTree) -> int:
    """Return the record count reported by the document.

    Raises:
        ParseError: If Count is missing or not an integer
    """
    raw = _response(tree).get("Count")
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Invalid Count value: {raw!r}") from e


def _results(tree: ParsedTree, record_tag: str) -> Any:
    results = _response(tree).get("Results")
    if not isinstance(results, dict) or record_tag not in results:
        raise ParseError(f"Document has no {record_tag} records")
    return results[record_tag]


def extract_makes(tree: ParsedTree) -> list[Make]:
    """Map every make record of an all-makes document to a shell Make."""
    if extract_count(tree) == 0:
        return []

    records = _results(tree, MAKE_RECORD_TAG)
    if isinstance(records, dict):
        records = [records]
    if not isinstance(records, list):
        raise ParseError(f"Unexpected {MAKE_RECORD_TAG} shape: {type(records).__name__}")

    try:
        return [
            Make(make_id=str(record["Make_ID"]), make_name=record.get("Make_Name", ""))
            for record in records
        ]
    except (KeyError, TypeError, AttributeError, ValidationError) as e:
        raise ParseError(f"Invalid make record: {e}") from e


def extract_types(tree: ParsedTree) -> list[VehicleType]:
    """Map the type records of a types-for-make document to VehicleTypes.

    The markup collapses collections by size, so the reported Count decides
    the shape that is expected:

    - 0: no records, whatever Results holds
    - 1: a single record mapping, wrapped into a one-element list
    - more: a list of record mappings, kept in source order

    Raises:
        ParseError: If the records do not have the shape the Count implies
    """
    count = extract_count(tree)
    if count == 0:
        return []

    records = _results(tree, TYPE_RECORD_TAG)
    if count == 1:
        if isinstance(records, dict):
            records = [records]
        elif not (isinstance(records, list) and len(records) == 1):
            raise ParseError("Count is 1 but Results does not hold a single record")
    elif not isinstance(records, list):
        raise ParseError(f"Count is {count} but Results does not hold a record list")

    try:
        return [
            VehicleType(
                type_id=str(record["VehicleTypeId"]),
                type_name=record.get("VehicleTypeName", ""),
            )
            for record in records
        ]
    except (KeyError, TypeError, AttributeError, ValidationError) as e:
        raise ParseError(f"Invalid vehicle type record: {e}") from e
