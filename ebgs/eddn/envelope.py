"""Decoding of raw EDDN frames.

Every frame is a zlib-deflated JSON document of the form::

    {"$schemaRef": "<uri>", "header": {...}, "message": {...}}
"""

import dataclasses
import json
from typing import Any, Dict
import zlib


class MalformedMessage(ValueError):
    """A frame or payload which cannot be used. Always dropped, never retried;
    the feed supersedes it soon enough.
    """


@dataclasses.dataclass
class Envelope:
    schema_ref: str
    header: Dict[str, Any]
    message: Dict[str, Any]


def decode(raw: bytes) -> Envelope:
    """Inflates and parses one frame from the relay.
    """
    try:
        text = zlib.decompress(raw)
    except zlib.error as e:
        raise MalformedMessage(f'Could not inflate frame: {e}')
    return parse(text)


def parse(text) -> Envelope:
    """Parses an already-inflated envelope (`str` or `bytes`).
    """
    try:
        doc = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedMessage(f'Could not parse envelope: {e}')

    if not isinstance(doc, dict):
        raise MalformedMessage(f'Envelope is not an object: {type(doc).__name__}')
    schema_ref = doc.get('$schemaRef')
    header = doc.get('header')
    message = doc.get('message')
    if not isinstance(schema_ref, str):
        raise MalformedMessage('Envelope has no $schemaRef')
    if not isinstance(header, dict) or not isinstance(message, dict):
        raise MalformedMessage(f'Envelope for {schema_ref} lacks header / message')
    return Envelope(schema_ref=schema_ref, header=header, message=message)
