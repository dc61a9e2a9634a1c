"""Protobuf wire format of the catalog RPC API.

The contract lives in ``protos/catalog.proto`` and is compiled with
grpcio-tools when this module is imported. Requests are read into the
pydantic messages of ``catalog_service.rpc.schemas`` through
``json_format``; responses take the opposite route, so the service itself
never sees a protobuf type.
"""

from datetime import datetime, timezone
from typing import Any

import grpc
from google.protobuf import json_format
from google.protobuf.message import Message
from google.protobuf.timestamp_pb2 import Timestamp
from pydantic import BaseModel

# Resolved against sys.path, like an import
PROTO_PATH = "catalog_service/rpc/protos/catalog.proto"

catalog_pb2, catalog_pb2_grpc = grpc.protos_and_services(PROTO_PATH)


def request_pb_type(method_name: str) -> type[Message]:
    """Protobuf request class of an RPC method, e.g. ``UpdateStockRequest``."""
    return getattr(catalog_pb2, f"{method_name}Request")


def response_pb_type(method_name: str) -> type[Message]:
    return getattr(catalog_pb2, f"{method_name}Response")


def decode_message(pb: Message, message_type: type[BaseModel]) -> BaseModel:
    """Convert a protobuf message into its pydantic counterpart.

    ``MessageToDict`` renders 64-bit integers as strings; pydantic turns
    them back into ints.

    Raises:
        pydantic.ValidationError: If the document does not fit the model.
    """
    document = json_format.MessageToDict(pb, preserving_proto_field_name=True)
    return message_type.model_validate(document)


def _timestamp_json(value: datetime) -> str:
    # Naive datetimes come from SQLite and are UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    timestamp = Timestamp()
    timestamp.FromDatetime(value)
    return timestamp.ToJsonString()


def _json_document(value: Any) -> Any:
    if isinstance(value, datetime):
        return _timestamp_json(value)
    if isinstance(value, dict):
        return {key: _json_document(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_json_document(item) for item in value]
    return value


def encode_message(message: BaseModel, pb_type: type[Message]) -> Message:
    """Convert a pydantic message into the protobuf message ``pb_type``.

    ``None`` fields are left unset, which keeps ``optional`` fields and
    the ``attributes`` struct absent on the wire.
    """
    document = _json_document(message.model_dump(exclude_none=True))
    return json_format.ParseDict(document, pb_type())
