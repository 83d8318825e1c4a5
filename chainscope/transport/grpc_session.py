"""
gRPC Reflection Session
=======================

ReflectionSession over the standard gRPC server-reflection service.

- grpcio opens the channel (TLS by default, plaintext on request)
- grpcio-reflection's descriptor database speaks the reflection protocol
- a protobuf DescriptorPool resolves symbols and their dependencies

Protobuf descriptors are converted into chainscope's own value types
at this boundary, so nothing past the transport sees protobuf objects.

The reflection client is blocking; calls run in a worker thread.
"""

import asyncio
import logging
from functools import partial
from typing import Dict, Iterable, List

import grpc
from google.protobuf import descriptor as pb_descriptor
from google.protobuf import descriptor_pb2, descriptor_pool
from grpc_reflection.v1alpha.proto_reflection_descriptor_database import (
    ProtoReflectionDescriptorDatabase,
)

from ..protocol import (
    FieldDescriptor,
    FileDescriptor,
    MessageDescriptor,
    MethodDescriptor,
    ServiceDescriptor,
)
from .session import SessionFactory


logger = logging.getLogger(__name__)

_FD = pb_descriptor.FieldDescriptor

SCALAR_TYPE_NAMES: Dict[int, str] = {
    _FD.TYPE_DOUBLE: "double",
    _FD.TYPE_FLOAT: "float",
    _FD.TYPE_INT64: "int64",
    _FD.TYPE_UINT64: "uint64",
    _FD.TYPE_INT32: "int32",
    _FD.TYPE_FIXED64: "fixed64",
    _FD.TYPE_FIXED32: "fixed32",
    _FD.TYPE_BOOL: "bool",
    _FD.TYPE_STRING: "string",
    _FD.TYPE_BYTES: "bytes",
    _FD.TYPE_UINT32: "uint32",
    _FD.TYPE_SFIXED32: "sfixed32",
    _FD.TYPE_SFIXED64: "sfixed64",
    _FD.TYPE_SINT32: "sint32",
    _FD.TYPE_SINT64: "sint64",
}


# =============================================================================
# Descriptor conversion
# =============================================================================

def _is_map_entry(message: pb_descriptor.Descriptor) -> bool:
    return message.GetOptions().map_entry


def field_type_name(field: pb_descriptor.FieldDescriptor) -> str:
    """Textual type of a field: scalar keyword, full type name, or map<K, V>."""
    if field.message_type is not None:
        if _is_map_entry(field.message_type):
            entry = field.message_type.fields_by_name
            return f"map<{field_type_name(entry['key'])}, {field_type_name(entry['value'])}>"
        return field.message_type.full_name
    if field.enum_type is not None:
        return field.enum_type.full_name
    return SCALAR_TYPE_NAMES[field.type]


def descriptor_to_message(message: pb_descriptor.Descriptor) -> MessageDescriptor:
    """
    Convert a protobuf message descriptor.

    Labels are read from the message's proto form; the runtime descriptor
    does not expose them on every protobuf release.
    """
    proto = descriptor_pb2.DescriptorProto()
    message.CopyToProto(proto)
    repeated = {
        field.name: field.label == descriptor_pb2.FieldDescriptorProto.LABEL_REPEATED
        for field in proto.field
    }

    fields = []
    for field in message.fields:
        is_map = field.message_type is not None and _is_map_entry(field.message_type)
        fields.append(FieldDescriptor(
            name=field.name,
            type=field_type_name(field),
            id=field.number,
            repeated=repeated[field.name] and not is_map,
        ))
    return MessageDescriptor(
        name=message.name,
        full_name=message.full_name,
        fields=tuple(fields),
    )


def descriptor_to_service(service: pb_descriptor.ServiceDescriptor) -> ServiceDescriptor:
    """
    Convert a protobuf service descriptor.

    Streaming flags are read from the service's own proto form so they
    do not depend on which attributes the runtime's descriptor exposes.
    """
    proto = descriptor_pb2.ServiceDescriptorProto()
    service.CopyToProto(proto)
    methods = [
        MethodDescriptor(
            name=method.name,
            request_type=method.input_type.lstrip("."),
            response_type=method.output_type.lstrip("."),
            request_streaming=method.client_streaming,
            response_streaming=method.server_streaming,
        )
        for method in proto.method
    ]
    return ServiceDescriptor.from_methods(service.full_name, methods)


def _walk_messages(messages: Iterable[pb_descriptor.Descriptor]):
    for message in messages:
        if _is_map_entry(message):
            continue
        yield message
        yield from _walk_messages(message.nested_types)


def descriptor_to_file(file: pb_descriptor.FileDescriptor) -> FileDescriptor:
    """
    Convert a protobuf file descriptor.

    Messages declared in the file are included, plus every request and
    response type its services reference, even when declared elsewhere.
    """
    result = FileDescriptor(name=file.name)
    for message in _walk_messages(file.message_types_by_name.values()):
        result.messages[message.full_name] = descriptor_to_message(message)

    for service in file.services_by_name.values():
        result.services[service.full_name] = descriptor_to_service(service)
        for method in service.methods:
            for message in (method.input_type, method.output_type):
                if message.full_name not in result.messages:
                    result.messages[message.full_name] = descriptor_to_message(message)
    return result


# =============================================================================
# Session
# =============================================================================

class GrpcReflectionSession:
    """ReflectionSession bound to one gRPC endpoint."""

    def __init__(self, endpoint: str, plaintext: bool = False):
        self.endpoint = endpoint
        logger.debug("Creating reflection client for %s", endpoint)
        if plaintext:
            self._channel = grpc.insecure_channel(endpoint)
        else:
            self._channel = grpc.secure_channel(endpoint, grpc.ssl_channel_credentials())
        self._database = ProtoReflectionDescriptorDatabase(self._channel)
        self._pool = descriptor_pool.DescriptorPool(self._database)

    async def list_services(self) -> List[str]:
        return await asyncio.to_thread(lambda: list(self._database.get_services()))

    async def file_containing_symbol(self, symbol: str) -> FileDescriptor:
        return await asyncio.to_thread(self._resolve, symbol)

    def _resolve(self, symbol: str) -> FileDescriptor:
        return descriptor_to_file(self._pool.FindFileContainingSymbol(symbol))

    def close(self) -> None:
        self._channel.close()


def grpc_session_factory(plaintext: bool = False) -> SessionFactory:
    """SessionFactory producing a fresh GrpcReflectionSession per call."""
    return partial(GrpcReflectionSession, plaintext=plaintext)
