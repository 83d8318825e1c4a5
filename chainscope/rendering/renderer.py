"""
Descriptor Renderer
===================

Turns one service and its referenced messages into two text snippets.

Output is deterministic: methods and fields render in declaration order,
message types in first-seen order across the service's methods. Nothing
is ever re-sorted.

Example service text:

    service Query {
      rpc Balance (cosmos.bank.v1beta1.QueryBalanceRequest) returns (cosmos.bank.v1beta1.QueryBalanceResponse);
    }
"""

import logging
from dataclasses import dataclass, field
from typing import List

from ..errors import UnresolvableMessageType
from ..protocol import FileDescriptor, MessageDescriptor, OrderedSet, ServiceDescriptor


logger = logging.getLogger(__name__)


@dataclass
class RenderedService:
    """Both artifacts for one service, plus the types left out of the message text."""
    service: ServiceDescriptor
    service_text: str
    message_text: str
    skipped_types: List[str] = field(default_factory=list)


def _stream(flag: bool) -> str:
    return "stream " if flag else ""


def render_service(service: ServiceDescriptor) -> str:
    """`service <Name> { rpc ... }` with one line per method."""
    lines = [f"service {service.name} {{"]
    for name, method in service.methods.items():
        lines.append(
            f"  rpc {name} ({_stream(method.request_streaming)}{method.request_type})"
            f" returns ({_stream(method.response_streaming)}{method.response_type});"
        )
    lines.append("}")
    return "\n".join(lines) + "\n"


def referenced_types(service: ServiceDescriptor) -> OrderedSet[str]:
    """Request and response types of every method, deduplicated in first-seen order."""
    types: OrderedSet[str] = OrderedSet()
    for method in service.methods.values():
        types.add(method.request_type)
        types.add(method.response_type)
    return types


def render_message(message: MessageDescriptor) -> str:
    lines = [f"message {message.name} {{"]
    for f in message.fields:
        rule = "repeated " if f.repeated else ""
        lines.append(f"  {rule}{f.type} {f.name} = {f.id};")
    lines.append("}")
    return "\n".join(lines) + "\n\n"


def render(service: ServiceDescriptor, file: FileDescriptor, strict: bool = False) -> RenderedService:
    """
    Render a service and the messages it references.

    Args:
        service: The service to render
        file: Where referenced message types are looked up
        strict: Raise instead of skipping unresolvable types

    Raises:
        UnresolvableMessageType: strict mode only, for a type with no
            descriptor or no fields
    """
    skipped: List[str] = []
    blocks: List[str] = []

    for type_name in referenced_types(service):
        message = file.lookup_message(type_name)
        if message is None or not message.fields:
            if strict:
                raise UnresolvableMessageType(type_name, service.full_name)
            logger.debug("Skipping message type %s for %s", type_name, service.full_name)
            skipped.append(type_name)
            continue
        blocks.append(render_message(message))

    return RenderedService(
        service=service,
        service_text=render_service(service),
        message_text="".join(blocks),
        skipped_types=skipped,
    )


def render_messages(service: ServiceDescriptor, file: FileDescriptor, strict: bool = False) -> str:
    return render(service, file, strict=strict).message_text
