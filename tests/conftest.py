"""
Shared fixtures: sample descriptors, scripted servers, a recording sleep.
"""

from typing import List

import pytest

from chainscope.protocol import (
    FieldDescriptor,
    MessageDescriptor,
    MethodDescriptor,
    ServiceDescriptor,
)
from chainscope.transport import InMemoryReflectionServer, InMemoryTransport


BANK_PKG = "cosmos.bank.v1beta1"
AUTH_PKG = "cosmos.auth.v1beta1"


def make_bank_service() -> ServiceDescriptor:
    return ServiceDescriptor.from_methods(f"{BANK_PKG}.Query", [
        MethodDescriptor(
            name="Balance",
            request_type=f"{BANK_PKG}.QueryBalanceRequest",
            response_type=f"{BANK_PKG}.QueryBalanceResponse",
        ),
        MethodDescriptor(
            name="Watch",
            request_type=f"{BANK_PKG}.WatchRequest",
            response_type=f"{BANK_PKG}.WatchResponse",
            request_streaming=True,
            response_streaming=True,
        ),
    ])


def make_auth_service() -> ServiceDescriptor:
    return ServiceDescriptor.from_methods(f"{AUTH_PKG}.Query", [
        MethodDescriptor("Account", f"{AUTH_PKG}.QueryAccountRequest", f"{AUTH_PKG}.QueryAccountResponse"),
        MethodDescriptor("Params", f"{AUTH_PKG}.QueryParamsRequest", f"{AUTH_PKG}.QueryParamsResponse"),
        MethodDescriptor("Accounts", f"{AUTH_PKG}.QueryAccountRequest", f"{AUTH_PKG}.QueryAccountResponse"),
    ])


def make_messages() -> List[MessageDescriptor]:
    return [
        MessageDescriptor("QueryBalanceRequest", f"{BANK_PKG}.QueryBalanceRequest", (
            FieldDescriptor("address", "string", 1),
            FieldDescriptor("denom", "string", 2),
        )),
        MessageDescriptor("QueryBalanceResponse", f"{BANK_PKG}.QueryBalanceResponse", (
            FieldDescriptor("balance", "cosmos.base.v1beta1.Coin", 1),
        )),
        MessageDescriptor("WatchRequest", f"{BANK_PKG}.WatchRequest", (
            FieldDescriptor("address", "string", 1),
        )),
        MessageDescriptor("WatchResponse", f"{BANK_PKG}.WatchResponse", (
            FieldDescriptor("balances", "cosmos.base.v1beta1.Coin", 1, repeated=True),
        )),
        MessageDescriptor("QueryAccountRequest", f"{AUTH_PKG}.QueryAccountRequest", (
            FieldDescriptor("address", "string", 1),
        )),
        MessageDescriptor("QueryAccountResponse", f"{AUTH_PKG}.QueryAccountResponse", (
            FieldDescriptor("account", "google.protobuf.Any", 1),
        )),
        # No fields: omitted from message text
        MessageDescriptor("QueryParamsRequest", f"{AUTH_PKG}.QueryParamsRequest", ()),
    ]


def make_server(**failure_plan) -> InMemoryReflectionServer:
    return InMemoryReflectionServer(
        services=[make_bank_service(), make_auth_service()],
        messages=make_messages(),
        extra_services=("grpc.reflection.v1alpha.ServerReflection",),
        **failure_plan,
    )


class SleepRecorder:
    """Stand-in for asyncio.sleep that records durations instead of waiting."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def bank_service() -> ServiceDescriptor:
    return make_bank_service()


@pytest.fixture
def auth_service() -> ServiceDescriptor:
    return make_auth_service()


@pytest.fixture
def messages() -> List[MessageDescriptor]:
    return make_messages()


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def transport() -> InMemoryTransport:
    return InMemoryTransport()
