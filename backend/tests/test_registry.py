"""
Evernote REST — Method Locator & Registry Tests
=================================================

What:  Tests for finding operations on the concrete class behind a target.

What we test:
    ✅ unwrap() recovers the concrete instance through get_store_client()
    ✅ Descriptor parameter count equals the declared parameter count
    ✅ Unknown and private names raise MethodNotFoundError with the class name
    ✅ Static/class methods and keyword-only parameters are supported
    ✅ Variadic operations are remembered as unresolved, not dropped
"""

from typing import Any, List

import pytest

from evernote_rest.dispatch import OperationRegistry
from evernote_rest.dispatch.locator import (
    declared_parameters,
    describe_operation,
    find_operation,
    operation_names,
    unwrap,
)
from evernote_rest.dispatch.types import OrderedSequenceOf, Scalar
from evernote_rest.exceptions import MethodNotFoundError, ParameterNameResolutionError


class UserStoreClient:
    def getUser(self) -> dict:
        return {"username": "demo"}

    def getPublicUserInfo(self, username: str) -> dict:
        return {"username": username}

    @staticmethod
    def version(major: int, minor: int) -> str:
        return f"{major}.{minor}"

    @classmethod
    def describe(cls, verbose: bool) -> str:
        return cls.__name__ if verbose else ""

    def listNotebooks(self, *, shared: bool, limit: int = 10) -> List[str]:
        return ["shared" if shared else "own"] * limit

    def bulkTag(self, *guids: str) -> int:
        return len(guids)

    def forwardRef(self, guid: "Unknown") -> str:  # noqa: F821
        return guid

    def _refresh(self) -> None:
        pass

    timeout = 30


class TestUnwrap:

    def test_handle_is_unwrapped(self, store_operations, note_store_client):
        assert unwrap(store_operations) is note_store_client

    def test_concrete_instance_is_returned_as_is(self, note_store_client):
        assert unwrap(note_store_client) is note_store_client


class TestLocator:

    def test_parameter_count_matches_declaration(self, note_store_client):
        assert describe_operation(UserStoreClient, "getUser").parameter_names == []
        assert describe_operation(UserStoreClient, "getPublicUserInfo").parameter_names == ["username"]
        assert describe_operation(type(note_store_client), "findNotes").parameter_names == [
            "filter", "offset", "maxNotes",
        ]

    def test_static_and_class_methods_have_no_receiver(self):
        assert describe_operation(UserStoreClient, "version").parameter_names == ["major", "minor"]
        assert describe_operation(UserStoreClient, "describe").parameter_names == ["verbose"]

    def test_keyword_only_parameters_are_passed_by_name(self):
        descriptor = describe_operation(UserStoreClient, "listNotebooks")
        assert descriptor.parameter_names == ["shared", "limit"]
        assert descriptor.invoke(UserStoreClient(), [True, 2]) == ["shared", "shared"]

    def test_declared_types_become_tags(self, note_store_client):
        descriptor = describe_operation(type(note_store_client), "search")
        assert [p.tag for p in descriptor.parameters] == [OrderedSequenceOf(str)]

    def test_unresolvable_annotation_binds_raw_json(self):
        descriptor = describe_operation(UserStoreClient, "forwardRef")
        assert [p.tag for p in descriptor.parameters] == [Scalar(Any)]
        assert descriptor.parameters[0].name == "guid"

    def test_variadic_parameters_cannot_be_named(self):
        with pytest.raises(ParameterNameResolutionError, match=r"method=\[bulkTag\]"):
            declared_parameters(UserStoreClient, "bulkTag")

    def test_only_public_callables_are_operations(self):
        assert find_operation(UserStoreClient, "_refresh") is None
        assert find_operation(UserStoreClient, "timeout") is None
        assert find_operation(UserStoreClient, "missing") is None
        assert find_operation(UserStoreClient, "getUser") is not None

        names = operation_names(UserStoreClient)
        assert "getUser" in names
        assert "version" in names
        assert "_refresh" not in names


class TestOperationRegistry:

    def test_locate_returns_concrete_instance(self, store_operations, note_store_client):
        instance, descriptor = OperationRegistry().locate(store_operations, "getNote")
        assert instance is note_store_client
        assert descriptor.parameter_names == ["guid", "withContent"]
        assert descriptor.owner == "NoteStoreClient"

    def test_unknown_method_names_concrete_class(self, store_operations):
        with pytest.raises(MethodNotFoundError) as exc_info:
            OperationRegistry().locate(store_operations, "doesNotExist")
        assert exc_info.value.message == "Cannot find methodName=[doesNotExist] on [NoteStoreClient]."
        assert exc_info.value.status_code == 404

    def test_handle_methods_are_not_operations(self, store_operations):
        """The handle's own get_store_client() is not reachable as an operation."""
        with pytest.raises(MethodNotFoundError):
            OperationRegistry().locate(store_operations, "get_store_client")

    def test_names_are_case_sensitive(self, store_operations):
        with pytest.raises(MethodNotFoundError):
            OperationRegistry().locate(store_operations, "getnote")

    def test_private_names_are_not_found(self):
        with pytest.raises(MethodNotFoundError):
            OperationRegistry().locate(UserStoreClient(), "_refresh")

    def test_variadic_operation_is_unresolved(self):
        registry = OperationRegistry()
        operations = registry.register(UserStoreClient)

        assert "bulkTag" in operations.unresolved
        assert "bulkTag" not in operations.descriptors
        with pytest.raises(ParameterNameResolutionError):
            registry.lookup(UserStoreClient, "bulkTag")

    def test_register_is_cached_per_class(self):
        registry = OperationRegistry()
        assert registry.register(UserStoreClient) is registry.register(UserStoreClient)

    def test_stats_count_dispatchable_operations(self, store_operations):
        registry = OperationRegistry()
        registry.register(UserStoreClient)
        registry.locate(store_operations, "echo")

        stats = registry.stats()
        # bulkTag is unresolved; _refresh and timeout are not operations
        assert stats["UserStoreClient"] == 6
        assert stats["NoteStoreClient"] == 8
