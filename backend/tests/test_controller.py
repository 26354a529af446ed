"""
Menagerie Backend: Resource Controller Unit Tests
==================================================

What:  Tests for ResourceController's input parsing and outcome translation.
Why:   The status table is the API contract; every cell of it is exercised
       here without a database or an HTTP stack.
How:   `mock_gateway` (conftest.py) stands in for the storage gateway.

What we test:
    ✅ Success statuses: 201 / 200 / 200 / 200 / 204
    ✅ Absent rows → 404, malformed input → 400 (gateway never called)
    ✅ Conflict → 409, other storage failures → 500 with a generic body
    ✅ Unexpected exceptions → 500 without leaking their text
    ✅ dispatch() routes verb + identifier to the right operation
"""

import uuid

import pytest

from menagerie.controllers.resource import (
    GENERIC_SERVER_ERROR,
    ControllerResponse,
    ResourceController,
)
from menagerie.exceptions import (
    ConflictError,
    StorageInternalError,
    StorageUnavailableError,
)
from menagerie.schemas.animal import AnimalCreate

REX = b'{"name": "Rex", "weight": 500, "diet": "carnivorous"}'


@pytest.fixture
def controller(mock_gateway):
    return ResourceController(mock_gateway, AnimalCreate, resource_name="animal")


class TestSuccess:

    @pytest.mark.asyncio
    async def test_create(self, controller, mock_gateway, sample_animal):
        mock_gateway.create.return_value = sample_animal

        result = await controller.create(REX)

        assert result.status_code == 201
        assert result.body == sample_animal.model_dump(mode="json")
        payload = mock_gateway.create.await_args.args[0]
        assert payload == AnimalCreate(name="Rex", weight=500, diet="carnivorous")

    @pytest.mark.asyncio
    async def test_list(self, controller, mock_gateway, sample_animal):
        mock_gateway.list.return_value = [sample_animal]

        result = await controller.list()

        assert result == ControllerResponse(200, [sample_animal.model_dump(mode="json")])

    @pytest.mark.asyncio
    async def test_list_empty(self, controller):
        assert await controller.list() == ControllerResponse(200, [])

    @pytest.mark.asyncio
    async def test_get(self, controller, mock_gateway, sample_animal):
        mock_gateway.get.return_value = sample_animal

        result = await controller.get(str(sample_animal.id))

        assert result.status_code == 200
        mock_gateway.get.assert_awaited_once_with(sample_animal.id)

    @pytest.mark.asyncio
    async def test_update_uses_path_identifier(self, controller, mock_gateway, sample_animal):
        mock_gateway.update.return_value = sample_animal
        other_id = uuid.uuid4()
        body = (
            b'{"id": "%s", "name": "Rex", "weight": 500, "diet": "carnivorous"}'
            % str(other_id).encode()
        )

        result = await controller.update(str(sample_animal.id), body)

        assert result.status_code == 200
        resource_id, payload = mock_gateway.update.await_args.args
        assert resource_id == sample_animal.id
        assert "id" not in payload.model_dump()

    @pytest.mark.asyncio
    async def test_delete(self, controller, mock_gateway):
        mock_gateway.delete.return_value = True

        result = await controller.delete(str(uuid.uuid4()))

        assert result == ControllerResponse(204)
        assert result.body is None


class TestClientErrors:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", ["get", "delete"])
    async def test_absent_is_404(self, controller, operation):
        animal_id = uuid.uuid4()

        result = await getattr(controller, operation)(str(animal_id))

        assert result.status_code == 404
        assert result.body["error"] == "not_found"
        assert str(animal_id) in result.body["message"]

    @pytest.mark.asyncio
    async def test_update_absent_is_404(self, controller):
        result = await controller.update(str(uuid.uuid4()), REX)
        assert result.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw_id", ["abc", "123", "", "00000000-0000-0000-0000"])
    async def test_malformed_identifier_is_400(self, controller, mock_gateway, raw_id):
        result = await controller.get(raw_id)

        assert result.status_code == 400
        assert result.body["error"] == "bad_request"
        mock_gateway.get.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [b"", b"not json", b'{"name": "Rex"}', b'{"name": "Rex", "weight": "heavy", "diet": "x"}'],
    )
    async def test_malformed_body_is_400(self, controller, mock_gateway, body):
        result = await controller.create(body)

        assert result.status_code == 400
        assert result.body["message"] == "Invalid request body"
        assert result.body["details"]
        mock_gateway.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_field_named_in_details(self, controller):
        result = await controller.create(b'{"name": "Rex", "weight": 1}')

        fields = [d["field"] for d in result.body["details"]]
        assert fields == ["diet"]

    @pytest.mark.asyncio
    async def test_update_checks_identifier_before_body(self, controller, mock_gateway):
        result = await controller.update("nope", b"also nope")

        assert result.status_code == 400
        assert "identifier" in result.body["message"]
        mock_gateway.update.assert_not_awaited()


class TestStorageFailures:

    @pytest.mark.asyncio
    async def test_conflict_is_409(self, controller, mock_gateway):
        mock_gateway.create.side_effect = ConflictError(context={"detail": "animals_pkey"})

        result = await controller.create(REX)

        assert result.status_code == 409
        assert result.body["error"] == "conflict"
        assert "animals_pkey" not in result.body["message"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error_cls", [StorageUnavailableError, StorageInternalError])
    async def test_storage_failure_is_generic_500(self, controller, mock_gateway, error_cls):
        mock_gateway.list.side_effect = error_cls(
            context={"detail": 'FATAL: password authentication failed for user "postgres"'}
        )

        result = await controller.list()

        assert result.status_code == 500
        assert result.body == {"error": "server_error", "message": GENERIC_SERVER_ERROR}

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_generic_500(self, controller, mock_gateway):
        mock_gateway.get.side_effect = RuntimeError("secret internals")

        result = await controller.get(str(uuid.uuid4()))

        assert result.status_code == 500
        assert "secret" not in result.body["message"]


class TestDispatch:

    @pytest.mark.asyncio
    async def test_routes_each_verb(self, controller, mock_gateway, sample_animal):
        mock_gateway.create.return_value = sample_animal
        mock_gateway.get.return_value = sample_animal
        mock_gateway.update.return_value = sample_animal
        mock_gateway.delete.return_value = True
        raw_id = str(sample_animal.id)

        assert (await controller.dispatch("POST", None, REX)).status_code == 201
        assert (await controller.dispatch("GET")).status_code == 200
        assert (await controller.dispatch("get", raw_id)).status_code == 200
        assert (await controller.dispatch("PUT", raw_id, REX)).status_code == 200
        assert (await controller.dispatch("DELETE", raw_id)).status_code == 204

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method, raw_id", [("DELETE", None), ("POST", "x"), ("PATCH", "x")])
    async def test_unbound_combination_raises(self, controller, method, raw_id):
        with pytest.raises(ValueError):
            await controller.dispatch(method, raw_id)
