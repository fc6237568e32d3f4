import json

import pytest
import pytest_asyncio
from httpx import AsyncClient

from medbay.core import models
from medbay.core.exceptions import UpstreamModelError
from medbay.ai_feature.service import (
    NOT_FOUND_MESSAGE,
    InventoryAssistant,
    parse_supply_id,
)


ANSWER = (
    "There is 69 capsules over 2 packages with a cap of 60 capsules per "
    "package of Diphenhydramine (Benadryl) in stock."
)


@pytest_asyncio.fixture
async def benadryl_lots(db_session, catalog):
    supply_id = catalog[1].id
    db_session.add_all(
        [
            models.Inventory(supply_id=supply_id, quantity=9),
            models.Inventory(supply_id=supply_id, quantity=60),
        ]
    )
    await db_session.commit()
    return supply_id


def test_parse_supply_id():
    assert parse_supply_id("2") == 2
    assert parse_supply_id('"2"\n') == 2
    assert parse_supply_id("The id is 14.") == 14
    assert parse_supply_id("0") == 0
    assert parse_supply_id("no idea") == 0


@pytest.mark.asyncio
async def test_stock_summary_sums_the_lots(db_session, fake_llm, benadryl_lots):
    summary = await InventoryAssistant(db_session, fake_llm).build_stock_summary(
        benadryl_lots
    )
    assert summary.model_dump() == {
        "quantity": 69,
        "length": 2,
        "location": "Cabinet B",
        "type": "Capsule",
        "quantity_in_pack": 60,
        "name": "Diphenhydramine (Benadryl)",
        "strength_or_volume": "25mg",
        "route_of_use": "Oral",
        "possible_side_effects": "Drowsiness",
    }


@pytest.mark.asyncio
async def test_stock_summary_skips_deleted_lots(db_session, fake_llm, benadryl_lots):
    """A retired lot counts neither towards the quantity nor the lot count"""
    db_session.add(
        models.Inventory(supply_id=benadryl_lots, quantity=100, is_deleted=True)
    )
    await db_session.commit()

    summary = await InventoryAssistant(db_session, fake_llm).build_stock_summary(
        benadryl_lots
    )
    assert summary.quantity == 69
    assert summary.length == 2


@pytest.mark.asyncio
async def test_answer_end_to_end(db_session, fake_llm, benadryl_lots):
    llm = fake_llm
    llm.replies = [str(benadryl_lots), ANSWER]
    answer = await InventoryAssistant(db_session, llm).answer(
        "How much Benadril do we have in stock?"
    )

    assert answer == ANSWER
    assert len(llm.prompts) == 2

    # Candidates are offered as "<id>: <name>", deleted supplies are not offered
    assert f"{benadryl_lots}: Diphenhydramine (Benadryl)" in llm.prompts[0]
    assert "Aspirin" not in llm.prompts[0]
    assert "Input: How much Benadril do we have in stock?" in llm.prompts[0]

    context = llm.prompts[1].split("Context:\n", 1)[1].split("\n", 1)[0]
    summary = json.loads(context)
    assert summary["quantity"] == 69
    assert summary["length"] == 2
    assert summary["name"] == "Diphenhydramine (Benadryl)"


@pytest.mark.asyncio
async def test_unknown_medication_stops_after_first_call(db_session, fake_llm, catalog):
    llm = fake_llm
    llm.replies = ["0"]
    answer = await InventoryAssistant(db_session, llm).answer("Do we have any unobtainium?")

    assert answer == NOT_FOUND_MESSAGE
    assert len(llm.prompts) == 1


@pytest.mark.asyncio
async def test_id_outside_catalog_is_not_found(db_session, fake_llm, catalog):
    llm = fake_llm
    llm.replies = ["999"]
    answer = await InventoryAssistant(db_session, llm).answer("How much Zyrtec?")

    assert answer == NOT_FOUND_MESSAGE
    assert len(llm.prompts) == 1


@pytest.mark.asyncio
async def test_assistant_endpoint(client: AsyncClient, fake_llm, benadryl_lots):
    fake_llm.replies = [str(benadryl_lots), ANSWER]
    response = await client.post(
        "/assistant", json={"question": "How much Benadril do we have in stock?"}
    )

    assert response.status_code == 200
    assert response.json() == {"message": ANSWER}
    assert response.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
async def test_assistant_endpoint_not_found(client: AsyncClient, fake_llm, catalog):
    fake_llm.replies = ["0"]
    response = await client.post("/assistant", json={"question": "Any unobtainium?"})

    assert response.status_code == 200
    assert "No Medication Found" in response.json()["message"]
    assert len(fake_llm.prompts) == 1


@pytest.mark.asyncio
async def test_assistant_missing_question(client: AsyncClient):
    response = await client.post("/assistant", json={"query": "wrong field"})
    assert response.status_code == 400
    assert response.json() == {"message": "Missing 'question' in request body"}


@pytest.mark.asyncio
async def test_assistant_malformed_json(client: AsyncClient):
    response = await client.post(
        "/assistant",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 500
    assert response.json() == {"message": "Error: Invalid JSON in request body"}


@pytest.mark.asyncio
async def test_assistant_upstream_failure(client: AsyncClient, fake_llm, catalog):
    async def broken(prompt: str) -> str:
        raise UpstreamModelError("LLM request failed with status 503")

    fake_llm.complete = broken
    response = await client.post("/assistant", json={"question": "How much Advil?"})

    assert response.status_code == 500
    assert response.json() == {"message": "Error: LLM request failed with status 503"}


@pytest.mark.asyncio
async def test_assistant_preflight(client: AsyncClient):
    response = await client.options("/assistant")

    assert response.status_code == 204
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert "POST" in response.headers["access-control-allow-methods"]
    for header in ("authorization", "content-type", "x-client-info", "apikey"):
        assert header in response.headers["access-control-allow-headers"]
