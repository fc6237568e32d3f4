"""Inventory question answering.

Flow:
1. Offer the catalog (id + name) to the model and ask which id the question is about
2. Stop with a fixed message when the model answers "0"
3. Sum the stock lots of the matched supply
4. Ask the model to phrase the stock summary as an answer
"""

import json
import logging
import re
from typing import List, Dict, Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from medbay.core import schemas
from medbay.core.repository import InventoryRepository, SupplyRepository
from medbay.ai_feature import prompts

logger = logging.getLogger(__name__)

CANDIDATE_LIMIT = 100
NOT_FOUND_MESSAGE = "Please Try Again. No Medication Found."
SUPPLIES_ERROR_MESSAGE = "Error fetching supplies data. Try Again."
SUMMARY_COLUMNS = [
    "type",
    "name",
    "strength_or_volume",
    "route_of_use",
    "quantity_in_pack",
    "possible_side_effects",
    "location",
]


def parse_supply_id(text: str) -> int:
    """First integer in the model's reply, 0 when there is none."""
    match = re.search(r"\d+", text)
    return int(match.group()) if match else 0


def render_candidates(candidates: List[Dict[str, Any]]) -> str:
    return "\n".join(f"{row['id']}: {row['name']}" for row in candidates)


class InventoryAssistant:
    """Answers stock questions. `llm` only needs an async `complete(prompt) -> str`."""

    def __init__(self, db: AsyncSession, llm):
        self.supplies = SupplyRepository(db)
        self.inventory = InventoryRepository(db)
        self.llm = llm

    async def resolve_supply_id(
        self, question: str, candidates: List[Dict[str, Any]]
    ) -> int:
        prompt = prompts.render(
            prompts.RESOLVE_SUPPLY_PROMPT, question, render_candidates(candidates)
        )
        reply = await self.llm.complete(prompt)
        supply_id = parse_supply_id(reply)
        logger.info(f"Resolved question to supply {supply_id} (model said {reply.strip()!r})")
        return supply_id

    async def build_stock_summary(self, supply_id: int) -> Optional[schemas.StockSummary]:
        supply_rows = await self.supplies.read_by_filter("id", [supply_id], SUMMARY_COLUMNS)
        if not supply_rows:
            return None

        lots = await self.inventory.read_by_filter("supply_id", [supply_id], ["quantity"])
        supply = supply_rows[0]

        return schemas.StockSummary(
            quantity=sum(lot["quantity"] or 0 for lot in lots),
            length=len(lots),
            **supply,
        )

    async def answer(self, question: str) -> str:
        catalog = await self.supplies.read_categorized(
            schemas.FetchOptions(items_per_page=CANDIDATE_LIMIT, page=1),
            ["id", "name"],
        )
        if catalog.error:
            logger.error(f"Error fetching supplies: {catalog.error}")
            return SUPPLIES_ERROR_MESSAGE

        supply_id = await self.resolve_supply_id(question, catalog.current.data)
        if supply_id == 0:
            return NOT_FOUND_MESSAGE

        summary = await self.build_stock_summary(supply_id)
        if summary is None:
            logger.warning(f"Model picked supply {supply_id} which is not in the catalog")
            return NOT_FOUND_MESSAGE

        prompt = prompts.render(
            prompts.SUMMARIZE_STOCK_PROMPT,
            question,
            json.dumps(summary.model_dump()),
        )
        return await self.llm.complete(prompt)
