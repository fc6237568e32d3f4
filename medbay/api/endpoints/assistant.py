import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from medbay.api.deps import db_dep
from medbay.ai_feature.llm import GeminiClient, get_llm
from medbay.ai_feature.service import InventoryAssistant

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assistant", tags=["Assistant"])

llm_dep = Annotated[GeminiClient, Depends(get_llm)]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "apikey,authorization,content-type,x-client-info",
}


def reply(message: str, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse({"message": message}, status_code=status_code, headers=CORS_HEADERS)


# Browser preflight
@router.options("")
async def preflight():
    return Response(
        status_code=status.HTTP_204_NO_CONTENT,
        headers={
            **CORS_HEADERS,
            "Access-Control-Allow-Methods": "POST, OPTIONS",
            "Access-Control-Max-Age": "86400",
        },
    )


@router.post("")
async def ask(request: Request, db: db_dep, llm: llm_dep):
    """
    Answer a free-text stock question, e.g.
    {"question": "How much Benadril do we have in stock?"}
    """
    # Body is parsed by hand so malformed JSON and a missing field answer differently
    try:
        payload = await request.json()
    except ValueError:
        return reply(
            "Error: Invalid JSON in request body",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    question = payload.get("question") if isinstance(payload, dict) else None
    if not question or not isinstance(question, str):
        return reply("Missing 'question' in request body", status.HTTP_400_BAD_REQUEST)

    try:
        answer = await InventoryAssistant(db, llm).answer(question)
    except Exception as error:
        logger.error(f"Assistant failed to answer {question!r}: {error}")
        return reply(f"Error: {error}", status.HTTP_500_INTERNAL_SERVER_ERROR)

    return reply(answer)
