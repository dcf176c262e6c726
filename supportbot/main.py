# Entry point for the FastAPI app
from fastapi import FastAPI, Request
import logging

from . import security, support_agent
from .adapters.discord_adapter import parse_event, should_answer

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI()

default_message = {"status": "ok", "detail": "Support bot is running"}


@app.get("/")
def root():
    return default_message


@app.post("/discord/events")
async def discord_events(request: Request):
    """Handle a message-create event forwarded by the gateway relay.

    - Validates the shared secret header
    - Parses the payload and checks channel, content and OS role
    - Runs the support pipeline, which posts the reply itself
    """
    security.validate_webhook_auth(request)

    try:
        data = await request.json()
    except Exception:
        logger.error("[DISCORD] Could not parse request body as JSON")
        return {"status": "error", "detail": "Could not parse body as JSON"}

    event = parse_event(data)
    if event is None:
        return {"status": "ignored"}

    os_category = should_answer(event)
    if os_category is None:
        logger.info(f"[DISCORD] Ignoring message {event.message_id} from {event.author_name}")
        return {"status": "ignored"}

    try:
        message = await support_agent.answer_question(event, os_category)
    except Exception as e:
        logger.exception(f"[AGENT] Failed to answer message {event.message_id}: {e}")
        return {"status": "error", "detail": "No reply sent"}

    return {"status": "ok", "message_id": message.get("id")}
