"""
Run FAQ Chatbot server - Direct launch script
"""
import sys

import uvicorn

from config.settings import Settings
from faq_bot.api import create_app
from faq_bot.logging_config import setup_logging

settings = Settings.from_env()
setup_logging(settings.log_level)

print("=" * 60)
print("  FAQ Chatbot - Starting...")
print("=" * 60)

uses_openai = "openai" in (settings.llm.provider, settings.embedding.provider)
if uses_openai and not settings.llm.openai_api_key:
    print("OPENAI_API_KEY not set in .env!")
    sys.exit(1)

print(f"""
FAQ source:  {settings.source.url}
LLM:         {settings.llm.provider}
Embeddings:  {settings.embedding.provider}

POST /chat   {{"chatHistory": [...], "input": "..."}}
GET  /health

Press Ctrl+C to stop the server.
""")

app = create_app(settings)
uvicorn.run(app, host=settings.server.host, port=settings.server.port, log_level=settings.log_level.lower())
