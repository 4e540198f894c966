import asyncio, json
from openai import OpenAI
from ..settings import settings

client = (
    OpenAI(api_key=settings.OPENAI_API_KEY, base_url=settings.OPENAI_BASE_URL)
    if not settings.MOCK_MODE else None
)

MOCK_CARDS = [
    {"question": "What is latency?", "answer": "The delay before a data transfer begins."},
    {"question": "What does TCP guarantee?", "answer": "Reliable, ordered delivery of a byte stream."},
    {"question": "Which layer handles routing on the Internet?", "answer": "The network layer (IP)."},
    {"question": "What is bandwidth?", "answer": "The maximum rate of data transfer across a path."},
    {"question": "What does DNS do?", "answer": "Translates domain names into IP addresses."},
]

def _llm_sync(messages, *, max_tokens=2000, temperature=0.3):
    if settings.MOCK_MODE:
        return json.dumps(MOCK_CARDS)
    resp = client.chat.completions.create(
        model=settings.OPENAI_MODEL,
        messages=messages,
        max_tokens=max_tokens,
        temperature=temperature,
    )
    return resp.choices[0].message.content

async def llm(messages, **kw):
    return await asyncio.to_thread(_llm_sync, messages, **kw)
