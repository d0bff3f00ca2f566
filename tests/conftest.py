import pytest
from typing import Callable
import httpx
from dotenv import load_dotenv

from research_pipeline.retrieval.fetch import Fetcher
from research_pipeline.retrieval.retry import RetryPolicy

@pytest.fixture(scope="session", autouse=True)
def _load_env():
    # Load .env once per session to avoid side-effects on import time
    load_dotenv()

LONG_TEXT = "Research content about solar panel efficiency and grid storage. " * 10

@pytest.fixture
def long_text() -> str:
    return LONG_TEXT

@pytest.fixture
def sleep_recorder():
    """
    Async stand-in for asyncio.sleep that records requested delays instead of waiting.
    """
    delays = []

    async def fake_sleep(seconds):
        delays.append(float(seconds))

    fake_sleep.delays = delays
    return fake_sleep

@pytest.fixture
def make_fetcher(sleep_recorder) -> Callable[..., Fetcher]:
    """
    Builds a Fetcher around an httpx.MockTransport handler, with a 2-retry policy
    that records its backoff delays in `sleep_recorder.delays`.
    """
    def _make(handler, retries: int = 2, **kwargs) -> Fetcher:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        policy = RetryPolicy(retries=retries, base_delay=1.0, sleep=sleep_recorder)
        return Fetcher(client=client, retry_policy=policy, **kwargs)
    return _make
