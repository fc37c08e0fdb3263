"""
Group query vector computation (mean of member answer embeddings).

Embeds every member answer concurrently, waits for all of them, then averages.
A single failed embedding fails the whole request: a missing member would
silently bias the group average.
"""

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, List, Sequence, Union

from ...errors import EmbeddingFailed
from ...models.config import RecommendationConfig, DEFAULT_CONFIG
from ...models.scoring import MemberAnswer
from ...utils.similarity import average_vectors

logger = logging.getLogger(__name__)

EmbedFn = Callable[[str], Union[List[float], Awaitable[List[float]]]]


async def _call_embed(embed: EmbedFn, text: str) -> List[float]:
    # partials and objects with an async __call__ only reveal an awaitable once called
    if inspect.iscoroutinefunction(embed):
        result = embed(text)
    else:
        result = await asyncio.to_thread(embed, text)
    if inspect.isawaitable(result):
        result = await result
    return result


async def _embed_one(embed: EmbedFn, text: str, timeout: float) -> List[float]:
    """Run one embedding call (sync callables go to a worker thread) under a timeout."""
    return await asyncio.wait_for(_call_embed(embed, text), timeout)


async def embed_member_answers(
    answers: Sequence[MemberAnswer],
    embed: EmbedFn,
    config: RecommendationConfig = DEFAULT_CONFIG,
) -> List[List[float]]:
    """
    Embed each member's description concurrently.

    Returns vectors in answer order. Raises EmbeddingFailed on the first
    failure or timeout and cancels the calls still in flight.
    """
    tasks = [
        asyncio.ensure_future(_embed_one(embed, a.description, config.embed_timeout_seconds))
        for a in answers
    ]
    try:
        vectors = await asyncio.gather(*tasks)
    except asyncio.TimeoutError as e:
        _cancel_pending(tasks)
        raise EmbeddingFailed(
            f"Embedding timed out after {config.embed_timeout_seconds}s"
        ) from e
    except Exception as e:
        _cancel_pending(tasks)
        raise EmbeddingFailed(f"Failed to embed member answer: {e}") from e

    for answer, vector in zip(answers, vectors):
        if not vector:
            raise EmbeddingFailed(f"Empty embedding returned for person {answer.person}")
    return [list(v) for v in vectors]


def _cancel_pending(tasks: List["asyncio.Future"]) -> None:
    for task in tasks:
        if not task.done():
            task.cancel()


async def get_group_vector(
    answers: Sequence[MemberAnswer],
    embed: EmbedFn,
    config: RecommendationConfig = DEFAULT_CONFIG,
) -> List[float]:
    """Embed all answers, then average them into one query vector."""
    vectors = await embed_member_answers(answers, embed, config)
    logger.debug("[recommend] embedded %d member answers (dims=%d)", len(vectors), len(vectors[0]))
    return average_vectors(vectors)
