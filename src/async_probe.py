"""
Toy asynchronous probe.
Resolves to True after a single hop through the event loop.
"""
import asyncio
import logging

logger = logging.getLogger("async_probe")


async def test_result() -> bool:
    """Yield to the event loop once, then resolve to True."""
    await asyncio.sleep(0)
    return True


# Not a test, despite the name
test_result.__test__ = False


def report(future: asyncio.Future) -> None:
    """Continuation that logs the resolved probe value."""
    logger.info("Then: %s", future.result())


def launch() -> asyncio.Task:
    """Schedule the probe on the running loop with `report` attached.

    Returns:
        The task wrapping the probe coroutine
    """
    task = asyncio.ensure_future(test_result())
    task.add_done_callback(report)
    return task
