import pytest


@pytest.fixture
def anyio_backend():
    # asyncio only, trio is not installed
    return "asyncio"
