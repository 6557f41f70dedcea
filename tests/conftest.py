import os
import tempfile

import pytest

_TEST_DIR = tempfile.mkdtemp(prefix="wedsnap-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.sqlite3"
os.environ["DATA_DIR"] = os.path.join(_TEST_DIR, "data")
os.environ["SECRET_KEY"] = "test-secret"


@pytest.fixture(autouse=True, scope="session")
def setup_test_db():
    import asyncio

    # Disable API key auth for tests
    from wedsnap.config import settings
    settings.api_key = ""

    from wedsnap.database import create_tables, run_migrations, async_session
    from wedsnap.seed import seed_data

    async def _setup():
        await create_tables()
        await run_migrations()
        async with async_session() as session:
            await seed_data(session)

    asyncio.run(_setup())


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    from wedsnap.main import app

    yield
    app.dependency_overrides.clear()
