"""
Pytest configuration and fixtures for the FAQ display service.

This module provides:
- Test settings with isolated test environment
- A content database seeded with pages, categories, FAQs and relations
- Repository and processor fixtures over that database
- A FastAPI test client wired to the seeded processor
"""

import shutil
import tempfile
from typing import Any, Dict, Generator

import pytest
from fastapi.testclient import TestClient

from faq_display.core.config import Settings
from faq_display.db.database import ContentDatabase
from faq_display.services.faq.faq_content_repository import FAQContentRepository
from faq_display.services.faq.faq_processor import FAQProcessor

FAQ_TABLE = "tx_faq_item"

# Category uids of the seeded database
ALPHA, BETA, GAMMA, HIDDEN_CATEGORY = 10, 11, 12, 13


def insert_row(database: ContentDatabase, table: str, **values: Any) -> None:
    """Insert one row into ``table`` (test helper, table names are trusted)."""
    columns = ", ".join(values)
    placeholders = ", ".join("?" for _ in values)
    with database.get_connection() as conn:
        conn.execute(
            f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
            list(values.values()),
        )
        conn.commit()


def relate(
    database: ContentDatabase,
    faq_uid: int,
    category_uid: int,
    table: str = FAQ_TABLE,
    field: str = "categories",
    sorting_foreign: int = 0,
) -> None:
    insert_row(
        database,
        "sys_category_record_mm",
        uid_local=category_uid,
        uid_foreign=faq_uid,
        tablenames=table,
        fieldname=field,
        sorting_foreign=sorting_foreign,
    )


@pytest.fixture(scope="session")
def test_data_dir() -> Generator[str, None, None]:
    """Create a temporary directory for test data.

    Yields:
        str: Path to the temporary test data directory
    """
    temp_dir = tempfile.mkdtemp(prefix="faq_display_test_")
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(scope="session")
def test_settings(test_data_dir: str) -> Settings:
    """Create test settings with isolated test environment.

    The processor configuration reads storage pids and recursion depth from
    the content element row, like a stored FAQ content element would.
    """
    return Settings(
        DEBUG=True,
        DATA_DIR=test_data_dir,
        ENVIRONMENT="testing",
        FAQ_PROCESSOR_CONFIGURATION={
            "pidInList.field": "pages",
            "recursive.field": "faq_recursive",
        },
    )


@pytest.fixture
def content_db(tmp_path) -> ContentDatabase:
    """Create an empty content database with the full schema."""
    database = ContentDatabase()
    database.initialize(str(tmp_path / "content.db"))
    return database


@pytest.fixture
def seeded_db(content_db: ContentDatabase) -> ContentDatabase:
    """Content database with a small page tree and categorized FAQs.

    Pages: 1 -> 3 -> 5, 2 -> 4, 1 -> 6 (hidden)
    Categories (sorting): Beta (1), Alpha (2), Gamma (3), Hidden (0, hidden)
    FAQs on page 1: 100 {Alpha, Beta}, 101 {Beta}, 102 {}, 103 {Alpha, Beta, Gamma},
    105 (hidden) {Alpha}, 106 {Hidden}. FAQ 104 {Gamma} lives on page 3.
    """
    for uid, pid, hidden in [(1, 0, 0), (2, 0, 0), (3, 1, 0), (4, 2, 0), (5, 3, 0), (6, 1, 1)]:
        insert_row(content_db, "pages", uid=uid, pid=pid, title=f"Page {uid}", hidden=hidden)

    for uid, title, sorting, hidden in [
        (ALPHA, "Alpha", 2, 0),
        (BETA, "Beta", 1, 0),
        (GAMMA, "Gamma", 3, 0),
        (HIDDEN_CATEGORY, "Hidden", 0, 1),
    ]:
        insert_row(
            content_db, "sys_category", uid=uid, title=title, sorting=sorting, hidden=hidden
        )

    faqs = [
        (100, 1, 1, 0, "What do Alpha and Beta share?"),
        (101, 1, 2, 0, "What is Beta?"),
        (102, 1, 3, 0, "Is this categorized?"),
        (103, 1, 4, 0, "Which categories exist?"),
        (104, 3, 7, 0, "What is Gamma on a subpage?"),
        (105, 1, 5, 1, "Hidden question?"),
        (106, 1, 6, 0, "Only in a hidden category?"),
    ]
    for uid, pid, sorting, hidden, question in faqs:
        insert_row(
            content_db,
            FAQ_TABLE,
            uid=uid,
            pid=pid,
            sorting=sorting,
            hidden=hidden,
            question=question,
            answer=f"Answer {uid}",
        )

    for faq_uid, category_uid in [
        (100, ALPHA),
        (100, BETA),
        (100, ALPHA),  # duplicate relation row
        (101, BETA),
        (103, GAMMA),
        (103, ALPHA),
        (103, BETA),
        (104, GAMMA),
        (105, ALPHA),
        (106, HIDDEN_CATEGORY),
    ]:
        relate(content_db, faq_uid, category_uid)

    # Same uids related through another table must be ignored
    relate(content_db, 101, GAMMA, table="tt_content")

    insert_row(
        content_db,
        "tt_content",
        uid=1,
        pid=1,
        CType="faq",
        pages="1",
        faq_group_by_category=1,
    )
    insert_row(content_db, "tt_content", uid=2, pid=1, CType="faq", pages="1", hidden=1)
    insert_row(
        content_db,
        "tt_content",
        uid=3,
        pid=1,
        CType="faq",
        pages="1",
        faq_recursive=2,
        faq_group_by_category=1,
        faq_filter_by_category=f"{BETA},{GAMMA}",
    )

    return content_db


@pytest.fixture
def repository(seeded_db: ContentDatabase) -> FAQContentRepository:
    return FAQContentRepository(seeded_db)


@pytest.fixture
def processor(repository: FAQContentRepository) -> FAQProcessor:
    return FAQProcessor(repository)


@pytest.fixture
def base_configuration() -> Dict[str, Any]:
    """Processor configuration reading pids from the content element."""
    return {"table": FAQ_TABLE, "pidInList.field": "pages"}


@pytest.fixture
def test_client(
    test_settings: Settings, seeded_db: ContentDatabase, processor: FAQProcessor
) -> Generator[TestClient, None, None]:
    """Create a FastAPI test client backed by the seeded database.

    The lifespan is not run; services are placed on app.state directly.
    """
    from faq_display.core.config import get_settings
    from faq_display.main import app

    app.dependency_overrides[get_settings] = lambda: test_settings
    app.state.database = seeded_db
    app.state.faq_processor = processor
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
    del app.state.faq_processor
    del app.state.database
