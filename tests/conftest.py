"""Pytest configuration and fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from recordgate.access.models import IdentityContext
from recordgate.database.introspection import SchemaSnapshot
from recordgate.entities.registry import EntityRegistry
from sample_models import (
    Article,
    ArticleTranslation,
    Base,
    City,
    Comment,
    Country,
    CountryTranslation,
    Person,
    Post,
    Tag,
)

OWNER_ID = 7
OTHER_USER_ID = 8


@pytest.fixture
def engine():
    """Create a temporary in-memory database with all sample tables."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session(engine):
    """Create a session bound to the in-memory database."""
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def schema(engine):
    return SchemaSnapshot.from_bind(engine)


@pytest.fixture
def registry(schema):
    registry = EntityRegistry(schema)
    registry.register(
        "countries",
        Country,
        translation_model=CountryTranslation,
        relations=("cities", "translations"),
    )
    registry.register("cities", City, owner_managed=False, relations=("country",))
    registry.register("posts", Post, relations=("comments",))
    registry.register("comments", Comment, owner_managed=False)
    registry.register("tags", Tag, owner_managed=False)
    registry.register("articles", Article, translation_model=ArticleTranslation)
    registry.register("people", Person)
    return registry


@pytest.fixture
def owner():
    return IdentityContext(acting_user_id=OWNER_ID)


@pytest.fixture
def stranger():
    return IdentityContext(acting_user_id=OTHER_USER_ID)


@pytest.fixture
def admin():
    return IdentityContext(acting_user_id=99, has_elevated_permission=True)


@pytest.fixture
def seeded(session):
    """Two countries owned by OWNER_ID, one by OTHER_USER_ID, with translations and cities."""
    session.add_all(
        [
            Country(id=1, code="DE", name="germany", population=83, user_id=OWNER_ID),
            Country(id=2, code="FR", name="france", population=None, user_id=OWNER_ID),
            Country(id=3, code="IT", name="italy", population=59, user_id=OTHER_USER_ID),
            CountryTranslation(id=10, country_id=1, language_id=1, name="Germany", title="Federal Republic"),
            CountryTranslation(id=11, country_id=1, language_id=2, name="Deutschland", title="Bundesrepublik"),
            CountryTranslation(id=12, country_id=2, language_id=1, name="France", title="French Republic"),
            CountryTranslation(id=13, country_id=3, language_id=1, name="Italy", title=None),
            City(id=100, country_id=1, name="Berlin", population=3645),
            City(id=101, country_id=1, name="Hamburg", population=1841),
            City(id=102, country_id=2, name="Paris", population=2161),
            Post(id=1, user_id=OWNER_ID, title="First", body="hello"),
            Post(id=2, user_id=OTHER_USER_ID, title="Second", body=None),
            Comment(id=1, post_id=1, body="nice"),
            Comment(id=2, post_id=1, body="agreed"),
            Tag(id=1, label="travel"),
        ]
    )
    session.commit()
    return session
