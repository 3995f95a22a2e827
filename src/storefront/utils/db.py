"""Schema management for relational providers.

The default configuration stores everything in the memory provider, which
needs no schema. These helpers only act when an environment overlay points a
database at sqlite or postgresql (``PROTEAN_ENV=sqlite``).
"""

import structlog
from protean.domain import Domain
from sqlalchemy import create_engine

logger = structlog.get_logger(__name__)

_RELATIONAL_PROVIDERS = ("sqlite", "postgresql")


def relational_providers(domain: Domain):
    return [
        provider
        for _, provider in domain.providers.items()
        if provider.conn_info["provider"] in _RELATIONAL_PROVIDERS
    ]


def _register_models(domain: Domain, provider):
    records = [*domain.registry.aggregates.values(), *domain.registry.entities.values()]
    for record in records:
        if record.cls.meta_.provider == provider.name:
            # Building the DAO registers the model's table on the provider metadata
            domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> list[str]:
    """Create the tables of every relational provider. Returns the provider names touched."""
    touched = []
    with domain.domain_context():
        for provider in relational_providers(domain):
            _register_models(domain, provider)
            provider._metadata.create_all(create_engine(provider.conn_info["database_uri"]))
            logger.info("Schema created", provider=provider.name)
            touched.append(provider.name)
    return touched


def drop_db(domain: Domain) -> list[str]:
    """Drop the tables created by ``setup_db``."""
    touched = []
    with domain.domain_context():
        for provider in relational_providers(domain):
            provider._metadata.drop_all(create_engine(provider.conn_info["database_uri"]))
            logger.info("Schema dropped", provider=provider.name)
            touched.append(provider.name)
    return touched
