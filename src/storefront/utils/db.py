from protean.domain import Domain
from sqlalchemy import create_engine

_SQL_PROVIDERS = ("sqlite", "postgresql")


def _register_tables(domain: Domain, provider) -> None:
    # Touching the DAO registers the model with the provider's SQLAlchemy metadata
    records = [
        *domain.registry.aggregates.values(),
        *domain.registry.entities.values(),
    ]
    for record in records:
        if record.cls.meta_.provider == provider.name:
            domain.repository_for(record.cls)._dao  # noqa: B018


def sql_providers(domain: Domain) -> list:
    return [provider for _, provider in domain.providers.items() if provider.conn_info["provider"] in _SQL_PROVIDERS]


def setup_db(domain: Domain) -> list[str]:
    """Create tables for every SQL-backed provider. Returns the provider names touched."""
    touched = []
    with domain.domain_context():
        for provider in sql_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            _register_tables(domain, provider)
            provider._metadata.create_all(engine)
            touched.append(provider.name)
    return touched


def drop_db(domain: Domain) -> list[str]:
    """Drop tables for every SQL-backed provider. Returns the provider names touched."""
    touched = []
    with domain.domain_context():
        for provider in sql_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            _register_tables(domain, provider)
            provider._metadata.drop_all(engine)
            touched.append(provider.name)
    return touched
