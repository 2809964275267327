from incident_intake.config import Settings


def _settings(**values) -> Settings:
    return Settings(_env_file=None, **values)


def test_missing_database_settings_lists_env_names_in_order():
    s = _settings(DB_SERVER="db.internal", DB_USER="  ")
    assert s.missing_database_settings() == ["DB_NAME", "DB_USER", "DB_PASSWORD"]


def test_complete_settings_have_nothing_missing():
    s = _settings(DB_SERVER="db.internal", DB_NAME="itsm", DB_USER="intake", DB_PASSWORD="pw")
    assert s.missing_database_settings() == []


def test_pool_aliases_and_defaults():
    s = _settings(DB_MAX_CONNECTIONS="10", DB_MIN_CONNECTIONS="20", DB_IDLE_TIMEOUT="500")
    assert s.db_pool_max == 10
    assert s.pool_min_connections == 10
    assert s.pool_recycle_seconds == 1

    defaults = _settings()
    assert defaults.db_pool_max == 5
    assert defaults.pool_min_connections == 0
    assert defaults.pool_recycle_seconds == 30


def test_postgres_url_requires_tls_by_default():
    s = _settings(DB_SERVER="db.internal", DB_NAME="itsm", DB_USER="intake", DB_PASSWORD="p@ss")
    url = s.database_url()

    assert url.drivername == "postgresql+asyncpg"
    assert url.port == 5432
    assert url.password == "p@ss"
    assert url.query == {"ssl": "verify-full"}

    relaxed = _settings(DB_TRUST_SERVER_CERTIFICATE="true").database_url()
    assert relaxed.query == {"ssl": "require"}
    assert _settings(DB_ENCRYPT="false").database_url().query == {"ssl": "disable"}


def test_mssql_url_carries_odbc_options():
    s = _settings(DB_DRIVER="mssql+aioodbc", DB_PORT="1433", DB_SERVER="sql.example.net", DB_NAME="itsm")
    url = s.database_url()

    assert s.is_mssql
    assert url.query["driver"] == "ODBC Driver 18 for SQL Server"
    assert url.query["Encrypt"] == "yes"
    assert url.query["TrustServerCertificate"] == "no"
