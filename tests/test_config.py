import textwrap

import pytest

from dbscript.config import ConfigError, Environment, load

CONFIG = """
default_env: dev
environments:
  dev:
    app:
      host: 127.0.0.1
      database: shop
      user: shop
      password: ${SHOP_DB_PASSWORD}
    admin:
      host: 127.0.0.1
      port: 3307
      user: root
      password: secret
    batch_size: 5
    use_batch: false
    sql_delimiter: "/"
    script_encoding: latin-1
    create_statements: |
      CREATE DATABASE shop;
    schema_dirs: [db/schema]
    data_dirs: db/data
  bare:
    app: {host: localhost, user: app}
    admin: {host: localhost, user: root}
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "dbscript.config.yml"
    path.write_text(textwrap.dedent(CONFIG))
    return path


def test_load_default_env(config_file, monkeypatch):
    monkeypatch.setenv("SHOP_DB_PASSWORD", "s3cret")
    env = load(config_file)

    assert env.name == "dev"
    assert env.app.password == "s3cret"
    assert env.app.dsn() == {
        "host": "127.0.0.1", "port": 3306, "user": "shop",
        "password": "s3cret", "database": "shop",
    }
    assert "database" not in env.admin.dsn()
    assert env.admin.port == 3307
    assert env.options.batch_size == 5
    assert env.options.use_batch is False
    assert env.options.delimiter == "/"
    assert env.options.encoding == "latin-1"
    assert env.create_statements.strip() == "CREATE DATABASE shop;"


def test_script_dirs_resolve_against_config_dir(config_file):
    env = load(config_file)
    assert env.schema_dirs == (config_file.parent / "db" / "schema",)
    assert env.data_dirs == (config_file.parent / "db" / "data",)
    assert env.update_dirs == ()


def test_defaults(config_file):
    env = load(config_file, "bare")
    assert env.options.batch_size == 20
    assert env.options.use_batch is True
    assert env.options.delimiter == ";"
    assert env.options.encoding is None
    assert env.options.strip_lines is False
    env.check()


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load(tmp_path / "nope.yml")


def test_unknown_env(config_file):
    with pytest.raises(ConfigError, match="'prod' not found"):
        load(config_file, "prod")


@pytest.mark.parametrize(
    "data, message",
    [
        ({"app": {"host": "h"}, "admin": {"host": "h", "user": "root"}}, r"\[application\] No username"),
        ({"app": {"host": "h", "user": "u"}, "admin": {"user": "root"}}, r"\[admin\] No host"),
        ({"app": {"host": "h", "user": "u"}}, r"\[admin\] No username"),
    ],
)
def test_check_connection_settings(data, message):
    with pytest.raises(ConfigError, match=message):
        Environment("x", data).check()


@pytest.mark.parametrize("size", [0, -1, "20", True, False])
def test_bad_batch_size(size):
    with pytest.raises(ConfigError, match="batch_size"):
        Environment("x", {"batch_size": size})


def test_empty_delimiter():
    with pytest.raises(ConfigError, match="sql_delimiter"):
        Environment("x", {"sql_delimiter": ""})
