# tests/core/config/test_loader.py
"""
Testes do loader de configuração (defaults + override local).

Os testes asseguram que:
- YAML e JSON são aceitos
- o arquivo local é opcional e tem prioridade
- formatos, conteúdo e raízes inválidos são rejeitados explicitamente
- overrides em memória vencem defaults e o arquivo local
"""

import json

import pytest

from build_bridge.core.config import (
    BridgeConfig,
    ConfigParseError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
    load_config,
)

DEFAULTS_YAML = """
source:
  repo_owner: aws-samples
  repo_name: beam-taxi-consumer
  shared_secret: s3cr3t
build:
  command: mvn clean package -B
publish:
  artifact_name_pattern: "beam-taxi-count-*.jar"
gate:
  timeout_seconds: 300
"""


def test_load_defaults_only(tmp_path):
    defaults = tmp_path / "bridge.defaults.yaml"
    defaults.write_text(DEFAULTS_YAML, encoding="utf-8")

    cfg = load_config(defaults_path=str(defaults))
    bc = BridgeConfig.from_dict(cfg)

    assert bc.branch == "master"
    assert bc.gate_timeout == 300.0
    assert bc.publish_prefix == "artifacts/"


def test_local_override_wins(tmp_path):
    """
    O arquivo local é aplicado por deep-merge sobre os defaults.

    Invariantes:
        - Chaves sobrescritas refletem o local
        - Chaves não sobrescritas vêm dos defaults
    """
    defaults = tmp_path / "bridge.defaults.yaml"
    defaults.write_text(DEFAULTS_YAML, encoding="utf-8")
    local = tmp_path / "bridge.local.json"
    local.write_text(json.dumps({"source": {"branch": "release"}, "gate": {"timeout_seconds": 0.5}}))

    cfg = load_config(defaults_path=str(defaults), local_path=str(local))

    assert cfg["source"]["branch"] == "release"
    assert cfg["source"]["repo_owner"] == "aws-samples"
    assert cfg["gate"]["timeout_seconds"] == 0.5


def test_missing_local_file_is_ignored(tmp_path):
    defaults = tmp_path / "bridge.defaults.yaml"
    defaults.write_text(DEFAULTS_YAML, encoding="utf-8")

    cfg = load_config(defaults_path=str(defaults), local_path=str(tmp_path / "absent.yaml"))

    assert cfg["build"]["command"] == "mvn clean package -B"


def test_missing_defaults_raises(tmp_path):
    with pytest.raises(DefaultsNotFoundError):
        load_config(defaults_path=str(tmp_path / "nope.yaml"))


def test_unsupported_format(tmp_path):
    p = tmp_path / "bridge.toml"
    p.write_text("a = 1")
    with pytest.raises(UnsupportedConfigFormatError):
        load_config(defaults_path=str(p))


def test_non_mapping_root(tmp_path):
    p = tmp_path / "bridge.yaml"
    p.write_text("- a\n- b\n")
    with pytest.raises(InvalidConfigRootTypeError):
        load_config(defaults_path=str(p))


def test_empty_file_is_empty_mapping(tmp_path):
    p = tmp_path / "empty.yaml"
    p.write_text("")
    assert load_config(defaults_path=str(p)) == {}


def _write_defaults(tmp_path):
    defaults = tmp_path / "bridge.defaults.yaml"
    defaults.write_text(DEFAULTS_YAML, encoding="utf-8")
    return defaults


def test_accepts_path_objects(tmp_path):
    cfg = load_config(defaults_path=_write_defaults(tmp_path), local_path=tmp_path / "absent.yml")
    assert cfg["source"]["repo_name"] == "beam-taxi-consumer"


def test_in_memory_overrides_win_over_local(tmp_path):
    defaults = _write_defaults(tmp_path)
    local = tmp_path / "bridge.local.yml"
    local.write_text("source:\n  shared_secret: from-local\n  branch: release\n", encoding="utf-8")

    cfg = load_config(
        defaults_path=defaults,
        local_path=local,
        overrides={"source": {"shared_secret": "from-cli"}},
    )

    assert cfg["source"]["shared_secret"] == "from-cli"
    assert cfg["source"]["branch"] == "release"
    assert cfg["source"]["repo_owner"] == "aws-samples"


def test_overrides_do_not_mutate_caller_mapping(tmp_path):
    overrides = {"gate": {"timeout_seconds": 1}}
    load_config(defaults_path=_write_defaults(tmp_path), overrides=overrides)
    assert overrides == {"gate": {"timeout_seconds": 1}}


def test_override_type_conflict_raises(tmp_path):
    with pytest.raises(ConfigTypeConflictError):
        load_config(defaults_path=_write_defaults(tmp_path), overrides={"gate": "disabled"})


def test_missing_defaults_message_names_the_file(tmp_path):
    with pytest.raises(DefaultsNotFoundError, match="nope.yaml"):
        load_config(defaults_path=tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "name,content",
    [("bridge.yaml", "source: [unclosed"), ("bridge.json", "{not json")],
)
def test_unreadable_content_raises_parse_error(tmp_path, name, content):
    p = tmp_path / name
    p.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigParseError, match="defaults"):
        load_config(defaults_path=p)


def test_invalid_local_layer_is_named(tmp_path):
    local = tmp_path / "bridge.local.yaml"
    local.write_text("- secret\n", encoding="utf-8")
    with pytest.raises(InvalidConfigRootTypeError, match="local"):
        load_config(defaults_path=_write_defaults(tmp_path), local_path=local)
