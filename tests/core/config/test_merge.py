# tests/core/config/test_merge.py
"""
Testes da política de deep-merge de configuração.

Os testes asseguram que:
- valores escalares são sobrescritos
- dicionários são mesclados recursivamente
- listas são substituídas integralmente
- conflitos de tipo são rejeitados (exceto int/float)
- as entradas não são mutadas

Limites explícitos:
    - Não valida leitura de arquivos
    - Não valida `BridgeConfig`
"""

import pytest

try:
    from build_bridge.core.config.merge import deep_merge
    from build_bridge.core.config.errors import ConfigTypeConflictError
except Exception as e:  # noqa: BLE001
    deep_merge = None
    ConfigTypeConflictError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require():
    if deep_merge is None:
        pytest.fail(f"Missing deep_merge. Import error: {_IMPORT_ERR}")


def test_merge_overrides_scalar_without_mutating_inputs():
    """
    Override de escalar substitui o valor e preserva as demais chaves.

    Invariantes:
        - `base` e `override` não sofrem mutação
        - Chaves ausentes no override permanecem
    """
    _require()
    base = {"source": {"branch": "master", "repo_name": "r"}}
    override = {"source": {"branch": "main"}}

    out = deep_merge(base, override)

    assert out == {"source": {"branch": "main", "repo_name": "r"}}
    assert base == {"source": {"branch": "master", "repo_name": "r"}}
    assert override == {"source": {"branch": "main"}}


def test_merge_replaces_lists():
    _require()
    out = deep_merge({"a": [1, 2, 3]}, {"a": [9]})
    assert out == {"a": [9]}


def test_merge_accepts_int_float_interchange():
    """Um timeout de teste `0.5` pode sobrescrever o default `300`."""
    _require()
    out = deep_merge({"gate": {"timeout_seconds": 300}}, {"gate": {"timeout_seconds": 0.5}})
    assert out["gate"]["timeout_seconds"] == 0.5


def test_merge_fills_none_base_value():
    _require()
    out = deep_merge({"engine": {"manifest_dir": None}}, {"engine": {"manifest_dir": "runs/"}})
    assert out["engine"]["manifest_dir"] == "runs/"


def test_merge_type_conflict_is_fatal():
    _require()
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"build": {"command": "mvn"}}, {"build": {"command": 1}})


def test_merge_bool_is_not_a_number():
    _require()
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"gate": {"timeout_seconds": 300}}, {"gate": {"timeout_seconds": True}})
