"""
Resolução da configuração de uma implantação do Build Bridge.

Camadas, da menor para a maior prioridade:

    1. defaults   arquivo versionado, obrigatório (repo, comando de build,
                  padrão do artefato, timeout do gate)
    2. local      arquivo opcional fora do controle de versão (segredo do
                  webhook, owner do repositório, base_url do gate)
    3. overrides  mapping em memória passado por quem monta a implantação
                  (testes, CLI); nunca lido do disco

Decisões:
    - Leitores por sufixo: YAML (.yaml/.yml) e JSON (.json)
    - Arquivo vazio vale `{}`; raiz que não é mapping é erro
    - Conteúdo ilegível vira `ConfigParseError` com o caminho do arquivo
    - As camadas são combinadas por `deep_merge`, sem mutar nenhuma delas

Limites explícitos:
    - Não valida semântica (papel de `BridgeConfig.from_dict`)
    - Não lê variáveis de ambiente
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, IO, Mapping, Optional, Union

import yaml  # PyYAML

from .errors import (
    ConfigParseError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge

PathLike = Union[str, Path]

_READERS: Dict[str, Callable[[IO[str]], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}


def _read_layer(path: Path, *, layer: str) -> Dict[str, Any]:
    reader = _READERS.get(path.suffix.lower())
    if reader is None:
        raise UnsupportedConfigFormatError(f"Formato não suportado na camada {layer}: {path.name}")

    try:
        with path.open("r", encoding="utf-8") as f:
            data = reader(f)
    except (yaml.YAMLError, ValueError) as e:
        raise ConfigParseError(f"Camada {layer} ilegível ({path}): {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Camada {layer} deve ser um mapping, recebido: {type(data).__name__}"
        )
    return data


def load_config(
    *,
    defaults_path: PathLike,
    local_path: Optional[PathLike] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Resolve a configuração efetiva: defaults ← local ← overrides.

    Um `local_path` informado mas inexistente é ignorado: a mesma
    implantação roda com ou sem o arquivo de segredos local.

    Raises:
        DefaultsNotFoundError: arquivo de defaults ausente.
        UnsupportedConfigFormatError: sufixo sem leitor.
        ConfigParseError: YAML/JSON inválido.
        InvalidConfigRootTypeError: raiz de uma camada não é mapping.
        ConfigTypeConflictError: conflito estrutural durante o merge.
    """
    defaults_file = Path(defaults_path)
    if not defaults_file.is_file():
        raise DefaultsNotFoundError(f"Arquivo de defaults não encontrado: {defaults_file}")

    effective = _read_layer(defaults_file, layer="defaults")

    if local_path is not None and Path(local_path).is_file():
        effective = deep_merge(effective, _read_layer(Path(local_path), layer="local"))

    if overrides:
        if not isinstance(overrides, Mapping):
            raise InvalidConfigRootTypeError(
                f"Camada overrides deve ser um mapping, recebido: {type(overrides).__name__}"
            )
        effective = deep_merge(effective, dict(overrides))

    return effective
