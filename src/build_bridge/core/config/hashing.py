"""
Hashing canônico de configuração e de conteúdo.

Dois usos no Build Bridge:
    - identidade da configuração efetiva de uma implantação, gravada em
      `inputs.config_hash` do Manifest de cada execução
    - digest de conteúdo de artefatos (Artifact Store endereçado por conteúdo)

O segredo compartilhado do webhook nunca entra no hash: ele é removido
antes da serialização para que o Manifest possa ser publicado sem vazar
material de autenticação.

Política de hashing (v1):
    - Serialização JSON canônica (sort_keys, separadores compactos, UTF-8)
    - SHA-256, saída hexadecimal de 64 caracteres
"""


import hashlib
import json
from copy import deepcopy
from typing import Any, Dict, Mapping

REDACTED_KEYS = ("shared_secret",)


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: ("<redacted>" if k in REDACTED_KEYS else _redact(v))
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [_redact(v) for v in value]
    return value


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico da configuração efetiva.

    Configurações estruturalmente equivalentes produzem o mesmo hash,
    independentemente da ordem original das chaves. Chaves sensíveis
    (`REDACTED_KEYS`) são substituídas por um marcador antes do hash.

    Args:
        config (Dict[str, Any]): Configuração efetiva.

    Returns:
        str: Hash SHA-256 hexadecimal da configuração.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """

    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        _redact(deepcopy(config)),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )

    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()


def compute_content_digest(files: Mapping[str, bytes]) -> str:
    """SHA-256 sobre pares (nome, conteúdo) ordenados por nome."""
    h = hashlib.sha256()
    for name in sorted(files):
        h.update(name.encode("utf-8"))
        h.update(b"\0")
        h.update(hashlib.sha256(files[name]).digest())
    return h.hexdigest()
