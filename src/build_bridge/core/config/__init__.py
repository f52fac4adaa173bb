# src/build_bridge/core/config/__init__.py

"""
Camada de configuração do Build Bridge.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Validação da superfície de configuração (`BridgeConfig`)
    - Hash canônico da configuração para o Manifest de cada execução

Princípios fundamentais:
    - Configuração é passada explicitamente a cada componente
    - Nenhuma heurística implícita durante merge
    - A mesma entrada sempre produz a mesma configuração final
"""

from .errors import (
    ConfigError,
    ConfigParseError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidConfigValueError,
    MissingConfigKeyError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash, compute_content_digest
from .loader import load_config
from .merge import deep_merge
from .settings import BridgeConfig

__all__ = [
    "BridgeConfig",
    "ConfigError",
    "ConfigParseError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidConfigValueError",
    "MissingConfigKeyError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "compute_content_digest",
    "deep_merge",
    "load_config",
]
