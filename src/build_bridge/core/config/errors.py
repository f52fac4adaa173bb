"""
Exceções canônicas da camada de configuração do Build Bridge.

As exceções aqui definidas representam **configurações inválidas de uma
implantação** (arquivo ausente, formato desconhecido, chave obrigatória
faltando), e não falhas de execução do pipeline.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa erro de estágio ou de sinalização

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não depende do Orchestrator, do gate ou do servidor HTTP
"""


class ConfigError(Exception):
    """
    Exceção base para erros de configuração do Build Bridge.

    Permite que o processo de implantação capture qualquer falha de
    configuração antes de provisionar o gate ou aceitar webhooks.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Arquivo de configuração base (defaults) não encontrado.

    Sem defaults não existe configuração efetiva: a implantação não
    tenta inferir repositório, segredo ou comando de build.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato do arquivo não suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """Conteúdo raiz da configuração não é um dicionário (`dict`)."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"gate": {"timeout_seconds": 300}}
        - override: {"gate": "disabled"}

    Nenhum merge parcial é produzido em caso de conflito.
    """


class MissingConfigKeyError(ConfigError):
    """
    Chave obrigatória ausente na configuração resolvida.

    Toda a superfície de configuração da bridge é obrigatória, exceto
    `source.branch` (default: "master") e as chaves suplementares.
    """


class InvalidConfigValueError(ConfigError):
    """Valor presente, mas com tipo ou faixa inválidos (ex.: timeout <= 0)."""


class ConfigParseError(ConfigError):
    """Arquivo com sufixo suportado, mas conteúdo YAML/JSON inválido."""
