"""
Build Bridge: ponte entre um pipeline de build e um Completion Gate.

Um processo de provisionamento que só sabe esperar por um único sinal
externo opaco (o Completion Gate) observa, por meio desta ponte, o
resultado de um pipeline Source → Build → Publish → Notify que roda em
outro plano de controle.

Arquitetura em alto nível:
    - intake      → webhook do repositório (HMAC + branch)
    - core.engine → Orchestrator da sequência fixa de estágios
    - stages      → Source, Build, Publish, Notify
    - notifier    → Notifier Bridge (sinal ao gate + report do job)
    - gate        → Completion Gate de disparo único com timeout
    - server      → superfície HTTP (FastAPI)

Limites explícitos:
    - Não é um sistema de CI genérico: um pipeline linear por implantação
    - Sem retry além do timeout do gate
    - Sem deduplicação de execuções concorrentes
"""

__version__ = "0.1.0"
