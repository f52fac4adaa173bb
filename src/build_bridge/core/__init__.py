"""
Core do Build Bridge.

Reúne as responsabilidades independentes de transporte: configuração,
contratos do pipeline, execução (Orchestrator) e rastreabilidade.

Componentes principais:
    - config       → carregamento, merge, hashing e validação (`BridgeConfig`)
    - pipeline     → contrato de estágio, tipos, RunContext e PipelineExecution
    - engine       → planner da cadeia linear, Orchestrator e JobLedger
    - traceability → Manifest e Event Log de cada execução

Limites explícitos:
    - Não conhece HTTP
    - Não implementa os estágios concretos
"""
