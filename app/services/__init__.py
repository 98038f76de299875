"""서비스 패키지 — 이슈 워크플로우 비즈니스 로직.

Service package for the issue workflow.

Core (no database access, collaborators injected):
    status_graph, workflow_contracts, transition_service,
    workflow_step_service, approval_resolution_service

Application services (module-level singletons working on an AsyncSession):
    issue_service, workflow_service, notification_service
"""
