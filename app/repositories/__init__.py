"""레포지토리 패키지 — SQLAlchemy 쿼리 계층.

Repository package. One module-level repository per table, all built on
BaseRepository, plus workflow_stores which adapts them to the store
contracts of the workflow core.
"""
