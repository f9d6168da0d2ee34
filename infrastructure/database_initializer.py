# ============================================================================
# DATABASE INITIALIZER - INFRASTRUCTURE AS CODE
# ============================================================================
# STATUS: Infrastructure - Database initialization orchestrator
# PURPOSE: Bootstrap the document-store schema from Pydantic models
# CREATED: 18 OCT 2026
# ============================================================================
"""
DatabaseInitializer - Infrastructure as Code for the workflow store.

Provides a standardized workflow for initializing the document schema:
1. Connection test
2. Schema, document tables and indexes (generated by DocumentTableDDL)
3. Table verification

Pydantic models are the SINGLE SOURCE OF TRUTH for schema.
All statements are idempotent (IF NOT EXISTS), so re-running is safe.

Usage:
    from infrastructure import DatabaseInitializer

    initializer = DatabaseInitializer()
    result = initializer.initialize_all()

    # Dry run (show SQL without executing)
    result = initializer.initialize_all(dry_run=True)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import psycopg
from psycopg.rows import dict_row

from core.config import get_defaults
from core.schema import DocumentTableDDL, DOCUMENT_MODELS

logger = logging.getLogger(__name__)


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class StepResult:
    """Result of a single initialization step."""
    name: str
    status: str  # 'success', 'failed', 'skipped'
    message: str = ""
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class InitializationResult:
    """Complete result of database initialization."""
    schema_name: str
    timestamp: str
    success: bool
    steps: List[StepResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "schema_name": self.schema_name,
            "timestamp": self.timestamp,
            "success": self.success,
            "steps": [
                {
                    "name": s.name,
                    "status": s.status,
                    "message": s.message,
                    "error": s.error,
                    "details": s.details,
                }
                for s in self.steps
            ],
            "errors": self.errors,
            "warnings": self.warnings,
            "summary": {
                "total_steps": len(self.steps),
                "successful": len([s for s in self.steps if s.status == "success"]),
                "failed": len([s for s in self.steps if s.status == "failed"]),
                "skipped": len([s for s in self.steps if s.status == "skipped"]),
            },
        }


# ============================================================================
# DATABASE INITIALIZER
# ============================================================================

class DatabaseInitializer:
    """
    Database initialization orchestrator.

    Dry runs never open a connection.
    """

    def __init__(
        self,
        connection_string: Optional[str] = None,
        schema_name: Optional[str] = None,
    ):
        self.schema_name = schema_name or get_defaults().database.schema_name
        self._connection_string = connection_string
        self.generator = DocumentTableDDL(schema_name=self.schema_name)
        self.expected_tables = [m.__sql_table__ for m in DOCUMENT_MODELS]

    @property
    def connection_string(self) -> str:
        if self._connection_string is None:
            from repositories.database import get_connection_string
            self._connection_string = get_connection_string()
        return self._connection_string

    def _connect(self):
        return psycopg.connect(self.connection_string, row_factory=dict_row)

    def initialize_all(self, dry_run: bool = False) -> InitializationResult:
        """
        Initialize the document schema (synchronous).

        Args:
            dry_run: If True, render SQL but don't execute

        Returns:
            InitializationResult with detailed step results
        """
        result = InitializationResult(
            schema_name=self.schema_name,
            timestamp=datetime.now(timezone.utc).isoformat(),
            success=False,
        )

        logger.info("=" * 70)
        logger.info("WORKFLOW STORE - DATABASE INITIALIZATION")
        logger.info(f"   Schema: {self.schema_name}")
        logger.info(f"   Mode: {'DRY RUN' if dry_run else 'EXECUTE'}")
        logger.info("=" * 70)

        if not dry_run:
            step_result = self._test_connection()
            result.steps.append(step_result)
            if step_result.status == "failed":
                result.errors.append(f"Connection failed: {step_result.error}")
                return result

        step_result = self._deploy_schema(dry_run=dry_run)
        result.steps.append(step_result)
        if step_result.status == "failed":
            result.errors.append(f"Schema deployment failed: {step_result.error}")

        if not dry_run and step_result.status == "success":
            step_result = self._verify_tables()
            result.steps.append(step_result)
            if step_result.status == "failed":
                result.warnings.append(f"Verification issue: {step_result.error}")

        critical_failures = [
            s for s in result.steps
            if s.status == "failed" and s.name != "verify_tables"
        ]
        result.success = len(critical_failures) == 0

        summary = result.to_dict()["summary"]
        logger.info("=" * 70)
        logger.info(f"INITIALIZATION {'COMPLETE' if result.success else 'FAILED'}")
        logger.info(f"   Steps: {summary['successful']} succeeded, {summary['failed']} failed")
        if result.errors:
            logger.warning(f"   Errors: {result.errors}")
        logger.info("=" * 70)

        return result

    def _test_connection(self) -> StepResult:
        step = StepResult(name="test_connection", status="pending")
        logger.info("Step: Testing database connection...")

        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT version() AS version, current_database() AS db"
                ).fetchone()
            step.status = "success"
            step.message = f"Connected to {row['db']}"
            step.details = {"version": row["version"][:50] + "...", "database": row["db"]}
        except psycopg.Error as e:
            step.status = "failed"
            step.error = str(e)
            step.message = f"Connection failed: {e}"
            logger.error(f"Connection test failed: {e}")

        logger.info(f"   Result: {step.status} - {step.message}")
        return step

    def _deploy_schema(self, dry_run: bool = False) -> StepResult:
        step = StepResult(name="deploy_schema", status="pending")
        logger.info(f"Step: Deploying {self.schema_name} schema...")

        statements = self.generator.generate_all()

        if dry_run:
            rendered = [stmt.as_string(None) for stmt in statements]
            for i, stmt in enumerate(rendered, 1):
                logger.info(f"   [{i}] {stmt}")
            step.status = "success"
            step.message = f"[DRY RUN] Would execute {len(statements)} statements"
            step.details = {"statements": rendered}
            return step

        try:
            with self._connect() as conn:
                with conn.transaction():
                    for stmt in statements:
                        conn.execute(stmt)
            step.status = "success"
            step.message = f"Deployed {len(statements)} statements"
            step.details = {"statements_executed": len(statements), "schema": self.schema_name}
        except psycopg.Error as e:
            step.status = "failed"
            step.error = str(e)
            step.message = f"Schema deployment failed: {e}"
            logger.error(f"Schema deployment failed: {e}")

        logger.info(f"   Result: {step.status} - {step.message}")
        return step

    def _verify_tables(self) -> StepResult:
        step = StepResult(name="verify_tables", status="pending")
        logger.info("Step: Verifying tables...")

        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT table_name FROM information_schema.tables WHERE table_schema = %s",
                    (self.schema_name,),
                ).fetchall()
            existing = [r["table_name"] for r in rows]
            missing = [t for t in self.expected_tables if t not in existing]

            if missing:
                step.status = "failed"
                step.error = f"Missing tables: {missing}"
                step.message = f"Verification failed: {len(missing)} tables missing"
            else:
                step.status = "success"
                step.message = f"All {len(self.expected_tables)} expected tables exist"
            step.details = {"expected": self.expected_tables, "existing": existing, "missing": missing}
        except psycopg.Error as e:
            step.status = "failed"
            step.error = str(e)
            step.message = f"Verification failed: {e}"

        logger.info(f"   Result: {step.status} - {step.message}")
        return step


# ============================================================================
# CONVENIENCE FUNCTION
# ============================================================================

def initialize_database(dry_run: bool = False) -> InitializationResult:
    """Initialize the document schema. Convenience function for deployment scripts."""
    return DatabaseInitializer().initialize_all(dry_run=dry_run)


__all__ = [
    "DatabaseInitializer",
    "InitializationResult",
    "StepResult",
    "initialize_database",
]
