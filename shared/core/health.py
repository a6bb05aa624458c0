"""
Health and metrics endpoints for the storefront service.

Response bodies follow the draft "Health Check Response Format for HTTP APIs"
(``status`` of pass/warn/fail plus per-component ``checks``) so the same
probes work behind Kubernetes and load balancers.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from typing import Callable, Dict, Any, Optional
import os
import time
import redis
from datetime import datetime
from enum import Enum
import psutil
import logging

logger = logging.getLogger(__name__)

class HealthStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"

def _now() -> str:
    return datetime.utcnow().isoformat() + "Z"

def _component(status_val: HealthStatus, component_type: str, **fields) -> Dict[str, Any]:
    return {"status": status_val, "componentType": component_type, "time": _now(), **fields}

class ServiceHealth:
    """
    Builds the health router for one service.

    ``config_check`` returns the names of required settings that are missing;
    any name it returns fails the startup probe.
    """

    def __init__(
        self,
        service_name: str,
        version: str = "1.0.0",
        engine: Optional[Engine] = None,
        redis_url: Optional[str] = None,
        config_check: Optional[Callable[[], list[str]]] = None,
    ):
        self.service_name = service_name
        self.version = version
        self.engine = engine
        self.redis_url = redis_url
        self.config_check = config_check
        self.start_time = time.time()
        self.checks_performed = 0
        self.last_check_time: Optional[float] = None

    def create_health_router(self) -> APIRouter:
        router = APIRouter(tags=["health"])

        @router.get("/health", status_code=status.HTTP_200_OK)
        async def health_check() -> Dict[str, Any]:
            """Lightweight liveness check for load balancers"""
            return {
                "status": HealthStatus.PASS,
                "service": self.service_name,
                "version": self.version,
                "releaseId": os.getenv("RELEASE_ID", "unknown"),
                "timestamp": _now(),
            }

        @router.get("/health/live", status_code=status.HTTP_200_OK)
        async def liveness() -> Dict[str, Any]:
            return {"status": "alive"}

        @router.get("/health/ready")
        def readiness() -> JSONResponse:
            checks = self.readiness_checks()
            overall = self.overall_status(checks)
            # Degraded (warn) still takes traffic
            status_code = status.HTTP_503_SERVICE_UNAVAILABLE if overall == HealthStatus.FAIL else status.HTTP_200_OK
            return JSONResponse(status_code=status_code, content={
                "status": overall,
                "version": self.version,
                "releaseId": os.getenv("RELEASE_ID", "unknown"),
                "serviceId": self.service_name,
                "description": f"{self.service_name} readiness",
                "checks": checks,
                "timestamp": _now(),
            })

        @router.get("/health/startup")
        def startup() -> JSONResponse:
            checks = self.startup_checks()
            if self.overall_status(checks) == HealthStatus.FAIL:
                return JSONResponse(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                    content={"status": "starting", "checks": checks},
                )
            return JSONResponse(status_code=status.HTTP_200_OK, content={"status": "started", "checks": checks})

        @router.get("/metrics")
        async def metrics() -> Dict[str, Any]:
            process = psutil.Process()
            memory = process.memory_info()
            return {
                "service": self.service_name,
                "version": self.version,
                "uptime_seconds": time.time() - self.start_time,
                "checks_performed": self.checks_performed,
                "timestamp": _now(),
                "system": {
                    "memory_rss_bytes": memory.rss,
                    "memory_vms_bytes": memory.vms,
                    "cpu_percent": process.cpu_percent(),
                    "num_threads": process.num_threads(),
                },
            }

        return router

    def readiness_checks(self) -> Dict[str, Dict[str, Any]]:
        self.checks_performed += 1
        self.last_check_time = time.time()

        checks = {"database:connectivity": self._check_database()}
        if self.redis_url:
            checks["cache:connectivity"] = self._check_redis()
        checks["storage:disk_space"] = self._check_disk_space()
        checks["system:memory"] = self._check_memory()
        return checks

    def startup_checks(self) -> Dict[str, Dict[str, Any]]:
        return {
            "database:migrations": self._check_migrations(),
            "config:environment": self._check_configuration(),
        }

    def _check_database(self) -> Dict[str, Any]:
        if self.engine is None:
            return _component(HealthStatus.WARN, "datastore", output="No database engine configured")
        try:
            start_time = time.time()
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1")).fetchone()
            elapsed = (time.time() - start_time) * 1000
            return _component(HealthStatus.PASS, "datastore", observedValue=f"{elapsed:.2f}", observedUnit="ms")
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return _component(HealthStatus.FAIL, "datastore", output=str(e))

    def _check_redis(self) -> Dict[str, Any]:
        try:
            start_time = time.time()
            redis.from_url(self.redis_url, socket_connect_timeout=1).ping()
            elapsed = (time.time() - start_time) * 1000
            return _component(HealthStatus.PASS, "cache", observedValue=f"{elapsed:.2f}", observedUnit="ms")
        except Exception as e:
            # The token cache falls back to process memory
            return _component(HealthStatus.WARN, "cache", output=str(e))

    def _check_disk_space(self) -> Dict[str, Any]:
        try:
            free_gb = psutil.disk_usage('/').free / (1024 ** 3)
        except OSError as e:
            return _component(HealthStatus.WARN, "system", output=str(e))
        if free_gb < 1:
            status_val = HealthStatus.FAIL
        elif free_gb < 5:
            status_val = HealthStatus.WARN
        else:
            status_val = HealthStatus.PASS
        return _component(status_val, "system", observedValue=f"{free_gb:.2f}", observedUnit="GB")

    def _check_memory(self) -> Dict[str, Any]:
        available_mb = psutil.virtual_memory().available / (1024 ** 2)
        if available_mb < 100:
            status_val = HealthStatus.FAIL
        elif available_mb < 500:
            status_val = HealthStatus.WARN
        else:
            status_val = HealthStatus.PASS
        return _component(status_val, "system", observedValue=f"{available_mb:.2f}", observedUnit="MB")

    def _check_migrations(self) -> Dict[str, Any]:
        if self.engine is None:
            return _component(HealthStatus.WARN, "datastore", output="No database engine configured")
        try:
            if inspect(self.engine).has_table("alembic_version"):
                return _component(HealthStatus.PASS, "datastore")
            return _component(HealthStatus.WARN, "datastore", output="Migrations table not found")
        except Exception as e:
            return _component(HealthStatus.FAIL, "datastore", output=str(e))

    def _check_configuration(self) -> Dict[str, Any]:
        missing = self.config_check() if self.config_check else []
        if missing:
            return _component(
                HealthStatus.FAIL,
                "configuration",
                output=f"Missing configuration: {', '.join(missing)}",
            )
        return _component(HealthStatus.PASS, "configuration")

    @staticmethod
    def overall_status(checks: Dict[str, Dict[str, Any]]) -> HealthStatus:
        statuses = [check.get("status", HealthStatus.PASS) for check in checks.values()]
        if HealthStatus.FAIL in statuses:
            return HealthStatus.FAIL
        if HealthStatus.WARN in statuses:
            return HealthStatus.WARN
        return HealthStatus.PASS
