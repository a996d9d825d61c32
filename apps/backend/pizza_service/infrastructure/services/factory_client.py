"""
============================================================
TARJETA CRC — infrastructure/services/factory_client.py
============================================================
Class: FactoryClient

Responsibilities:
  - Enviar una orden confirmada a la fábrica de pizzas (POST /api/order).
  - Devolver el JWT de la pizza y la URL de reporte.
  - Traducir respuestas no-2xx / errores de red en FactoryError.

Collaborators:
  - httpx (HTTP client, inyectable para tests con MockTransport)
  - domain.entities.Order / identity.users.User
  - crosscutting.metrics.record_factory_failure

Constraints / Notes:
  - Sin reintentos automáticos: crear una orden no es idempotente.
  - La API key viaja como `Authorization: Bearer <key>` y nunca se loguea.
============================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ...crosscutting.exceptions import FactoryError
from ...crosscutting.logger import logger
from ...crosscutting.metrics import record_factory_failure
from ...domain.entities import Order
from ...identity.users import User


@dataclass(frozen=True)
class FactoryOrderResult:
    """Respuesta exitosa de la fábrica."""

    jwt: str
    report_url: Optional[str] = None


class FactoryClient:
    """Cliente HTTP de la fábrica de pizzas."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def _payload(diner: User, order: Order) -> dict[str, Any]:
        return {
            "diner": {"id": diner.id, "name": diner.name, "email": diner.email},
            "order": order.to_dict(),
        }

    def create_order(self, diner: User, order: Order) -> FactoryOrderResult:
        try:
            response = self._client.post(
                f"{self._base_url}/api/order",
                json=self._payload(diner, order),
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as exc:
            record_factory_failure("network")
            logger.error(
                "factory request failed",
                extra={"order_id": order.id, "error": str(exc)},
            )
            raise FactoryError(
                "Failed to fulfill order at factory", original_error=exc
            ) from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        report_url = body.get("reportUrl") if isinstance(body, dict) else None

        if response.is_success and isinstance(body, dict) and body.get("jwt"):
            return FactoryOrderResult(jwt=body["jwt"], report_url=report_url)

        record_factory_failure("rejected")
        logger.error(
            "factory rejected order",
            extra={"order_id": order.id, "status": response.status_code},
        )
        raise FactoryError(
            "Failed to fulfill order at factory",
            report_url=report_url,
            status_code=response.status_code,
        )
