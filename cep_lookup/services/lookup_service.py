import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

import httpx

from ..core.config import settings
from ..core.metrics import LOOKUP_COUNT, UPSTREAM_LATENCY
from ..core.utils import clean_cep
from ..data.base import Address, CepClient
from ..data.viacep_client import cep_client

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("cep", "logradouro", "bairro", "localidade", "uf")


class LookupErrorKind(str, Enum):
    """Closed set of lookup failures. The value is the user-facing message."""
    INVALID_FORMAT = "CEP deve conter exatamente 8 dígitos"
    NOT_FOUND = "CEP não encontrado"
    NETWORK_ERROR = "Erro de conexão. Verifique sua internet"
    INVALID_RESPONSE = "Resposta inválida do servidor"

    @property
    def message(self) -> str:
        return self.value


@dataclass(frozen=True)
class LookupResult:
    address: Optional[Address] = None
    error: Optional[LookupErrorKind] = None

    def __post_init__(self):
        if (self.address is None) == (self.error is None):
            raise ValueError("LookupResult needs exactly one of address or error")

    @classmethod
    def success(cls, address: Address) -> "LookupResult":
        return cls(address=address)

    @classmethod
    def failure(cls, kind: LookupErrorKind) -> "LookupResult":
        return cls(error=kind)

    @property
    def ok(self) -> bool:
        return self.address is not None


def is_valid_cep_response(data: Any) -> bool:
    """Every required ViaCEP field a non-empty string, uf exactly two letters."""
    if not isinstance(data, dict):
        return False
    if not all(isinstance(data.get(f), str) and data[f].strip() for f in REQUIRED_FIELDS):
        return False
    return len(data["uf"].strip()) == 2


def map_response_to_address(data: dict) -> Address:
    complement = data.get("complemento")
    return Address(
        cep=data["cep"],
        street=data["logradouro"],
        complement=complement if isinstance(complement, str) and complement else None,
        district=data["bairro"],
        city=data["localidade"],
        uf=data["uf"].strip(),
    )


class CepLookupService:
    """
    Orchestrates:
      raw input → digits check → time-bounded GET → classify → Address
    Expected failures come back as LookupResult.failure, never as exceptions.
    No retries: one failed attempt is final for that call.
    """
    def __init__(self, client: CepClient | None = None, timeout_ms: int | None = None):
        self.client = client or cep_client()
        self.timeout_ms = timeout_ms if timeout_ms is not None else settings.CEP_TIMEOUT_MS

    def _fail(self, kind: LookupErrorKind) -> LookupResult:
        LOOKUP_COUNT.labels(outcome=kind.name.lower()).inc()
        return LookupResult.failure(kind)

    async def fetch_address(self, raw_input: str) -> LookupResult:
        cep = clean_cep(raw_input)
        if len(cep) != 8:
            return self._fail(LookupErrorKind.INVALID_FORMAT)

        start = time.perf_counter()
        try:
            # wait_for cancels the in-flight request once the budget runs out
            data = await asyncio.wait_for(self.client.lookup(cep), timeout=self.timeout_ms / 1000)
        except asyncio.TimeoutError:
            logger.warning("ViaCEP lookup for %s timed out after %sms", cep, self.timeout_ms)
            return self._fail(LookupErrorKind.NETWORK_ERROR)
        except httpx.HTTPStatusError as exc:
            logger.warning("ViaCEP returned %s for %s", exc.response.status_code, cep)
            return self._fail(LookupErrorKind.NETWORK_ERROR)
        except httpx.HTTPError as exc:
            logger.warning("ViaCEP lookup for %s failed: %s", cep, exc.__class__.__name__)
            return self._fail(LookupErrorKind.NETWORK_ERROR)
        except ValueError:
            # Body was not JSON
            logger.warning("ViaCEP sent an unparseable body for %s", cep)
            return self._fail(LookupErrorKind.NETWORK_ERROR)
        finally:
            UPSTREAM_LATENCY.observe(time.perf_counter() - start)

        if isinstance(data, dict) and data.get("erro"):
            return self._fail(LookupErrorKind.NOT_FOUND)

        if not is_valid_cep_response(data):
            logger.warning("ViaCEP response for %s is missing required fields", cep)
            return self._fail(LookupErrorKind.INVALID_RESPONSE)

        LOOKUP_COUNT.labels(outcome="success").inc()
        return LookupResult.success(map_response_to_address(data))

    async def fetch_many(self, raw_inputs: Iterable[str]) -> list[LookupResult]:
        """One independent lookup per input, results in input order."""
        return list(await asyncio.gather(*(self.fetch_address(c) for c in raw_inputs)))
