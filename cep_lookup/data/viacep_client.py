import httpx
from .base import CepClient
from ..core.config import settings

class HttpViaCep(CepClient):
    """
    Client for the public ViaCEP API: GET <base>/<cep>/json/.
    `transport` lets tests swap in httpx.MockTransport.
    """
    def __init__(self, base_url: str, timeout: float = 5.0,
                 transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def lookup(self, cep: str):
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            r = await client.get(
                f"{self.base_url}/{cep}/json/",
                headers={"Accept": "application/json"},
            )
            r.raise_for_status()
            return r.json()

def cep_client(transport: httpx.AsyncBaseTransport | None = None) -> CepClient:
    return HttpViaCep(
        settings.VIACEP_BASE_URL,
        timeout=settings.CEP_TIMEOUT_MS / 1000,
        transport=transport,
    )
